"""Typed client for directory store operations.

Encapsulates all /directory endpoints.
"""

from typing import Optional

from httpx import AsyncClient, Response
from loguru import logger
from pydantic import ValidationError

from dabox.clients.utils import (
    DirectoryApiException,
    call_delete,
    call_get,
    call_post,
    call_put,
    has_payload,
)
from dabox.config import DEFAULT_IDENTITY_HEADER
from dabox.schemas.directory import (
    CreateDirectoryRequest,
    DirectoryNode,
    RenameDirectoryRequest,
)
from dabox.schemas.result import ApiError, ApiErrorKind, ApiResult, Ok
from dabox.utils import identity_header_value


class DirectoryClient:
    """Typed client for directory operations.

    Centralizes:
    - API path construction for /directory
    - The identity header scoping every call to one user's namespace
    - Response validation via Pydantic models
    - Conversion of failures into ApiError results

    Usage:
        async with get_client() as http_client:
            client = DirectoryClient(http_client, user_id)
            result = await client.fetch(ROOT_LOOKUP_SID)
    """

    def __init__(
        self,
        http_client: AsyncClient,
        user_id: int,
        identity_header: str = DEFAULT_IDENTITY_HEADER,
    ):
        """Initialize the directory client.

        Args:
            http_client: HTTPX AsyncClient whose base_url points at the store
            user_id: Identity token of the caller
            identity_header: Header name the store reads the identity from
        """
        self.http_client = http_client
        self.user_id = user_id
        self._base_path = "/directory"
        self._headers = {identity_header: identity_header_value(user_id)}

    async def fetch(self, sid: int) -> ApiResult[DirectoryNode]:
        """Fetch a directory with its full subtree.

        Args:
            sid: Directory id, or ROOT_LOOKUP_SID for the caller's root

        Returns:
            Ok with the DirectoryNode, or an ApiError
        """
        try:
            response = await call_get(
                self.http_client, f"{self._base_path}/{sid}", headers=self._headers
            )
        except DirectoryApiException as e:
            return e.error
        return self._decode_node(response)

    async def create(self, name: str, parent: Optional[int] = None) -> ApiResult[DirectoryNode]:
        """Create a directory.

        Args:
            name: Display name of the new directory
            parent: Parent directory id, None to create at the namespace root

        Returns:
            Ok with the created DirectoryNode (store-assigned sid), or an ApiError
        """
        request = CreateDirectoryRequest(name=name, parent=parent)
        try:
            response = await call_post(
                self.http_client,
                self._base_path,
                headers=self._headers,
                json=request.to_payload(),
            )
        except DirectoryApiException as e:
            return e.error
        return self._decode_node(response)

    async def rename(self, sid: int, name: str) -> ApiResult[DirectoryNode]:
        """Rename a directory.

        Returns:
            Ok with the updated DirectoryNode, or an ApiError
        """
        request = RenameDirectoryRequest(name=name)
        try:
            response = await call_put(
                self.http_client,
                f"{self._base_path}/{sid}",
                headers=self._headers,
                json=request.to_payload(),
            )
        except DirectoryApiException as e:
            return e.error
        return self._decode_node(response)

    async def delete(self, sid: int) -> ApiResult[None]:
        """Delete a directory and, store side, its subtree.

        The store answers with an empty body. Any body is ignored.

        Returns:
            Ok(None), or an ApiError
        """
        try:
            response = await call_delete(
                self.http_client, f"{self._base_path}/{sid}", headers=self._headers
            )
        except DirectoryApiException as e:
            return e.error
        if has_payload(response):
            logger.debug(f"Ignoring {len(response.content)} byte body on delete of {sid}")
        return Ok(None)

    @staticmethod
    def _decode_node(response: Response) -> ApiResult[DirectoryNode]:
        if not has_payload(response):
            return ApiError(
                kind=ApiErrorKind.INTERNAL_ERROR,
                status=response.status_code,
                message="malformed response: empty body",
            )
        try:
            return Ok(DirectoryNode.model_validate_json(response.content))
        except ValidationError as e:
            logger.warning(f"Malformed directory payload: {e}")
            return ApiError(
                kind=ApiErrorKind.INTERNAL_ERROR,
                status=response.status_code,
                message="malformed response",
            )
