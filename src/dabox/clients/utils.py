"""HTTP helpers shared by the typed store clients.

Each ``call_*`` helper issues one request and returns the raw response when
the store answered with a 2xx status. Anything else is raised as a
``DirectoryApiException`` carrying the mapped ``ApiError``, so the typed
clients can convert it into a result in one place.
"""

from typing import Any, Mapping, Optional

from httpx import AsyncClient, RequestError, Response
from loguru import logger

from dabox.schemas.result import ApiError, ApiErrorKind


class DirectoryApiException(Exception):
    """Raised by the call_* helpers when a store call fails."""

    def __init__(self, error: ApiError):
        super().__init__(str(error))
        self.error = error


def has_payload(response: Response) -> bool:
    """Return False for responses that carry no body.

    A ``Content-Length: 0`` header or zero bytes of content both mean
    "no payload" and must never reach the JSON decoder.
    """
    if response.headers.get("content-length") == "0":
        return False
    return bool(response.content)


def error_from_response(response: Response) -> ApiError:
    """Map a non-2xx response to an ApiError."""
    kind = ApiErrorKind.from_status(response.status_code)
    message = response.text.strip() if has_payload(response) else ""
    return ApiError(
        kind=kind,
        status=response.status_code,
        message=message or response.reason_phrase or "Unknown error",
    )


async def _call(
    client: AsyncClient,
    method: str,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    json: Any = None,
) -> Response:
    logger.debug(f"Calling {method} {url}")
    try:
        response = await client.request(method, url, headers=headers, json=json)
    except RequestError as e:
        logger.warning(f"{method} {url} did not reach the store: {e!r}")
        raise DirectoryApiException(
            ApiError(kind=ApiErrorKind.TRANSPORT_ERROR, message=str(e) or type(e).__name__)
        ) from e

    if response.is_success:
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    error = error_from_response(response)
    logger.info(f"{method} {url} failed: {error.kind.value} ({response.status_code})")
    raise DirectoryApiException(error)


async def call_get(
    client: AsyncClient, url: str, *, headers: Optional[Mapping[str, str]] = None
) -> Response:
    return await _call(client, "GET", url, headers=headers)


async def call_post(
    client: AsyncClient,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    json: Any = None,
) -> Response:
    return await _call(client, "POST", url, headers=headers, json=json)


async def call_put(
    client: AsyncClient,
    url: str,
    *,
    headers: Optional[Mapping[str, str]] = None,
    json: Any = None,
) -> Response:
    return await _call(client, "PUT", url, headers=headers, json=json)


async def call_delete(
    client: AsyncClient, url: str, *, headers: Optional[Mapping[str, str]] = None
) -> Response:
    return await _call(client, "DELETE", url, headers=headers)
