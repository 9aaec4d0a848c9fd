"""Directory schema exports.

Rather than importing from individual schema files, you can
import everything from dabox.schemas.
"""

from dabox.schemas.directory import (
    ROOT_LOOKUP_SID,
    CreateDirectoryRequest,
    DirectoryNode,
    RenameDirectoryRequest,
)

from dabox.schemas.result import (
    ApiError,
    ApiErrorKind,
    ApiResult,
    Ok,
)

__all__ = [
    # Directory
    "ROOT_LOOKUP_SID",
    "DirectoryNode",
    "CreateDirectoryRequest",
    "RenameDirectoryRequest",
    # Results
    "ApiError",
    "ApiErrorKind",
    "ApiResult",
    "Ok",
]
