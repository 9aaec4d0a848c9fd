"""Services for dabox."""

from dabox.services.directory_service import DirectoryTree, EditKind, PendingEdit
from dabox.services.initialization import RootAcquisition, RootState

__all__ = [
    "DirectoryTree",
    "EditKind",
    "PendingEdit",
    "RootAcquisition",
    "RootState",
]
