from typing import Iterator

from fastapi import HTTPException, status

from ou_provisioner.core.config import settings
from ou_provisioner.core.exceptions import TransportError
from ou_provisioner.services.directory import DirectorySession


def get_directory_session() -> Iterator[DirectorySession]:
    """Open a directory session for the duration of one request."""
    try:
        session = DirectorySession.connect(settings)
    except TransportError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)
        ) from e
    try:
        yield session
    finally:
        session.close()
