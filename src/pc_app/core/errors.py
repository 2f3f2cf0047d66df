from __future__ import annotations

from fastapi import HTTPException, status


class PcAppError(Exception):
    """Base application exception."""

    pass


class BadRequest(PcAppError):
    pass


class NotFound(PcAppError):
    pass


class Conflict(PcAppError):
    pass


class DecodeFailure(PcAppError):
    """Image bytes could not be decoded into pixels."""


class PreviewNotFound(NotFound):
    """No embedded preview above the size floor (or it did not decode)."""


class SourceMissing(NotFound):
    """File vanished between enumeration and a move."""


class SidecarInconsistency(PcAppError):
    """Trash file without metadata, or metadata without file."""


class ScanAlreadyInProgress(Conflict):
    pass


def to_http(exc: Exception) -> HTTPException:
    """
    Convert our exceptions to HTTPException with sensible defaults.
    """
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, BadRequest):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PcAppError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        )
    # Fallback
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)
    )
