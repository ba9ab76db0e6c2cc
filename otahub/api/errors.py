from fastapi import HTTPException, status

from otahub.services.errors import NotFound, OTAError, StoreFailure, ValidationFailed, VersionConflict

_STATUS_BY_ERROR = {
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    VersionConflict: status.HTTP_409_CONFLICT,
    NotFound: status.HTTP_404_NOT_FOUND,
    StoreFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def to_http_exception(exc: OTAError, expose_internal: bool = True) -> HTTPException:
    """Map a domain error onto an HTTP error.

    Store failures keep their diagnostic message only when ``expose_internal``
    is set, which admin endpoints do and public endpoints do not.
    """
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500 and not expose_internal:
        return HTTPException(status_code=status_code, detail="Internal server error")
    return HTTPException(status_code=status_code, detail=str(exc))
