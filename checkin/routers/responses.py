from fastapi import HTTPException, status

from checkin.services.result import ErrorKind, ServiceResult

STATUS_BY_KIND = {
    ErrorKind.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.PERMISSION_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.DUPLICATE_KEY: status.HTTP_409_CONFLICT,
    ErrorKind.POLICY_VIOLATION: 422,
    ErrorKind.UNKNOWN: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def unwrap(result: ServiceResult):
    """Return the result's data or raise the matching HTTPException."""
    if result.is_success:
        return result.data

    detail = result.error.to_dict()
    detail["partial"] = result.partial
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(result.error.kind, 500), detail=detail
    )


def envelope(result: ServiceResult) -> dict:
    """Successful result with its message and metadata kept for the client."""
    data = unwrap(result)
    return {
        "data": data,
        "message": result.message,
        "partial": result.partial,
        "metadata": result.metadata,
    }
