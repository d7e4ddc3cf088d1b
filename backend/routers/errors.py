import logging

from fastapi import HTTPException, status

from services.exceptions import (
    BillingError,
    ConcurrencyConflict,
    InsufficientStock,
    NotFound,
    StorageError,
    ValidationError,
)

logger = logging.getLogger("api_errors")


def to_http_exception(e: BillingError) -> HTTPException:
    """Map a domain error onto the status code the API reports for it."""
    if isinstance(e, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, ConcurrencyConflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    if isinstance(e, StorageError):
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors)
    if isinstance(e, InsufficientStock):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={
            "message": e.message,
            "stockId": e.item_id,
            "available": e.available,
            "requested": e.requested,
        })
    # EmptyCart, InvalidDiscount and any other business rule
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
