from fastapi import HTTPException

from brewhaven.errors import (
    BrewHavenException,
    ChatProviderError,
    InsufficientInventory,
    InvalidStatusTransition,
    NotFound,
    StorageError,
    UnauthorizedError,
    ValidationError,
)


def http_error(e: BrewHavenException) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, UnauthorizedError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, InsufficientInventory):
        return HTTPException(
            status_code=409,
            detail={"message": str(e), "product_id": e.product_id, "available": e.available},
        )
    if isinstance(e, InvalidStatusTransition):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, StorageError):
        return HTTPException(status_code=503, detail=str(e))
    if isinstance(e, ChatProviderError):
        return HTTPException(status_code=e.status_code, detail=e.message)
    return HTTPException(status_code=500, detail="Internal error")
