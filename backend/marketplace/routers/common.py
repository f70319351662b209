from typing import NoReturn

from fastapi import HTTPException

from marketplace.services.marketplace_store import (
    MarketplaceAvailabilityError,
    MarketplaceError,
    MarketplaceNotFoundError,
    MarketplaceStateError,
)


def raise_marketplace_http_error(exc: MarketplaceError) -> NoReturn:
    if isinstance(exc, MarketplaceNotFoundError):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (MarketplaceStateError, MarketplaceAvailabilityError)):
        raise HTTPException(status_code=409, detail=str(exc))
    raise HTTPException(status_code=400, detail=str(exc))
