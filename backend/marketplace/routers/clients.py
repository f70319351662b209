from fastapi import APIRouter

from marketplace.models import Booking, Client, ClientCreateRequest
from marketplace.routers.common import raise_marketplace_http_error
from marketplace.services.marketplace_store import MarketplaceError, marketplace_store

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=Client)
def create_client(request: ClientCreateRequest):
    try:
        return marketplace_store.create_client(name=request.name, contact_info=request.contact_info)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("/{client_id}", response_model=Client)
def get_client(client_id: str):
    try:
        return marketplace_store.get_client(client_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)


@router.get("/{client_id}/bookings", response_model=list[Booking])
def client_history(client_id: str):
    try:
        return marketplace_store.get_client_history(client_id)
    except MarketplaceError as exc:
        raise_marketplace_http_error(exc)
