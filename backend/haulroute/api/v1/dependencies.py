from __future__ import annotations

from fastapi import Header, HTTPException, status

from haulroute.core.config import get_settings
from haulroute.services.delivery_service import (
    DeliveryError,
    DeliveryService,
    RoleNotPermitted,
    RouteNotAssigned,
    RouteNotFound,
    StopUnavailable,
    UserNotFound,
    get_delivery_service,
)


def get_service() -> DeliveryService:
    settings = get_settings()
    return get_delivery_service(
        settings.storage_root,
        price_per_stop=settings.price_per_stop,
        country_source=settings.country_source,
    )


def current_user_id(x_user_id: str = Header(..., min_length=1)) -> str:
    return x_user_id.strip()


def to_http_error(exc: DeliveryError) -> HTTPException:
    if isinstance(exc, UserNotFound):
        return HTTPException(status.HTTP_401_UNAUTHORIZED, str(exc))
    if isinstance(exc, (RoleNotPermitted, RouteNotAssigned)):
        return HTTPException(status.HTTP_403_FORBIDDEN, str(exc))
    if isinstance(exc, RouteNotFound):
        return HTTPException(status.HTTP_404_NOT_FOUND, str(exc))
    if isinstance(exc, StopUnavailable):
        return HTTPException(status.HTTP_409_CONFLICT, str(exc))
    return HTTPException(status.HTTP_400_BAD_REQUEST, str(exc))
