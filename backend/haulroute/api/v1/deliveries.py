from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from haulroute.api.v1.dependencies import current_user_id, get_service, to_http_error
from haulroute.schemas.deliveries import (
    DeliveryCreateRequest,
    DeliveryListResponse,
    DeliveryResponse,
)
from haulroute.services.delivery_service import (
    DeliveryDraft,
    DeliveryError,
    DeliveryService,
)


router = APIRouter()


@router.post(
    "/", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED
)
async def create_delivery(
    payload: DeliveryCreateRequest,
    user_id: str = Depends(current_user_id),
    service: DeliveryService = Depends(get_service),
) -> DeliveryResponse:
    draft = DeliveryDraft(
        cargo=payload.to_cargo(),
        coordinate=payload.location.to_domain() if payload.location else None,
        address=payload.pickup_address,
        details=payload.details,
    )
    try:
        stop = await service.create_delivery(user_id, draft)
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return DeliveryResponse.from_domain(stop)


@router.get("/", response_model=DeliveryListResponse)
async def list_deliveries(
    status_filter: Literal["pending", "accepted"] | None = Query(
        default=None, alias="status"
    ),
    service: DeliveryService = Depends(get_service),
) -> DeliveryListResponse:
    stops = await service.list_deliveries(status_filter)
    return DeliveryListResponse(
        deliveries=[DeliveryResponse.from_domain(stop) for stop in stops]
    )
