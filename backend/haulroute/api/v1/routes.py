from __future__ import annotations

from fastapi import APIRouter, Depends, status

from haulroute.api.v1.dependencies import current_user_id, get_service, to_http_error
from haulroute.schemas.routes import (
    RouteListResponse,
    RoutePlanRequest,
    RouteResponse,
)
from haulroute.services.delivery_service import DeliveryError, DeliveryService


router = APIRouter()


@router.post(
    "/plan",
    response_model=RouteResponse,
    status_code=status.HTTP_200_OK,
)
async def plan_route(
    payload: RoutePlanRequest,
    user_id: str = Depends(current_user_id),
    service: DeliveryService = Depends(get_service),
) -> RouteResponse:
    try:
        route = await service.plan_route(
            user_id, payload.origin.to_domain(), title=payload.title
        )
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return RouteResponse.from_domain(route)


@router.get("/", response_model=RouteListResponse)
async def list_routes(
    service: DeliveryService = Depends(get_service),
) -> RouteListResponse:
    routes = await service.list_routes()
    return RouteListResponse(routes=[RouteResponse.from_domain(r) for r in routes])


@router.get("/{route_id}", response_model=RouteResponse)
async def get_route(
    route_id: str, service: DeliveryService = Depends(get_service)
) -> RouteResponse:
    try:
        route = await service.get_route(route_id)
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return RouteResponse.from_domain(route)


@router.post("/{route_id}/accept", response_model=RouteResponse)
async def accept_route(
    route_id: str,
    user_id: str = Depends(current_user_id),
    service: DeliveryService = Depends(get_service),
) -> RouteResponse:
    try:
        route = await service.accept_route(user_id, route_id)
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return RouteResponse.from_domain(route)
