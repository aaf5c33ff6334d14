from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from haulroute.api.v1.dependencies import current_user_id, get_service, to_http_error
from haulroute.schemas.users import (
    PreferencesPayload,
    UserCreateRequest,
    UserResponse,
)
from haulroute.services.delivery_service import DeliveryError, DeliveryService


router = APIRouter()


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreateRequest,
    service: DeliveryService = Depends(get_service),
) -> UserResponse:
    user = await service.register_user(payload.user_id, payload.role)
    return UserResponse(user_id=user.user_id, role=user.role)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str, service: DeliveryService = Depends(get_service)
) -> UserResponse:
    try:
        user = await service.get_user(user_id)
    except DeliveryError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
    return UserResponse(user_id=user.user_id, role=user.role)


@router.put("/{user_id}/preferences", response_model=PreferencesPayload)
async def save_preferences(
    user_id: str,
    payload: PreferencesPayload,
    caller_id: str = Depends(current_user_id),
    service: DeliveryService = Depends(get_service),
) -> PreferencesPayload:
    _require_self(caller_id, user_id)
    try:
        prefs = await service.save_preferences(user_id, payload.to_domain())
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return PreferencesPayload.from_domain(prefs)


@router.get("/{user_id}/preferences", response_model=PreferencesPayload)
async def get_preferences(
    user_id: str,
    caller_id: str = Depends(current_user_id),
    service: DeliveryService = Depends(get_service),
) -> PreferencesPayload:
    _require_self(caller_id, user_id)
    try:
        prefs = await service.get_preferences(user_id)
    except DeliveryError as exc:
        raise to_http_error(exc) from exc
    return PreferencesPayload.from_domain(prefs)


def _require_self(caller_id: str, user_id: str) -> None:
    if caller_id != user_id:
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, "Preferences belong to another user"
        )
