from __future__ import annotations

from fastapi import APIRouter

from haulroute.api.v1 import deliveries, routes, users

router = APIRouter()
router.include_router(users.router, prefix="/v1/users", tags=["users"])
router.include_router(
    deliveries.router, prefix="/v1/deliveries", tags=["deliveries"]
)
router.include_router(routes.router, prefix="/v1/routes", tags=["routes"])
