"""Router API v1 — agrega todos os sub-routers."""

from fastapi import APIRouter

from sibol.presentation.api.v1.endpoints.maintenance import router as maintenance_router
from sibol.presentation.api.v1.endpoints.notifications import router as notifications_router

api_v1_router = APIRouter()

api_v1_router.include_router(maintenance_router, prefix="/maintenance", tags=["🛠️ Manutenção"])
api_v1_router.include_router(notifications_router, prefix="/notifications", tags=["🔔 Notificações"])
