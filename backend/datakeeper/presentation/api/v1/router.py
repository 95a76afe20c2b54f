"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from datakeeper.presentation.api.v1.endpoints.health import router as health_router
from datakeeper.presentation.api.v1.endpoints.company import router as company_router
from datakeeper.presentation.api.v1.endpoints.clients import router as clients_router
from datakeeper.presentation.api.v1.endpoints.data_versions import router as data_versions_router
from datakeeper.presentation.api.v1.endpoints.backups import router as backups_router
from datakeeper.presentation.api.v1.endpoints.events import router as events_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(company_router)
router.include_router(clients_router)
router.include_router(data_versions_router)
router.include_router(backups_router)
router.include_router(events_router)
