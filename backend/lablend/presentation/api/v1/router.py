"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from lablend.presentation.api.v1.endpoints.health import router as health_router
from lablend.presentation.api.v1.endpoints.users import router as users_router
from lablend.presentation.api.v1.endpoints.assets import router as assets_router
from lablend.presentation.api.v1.endpoints.lend_records import router as lend_records_router
from lablend.presentation.api.v1.endpoints.imports import router as imports_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(users_router)
router.include_router(assets_router)
router.include_router(lend_records_router)
router.include_router(imports_router)
