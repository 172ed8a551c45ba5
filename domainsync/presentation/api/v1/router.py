"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from domainsync.presentation.api.v1.endpoints.health import router as health_router
from domainsync.presentation.api.v1.endpoints.domains import router as domains_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(domains_router)
