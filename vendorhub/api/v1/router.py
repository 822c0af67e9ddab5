from fastapi import APIRouter

from vendorhub.api.v1.endpoints.health import router as health_router
from vendorhub.api.v1.endpoints.form_schema_admin import router as form_schema_router
from vendorhub.api.v1.endpoints.vendors_admin import router as vendors_router
from vendorhub.api.v1.endpoints.edit_requests import router as edit_requests_router
from vendorhub.api.v1.endpoints.agents import router as agents_router


router = APIRouter(prefix="/v1")
router.include_router(health_router, tags=["health"])
router.include_router(form_schema_router, tags=["form-schema"])
router.include_router(vendors_router, tags=["vendors"])
router.include_router(edit_requests_router, tags=["edit-requests"])
router.include_router(agents_router, tags=["agents"])
