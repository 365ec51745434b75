from fastapi import APIRouter

from .endpoints import courtesies, health, observability

router = APIRouter()
router.include_router(health.router, tags=["Health"])
router.include_router(observability.router)
router.include_router(courtesies.router)
