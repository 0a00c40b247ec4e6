from fastapi import APIRouter

from shelfy.api.v1.auth import router as auth_router
from shelfy.api.v1.groups import router as groups_router
from shelfy.api.v1.health import router as health_router
from shelfy.api.v1.join_requests import router as join_requests_router

router = APIRouter()

# Public
router.include_router(health_router)
router.include_router(auth_router)

# Protected (auth enforced per-endpoint)
router.include_router(groups_router)
router.include_router(join_requests_router)
