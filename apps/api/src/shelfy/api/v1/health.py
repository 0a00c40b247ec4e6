from fastapi import APIRouter

from shelfy.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"ok": True, "app": settings.APP_NAME, "env": settings.APP_ENV}
