from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shelfy.api.v1.router import router as v1_router
from shelfy.core.config import settings
from shelfy.core.logging import configure_logging

configure_logging()

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(v1_router, prefix="/api/v1")
