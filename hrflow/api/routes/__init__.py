from fastapi import FastAPI

from .health import router as health_router
from .requests import router as requests_router


def register_routes(app: FastAPI):
    app.include_router(health_router, prefix="/v1")
    app.include_router(requests_router, prefix="/v1")
