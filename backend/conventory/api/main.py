from fastapi import APIRouter

from conventory.api.routes import health, setup

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(setup.router)
