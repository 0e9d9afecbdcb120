from fastapi import APIRouter

from app.wmtables.routers.health import router as health_router
from app.wmtables.routers.tables import router as tables_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(tables_router, tags=["tables"])
