from fastapi import APIRouter

from .tables import router as tables_router
from .records import router as records_router
from .imports import router as imports_router

api_router = APIRouter()

api_router.include_router(tables_router)
api_router.include_router(records_router)
api_router.include_router(imports_router)
