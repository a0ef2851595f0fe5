from fastapi import APIRouter

from link2json.api.v1 import extract

api_router = APIRouter()
api_router.include_router(extract.router)

__all__ = ["api_router"]
