"""API router for version 1."""
from fastapi import APIRouter

from xenolexia.api.v1.endpoints import chapters, dictionary, vocabulary


api_router = APIRouter()
api_router.include_router(dictionary.router)
api_router.include_router(vocabulary.router)
api_router.include_router(chapters.router)
