from fastapi import APIRouter
from . import echo

# Unprefixed: the echo endpoint owns every path.
api_router = APIRouter()
api_router.include_router(echo.router)
