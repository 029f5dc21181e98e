from fastapi import APIRouter, status

from config import ApplicationConfig

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "ok",
        "store_backend": ApplicationConfig.STORE_BACKEND,
        "cache_backend": ApplicationConfig.CACHE_BACKEND,
    }
