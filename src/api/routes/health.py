from fastapi import APIRouter, Depends, status

from src.adapter.services.runtime import SecurityRuntime
from src.depends import get_security_runtime

router = APIRouter(tags=["Health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health(runtime: SecurityRuntime = Depends(get_security_runtime)):
    return {
        "status": "ok",
        "security_events": runtime.audit.repository.count(),
        "cache": runtime.cache.stats(),
    }
