from fastapi import APIRouter

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness check. Does not call Drive."""
    return {"status": "ok"}
