"""Health check endpoint."""

from fastapi import APIRouter, Depends

from api.deps import get_record_store
from services.record_store import RecordStore

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(store: RecordStore = Depends(get_record_store)):
    store_ok = await store.ping()
    return {
        "status": "healthy",
        "store": "ok" if store_ok else "unreachable",
    }
