# api/knowledge.py
"""
Knowledge Base API
Manual sync trigger and status
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..runtime import ConciergeRuntime
from ..schemas.ai_schemas import SyncStatusResponse
from .deps import get_runtime


router = APIRouter(prefix="/api/ai/knowledge", tags=["knowledge"])


@router.post("/sync", response_model=SyncStatusResponse)
async def trigger_sync(runtime: ConciergeRuntime = Depends(get_runtime)):
    """Run a sync pass now (skipped if one is already running)"""
    result = await runtime.coordinator.sync()
    return SyncStatusResponse(
        skipped=result.skipped,
        policy_documents=result.policy_documents,
        catalog_documents=result.catalog_documents,
        upserted=result.upserted,
        error=result.error
    )


@router.get("/status")
async def sync_status(runtime: ConciergeRuntime = Depends(get_runtime)):
    last = runtime.coordinator.last_result
    return {
        "syncing": runtime.coordinator.is_syncing,
        "last_result": last.to_dict() if last else None
    }


@router.get("/search", response_model=List[str])
async def search_knowledge(
    q: str = Query(..., min_length=1),
    limit: int = Query(5, ge=1, le=20),
    runtime: ConciergeRuntime = Depends(get_runtime)
):
    return await runtime.knowledge_store.search(
        runtime.settings.KNOWLEDGE_COLLECTION,
        q,
        limit=limit,
        score_threshold=runtime.settings.KNOWLEDGE_SCORE_THRESHOLD
    )
