# api/chat.py
"""
Concierge Chat API
Knowledge-grounded answers with tool calling

user_id is taken from the request body as-is. The security gate and the
scoped booking writes trust it, so this router must sit behind a gateway
that authenticates the caller and sets user_id itself.
"""

from fastapi import APIRouter, Depends
from loguru import logger

from ..runtime import ConciergeRuntime
from ..schemas.ai_schemas import AskRequest, AskResponse
from .deps import get_runtime


router = APIRouter(prefix="/api/ai/chat", tags=["chat"])


@router.post("/ask", response_model=AskResponse)
async def ask(request: AskRequest, runtime: ConciergeRuntime = Depends(get_runtime)):
    """Answer a question as the concierge (guest when user_id is empty)"""
    logger.info(f"[Chat] {'guest' if not request.user_id else request.user_id}: {request.question[:80]}")
    answer = await runtime.concierge.ask(request.question, request.history, request.user_id)
    return AskResponse(question=request.question, answer=answer)
