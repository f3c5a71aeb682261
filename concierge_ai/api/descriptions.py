# api/descriptions.py
"""
Listing Copywriting API
"""

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..runtime import ConciergeRuntime
from ..schemas.ai_schemas import DescriptionRequest, DescriptionResponse
from .deps import get_runtime


router = APIRouter(prefix="/api/ai/descriptions", tags=["copywriting"])


@router.post("", response_model=DescriptionResponse)
async def generate_descriptions(request: DescriptionRequest, runtime: ConciergeRuntime = Depends(get_runtime)):
    try:
        descriptions = await runtime.registry.call(
            "generate_descriptions",
            {"property_details": request.property_details}
        )
    except Exception as e:
        logger.error(f"Description generation failed: {e}")
        raise HTTPException(status_code=502, detail="Description generation failed")
    
    return DescriptionResponse(descriptions=descriptions)
