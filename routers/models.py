# routers/models.py
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from deps.ai import get_ai_client
from gemini_client import GeminiError

router = APIRouter(tags=["models"])


@router.get("/models")
def list_models(ai: Any = Depends(get_ai_client)):
    """Raw model listing from the Gemini API, handy when a candidate gets retired."""
    if ai is None:
        raise HTTPException(status_code=500, detail="GEMINI_API_KEY is not configured")
    try:
        return ai.list_models()
    except GeminiError as e:
        raise HTTPException(status_code=500, detail=str(e))
