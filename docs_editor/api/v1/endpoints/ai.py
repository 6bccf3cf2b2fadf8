import httpx
from fastapi import APIRouter, Depends, HTTPException

from ....models import AIChatRequest
from ....relay import AIRelay
from ....utils.util import get_ai_client

router = APIRouter(tags=["ai"])


@router.post("/ai/chat")
async def ai_chat(
    req: AIChatRequest,
    ai_client: httpx.AsyncClient = Depends(get_ai_client),
):
    if not req.message or not req.message.strip():
        raise HTTPException(400, detail="Message is required")

    payload = req.model_dump(exclude_none=True)
    payload.setdefault("action", "chat")
    return await AIRelay(ai_client).chat(payload)
