from fastapi import APIRouter, HTTPException, status

from courseconnect.core.config import settings
from courseconnect.core.logging import get_logger
from courseconnect.modules.chat import ChatTurn, tutor_reply
from .schemas import ChatRequest, ChatResponse

logger = get_logger(__name__)

router = APIRouter()

BASE = f"{settings.api_root}/ai"


@router.post(f"{BASE}/chat", response_model=ChatResponse, tags=["chat"])
async def chat(req: ChatRequest) -> ChatResponse:
    """Answer a student's question as the course tutor."""
    if not req.message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No message provided"
        )
    history = [
        ChatTurn(sender=t.sender, message=t.message) for t in req.conversation_history
    ]
    reply = await tutor_reply(req.message, context=req.context, history=history)
    logger.info("Tutor reply from %s (%d history turns)", reply.source, len(history))
    return ChatResponse(response=reply.response, model=reply.model, source=reply.source)
