from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ..auth.dependencies import require_user
from ..llm.groq_client import chat_reply
from .models import ChatRequest, ChatResponse, ChatResponseType, ConversationState

router = APIRouter(tags=["Chat"])

FALLBACK_REPLY = "I'm having a little trouble connecting to the kitchen right now. Try again in a moment!"


@router.post("/chat", response_model=ChatResponse)
def chat(
    body: ChatRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> ChatResponse:
    # 1. Load conversation state from session
    try:
        raw_state = request.session.get("chat_state")
        state = ConversationState(**raw_state) if raw_state else ConversationState()
    except Exception:
        state = ConversationState()

    # 2. Ask the model with prior turns as context
    reply = chat_reply(body.message, state.as_messages())
    if reply is None:
        return ChatResponse(type=ChatResponseType.fallback, message=FALLBACK_REPLY)

    # 3. Save updated conversation state
    state.add_exchange(body.message, reply)
    request.session["chat_state"] = state.model_dump()
    return ChatResponse(type=ChatResponseType.answer, message=reply)


@router.delete("/chat")
def reset_chat(request: Request, user: dict = Depends(require_user)) -> dict:
    request.session.pop("chat_state", None)
    return {"status": "ok"}
