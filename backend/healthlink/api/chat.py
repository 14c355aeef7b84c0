"""
Chat API endpoints - assistant conversation and its live history.
"""

import json
import logging
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends
from fastapi.responses import StreamingResponse

from ..config import settings
from ..core import RecordManager, ensure_valid
from ..flows import ChatFlow
from ..llm import LLMProvider
from ..models import ChatInput, ChatOutput, ChatMessage, ChatTurn
from .deps import get_llm_provider, get_records

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatOutput, response_model_exclude_none=True)
async def send_message(
    payload: Dict[str, Any] = Body(...),
    records: RecordManager = Depends(get_records),
    llm_provider: Optional[LLMProvider] = Depends(get_llm_provider),
):
    """
    Send a chat message and get the assistant's answer.

    The turn is recorded with an empty response before the model is called and
    completed once the answer arrives. When chatHistory is not sent, it is built
    from the stored turns.

    Args:
        payload: message, plus optional healthStats, tasks and chatHistory

    Returns:
        ChatOutput: response and optional suggestions
    """
    chat_input = ensure_valid(ChatInput, payload)
    if chat_input.chat_history is None:
        chat_input = chat_input.model_copy(
            update={"chat_history": await records.format_chat_history()}
        )

    turn_id = await records.start_chat_turn(chat_input.message)
    flow = ChatFlow(llm_provider, temperature=settings.llm_temperature)
    result = await flow.run(chat_input)
    await records.complete_chat_turn(turn_id, result.response)

    logger.info(
        "Chat turn stored",
        extra={"extra_fields": {"user_id": records.user_id, "turn_id": turn_id}}
    )
    return result


@router.get("/history", response_model=List[ChatMessage], response_model_exclude_none=True)
async def get_chat_history(records: RecordManager = Depends(get_records)):
    """
    Get the conversation, oldest first.
    An empty history returns the assistant's welcome message.
    """
    return records.turns_to_messages(await records.list_chat_turns())


@router.get("/history/stream")
async def stream_chat_history(records: RecordManager = Depends(get_records)):
    """
    Server-Sent Events stream of the conversation.
    Sends the current messages first, then the full list again after every change.
    """
    async def event_generator():
        subscription = records.subscribe_chat_history()
        try:
            async for snapshot in subscription:
                turns = [ChatTurn(id=s.id, **s.data) for s in snapshot]
                messages = [
                    m.model_dump(exclude_none=True) for m in records.turns_to_messages(turns)
                ]
                yield f"data: {json.dumps({'type': 'snapshot', 'messages': messages}, ensure_ascii=False)}\n\n"
        finally:
            subscription.unsubscribe()

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        }
    )
