# FILE: campuschat/api/messages.py
from fastapi import APIRouter, Query

from campuschat.core.config import CHAT_HISTORY_LIMIT
from campuschat.schemas.chat import RecentMessagesResponse
from campuschat.services import chat_service

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.get("/recent", response_model=RecentMessagesResponse)
async def get_recent_messages(limit: int = Query(CHAT_HISTORY_LIMIT, ge=1, le=200)):
    messages = await chat_service.recent_messages(limit=limit)
    return RecentMessagesResponse(messages=messages)
