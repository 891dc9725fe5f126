"""
Chat and message API endpoints.

Mounted under /api/chats, behind the session gate.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_chat_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IChatService
from .models import (
    ChatListResponse,
    ChatResponse,
    ChatView,
    CreateChatRequest,
    CreateMessageRequest,
    MessageListResponse,
    MessageResponse,
    MessageView,
    SuccessResponse,
    UpdateChatRequest,
    UpdateMessageRequest,
)

router = APIRouter()


@router.get("", response_model=ChatListResponse)
async def list_chats(
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> ChatListResponse:
    """
    List the current user's chats, most recently updated first.
    """
    chats = await service.list_chats(user.id)
    return ChatListResponse(chats=[ChatView.from_chat(c) for c in chats])


@router.post("", response_model=ChatResponse)
async def create_chat(
    request: CreateChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Create a chat. Untitled chats are named "New Chat".
    """
    chat = await service.create_chat(user.id, request.title)
    return ChatResponse(chat=ChatView.from_chat(chat))


@router.patch("/{chat_id}", response_model=ChatResponse)
async def rename_chat(
    chat_id: str,
    request: UpdateChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> ChatResponse:
    chat = await service.rename_chat(user.id, chat_id, request.title)
    return ChatResponse(chat=ChatView.from_chat(chat))


@router.delete("/{chat_id}", response_model=SuccessResponse)
async def delete_chat(
    chat_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> SuccessResponse:
    await service.delete_chat(user.id, chat_id)
    return SuccessResponse()


@router.get("/{chat_id}/messages", response_model=MessageListResponse)
async def list_messages(
    chat_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> MessageListResponse:
    """
    List a chat's messages, oldest first.
    """
    messages = await service.list_messages(user.id, chat_id)
    return MessageListResponse(messages=[MessageView.from_message(m) for m in messages])


@router.post("/{chat_id}/messages", response_model=MessageResponse)
async def add_message(
    chat_id: str,
    request: CreateMessageRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> MessageResponse:
    """
    Post a user message. The first message also renames the chat.
    """
    message = await service.add_message(user.id, chat_id, request)
    return MessageResponse(message=MessageView.from_message(message))


@router.put("/{chat_id}/messages/{message_id}", response_model=MessageResponse)
async def edit_message(
    chat_id: str,
    message_id: str,
    request: UpdateMessageRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> MessageResponse:
    message = await service.edit_message(user.id, chat_id, message_id, request.content)
    return MessageResponse(message=MessageView.from_message(message))


@router.delete("/{chat_id}/messages/{message_id}", response_model=SuccessResponse)
async def delete_message(
    chat_id: str,
    message_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IChatService = Depends(get_chat_service),
) -> SuccessResponse:
    await service.delete_message(user.id, chat_id, message_id)
    return SuccessResponse()
