"""
Completion API endpoint.

POST /api/chat asks the assistant to reply in one of the caller's chats.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_completion_gateway
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import ICompletionGateway
from .models import CompletionRequest, CompletionResponse

router = APIRouter()


@router.post("/chat", response_model=CompletionResponse)
async def complete(
    request: CompletionRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    gateway: ICompletionGateway = Depends(get_completion_gateway),
) -> CompletionResponse:
    """
    Generate and store an assistant reply.

    Responds 503 with the last upstream error when every model failed.
    """
    result = await gateway.complete(user.id, request.chat_id, request.content)
    return CompletionResponse.from_result(result)
