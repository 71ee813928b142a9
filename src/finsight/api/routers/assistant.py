"""Trading assistant chat endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from finsight.api.deps import get_assistant_service
from finsight.api.schemas import (
    AssistantRequest,
    AssistantResponse,
    ConversationResponse,
)
from finsight.services import AssistantService

router = APIRouter(prefix="/assistant", tags=["assistant"])


@router.post("/messages", response_model=AssistantResponse)
def send_message(
    body: AssistantRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantResponse:
    """Resolve a chat message and act on it."""
    reply = service.handle(body.user_id, body.message)
    return AssistantResponse.model_validate(reply)


@router.get("/{user_id}/conversations", response_model=list[ConversationResponse])
def list_conversations(
    user_id: str,
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: AssistantService = Depends(get_assistant_service),
) -> list[ConversationResponse]:
    """Stored assistant turns for a user, newest first."""
    return [ConversationResponse.model_validate(c) for c in service.history(user_id, limit=limit)]
