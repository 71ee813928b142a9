"""Pydantic schemas for the trading assistant."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field

from finsight.domain.models.enums import IntentAction


class AssistantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=2000)


class IntentResponse(BaseModel):
    action: IntentAction
    symbol: Optional[str] = None
    quantity: Optional[Decimal] = None
    confidence: float

    model_config = {"from_attributes": True}


class AssistantResponse(BaseModel):
    """Reply to one chat message."""

    success: bool
    message: str
    intent: Optional[IntentResponse] = None
    data: Optional[dict[str, Any]] = None

    model_config = {"from_attributes": True}


class ConversationResponse(BaseModel):
    conversation_id: str
    user_message: str
    assistant_response: str
    created_at: datetime

    model_config = {"from_attributes": True}
