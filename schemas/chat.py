from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


# Request Schemas
class ChatRequest(BaseModel):
    message: str


# Response Schemas
class MessageResponse(BaseModel):
    role: str  # "user" or "model"
    text: str
    timestamp: datetime

    class Config:
        from_attributes = True


class ChatResponse(BaseModel):
    answer: str
    last_error: Optional[str] = None


class HistoryResponse(BaseModel):
    messages: List[MessageResponse]
