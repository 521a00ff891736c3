from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field as PydanticField
from sqlalchemy import CheckConstraint, Column, DateTime, Text, func
from sqlmodel import SQLModel, Field


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(SQLModel, table=True):
    """One persisted chat turn. Rows are never updated."""

    __table_args__ = (
        CheckConstraint("role IN ('user', 'assistant')", name="ck_message_role"),
        CheckConstraint("length(content) > 0", name="ck_message_content"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    role: str = Field(nullable=False, max_length=16)
    content: str = Field(sa_column=Column(Text, nullable=False))
    # Assigned by the database during the INSERT
    timestamp: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True),
    )


class MessageRead(SQLModel):
    id: int
    role: Role
    content: str
    timestamp: datetime


class ChatRequest(BaseModel):  # body of POST /api/chat
    message: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_message: MessageRead = PydanticField(alias="userMessage")
    ai_message: MessageRead = PydanticField(alias="aiMessage")


class ClearResponse(BaseModel):
    message: str
    deleted: int


class ErrorResponse(BaseModel):
    error: str
