from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mediacheck.models import AIResponseStatus, AIResponseType, as_utc


class TokenUsageOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt_tokens: int = Field(alias="promptTokens")
    completion_tokens: int = Field(alias="completionTokens")
    total_tokens: int = Field(alias="totalTokens")


class AIReplyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    text: str | None = None
    status: AIResponseStatus
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    usage: TokenUsageOut | None = None

    @field_validator("updated_at")
    @classmethod
    def updated_at_in_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class AIResponseOut(AIReplyOut):
    doc_id: str = Field(alias="docId")
    type: AIResponseType
    user_id: str = Field(alias="userId")
    app_id: str = Field(alias="appId")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def created_at_in_utc(cls, value: datetime) -> datetime:
        return as_utc(value)
