"""Pydantic models for the memory chat endpoint."""

from pydantic import BaseModel, ConfigDict, Field


class MemoryChatRequest(BaseModel):
    """Request body; fields are optional so missing ones map to a 400."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | None = Field(default=None, alias="userId")
    conversation_id: str | None = Field(default=None, alias="conversationId")
    message: str | None = None

    def is_complete(self) -> bool:
        return bool(self.user_id and self.conversation_id and self.message)


class MemoryChatResponse(BaseModel):
    """Successful reply payload."""

    reply: str
