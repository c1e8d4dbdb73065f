from typing import List, Literal, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class JoinChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")
    user_id: Optional[int] = Field(default=None, alias="userId")
    username: Optional[str] = None


class ChatMessageIn(BaseModel):
    """Payload of a ``send_message`` event (camelCase on the wire)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    text: Optional[str] = Field(default=None, max_length=2000)
    is_anonymous: bool = Field(default=False, alias="isAnonymous")
    kind: Literal["text", "meme"] = Field(
        default="text", validation_alias=AliasChoices("kind", "type")
    )
    image_url: Optional[str] = Field(default=None, alias="imageUrl", max_length=1024)
    caption: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def _check_body(self):
        self.text = (self.text or "").strip() or None
        self.image_url = (self.image_url or "").strip() or None
        if self.kind == "meme" and not self.image_url:
            raise ValueError("Meme messages require an image URL")
        if self.kind == "text" and not self.text:
            raise ValueError("Message text is required")
        return self


class ChatMessageOut(BaseModel):
    """One entry of the message history (same keys as the socket payload)."""
    id: int
    text: str
    sender: str
    isAnonymous: bool
    type: str
    imageUrl: Optional[str] = None
    caption: Optional[str] = None
    timestamp: str


class RecentMessagesResponse(BaseModel):
    success: bool = True
    messages: List[ChatMessageOut]
