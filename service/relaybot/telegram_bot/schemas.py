from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class TelegramModel(BaseModel):
    # Telegram adds fields over time; keep only what we read
    model_config = ConfigDict(extra="ignore", frozen=True)


class Chat(TelegramModel):
    id: int
    type: Optional[str] = None


class Document(TelegramModel):
    file_id: str
    file_unique_id: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class PhotoSize(TelegramModel):
    file_id: str
    file_unique_id: Optional[str] = None
    width: int = 0
    height: int = 0
    file_size: Optional[int] = None


class Message(TelegramModel):
    message_id: Optional[int] = None
    chat: Optional[Chat] = None
    text: Optional[str] = None
    caption: Optional[str] = None
    document: Optional[Document] = None
    photo: list[PhotoSize] = Field(default_factory=list)


class Update(TelegramModel):
    update_id: Optional[int] = None
    message: Optional[Message] = None

    @property
    def chat_id(self) -> Optional[int]:
        if self.message and self.message.chat:
            return self.message.chat.id
        return None
