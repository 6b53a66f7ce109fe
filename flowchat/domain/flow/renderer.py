from typing import Dict, Any, List, Optional
from pydantic import BaseModel, Field
from enum import Enum

from flowchat.domain.models.conversation import Media, MediaType

MEDIA_LABELS = {
    MediaType.IMAGE: "📷 Image",
    MediaType.DOCUMENT: "📄 Document",
    MediaType.AUDIO: "🎵 Audio",
    MediaType.VIDEO: "🎥 Video",
    MediaType.STICKER: "😊 Sticker",
}

MAX_BUTTONS = 3
MAX_LIST_ROWS_PER_SECTION = 10
BUTTON_TITLE_LIMIT = 20
ROW_TITLE_LIMIT = 24
ROW_DESCRIPTION_LIMIT = 72


def truncate_text(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length - 3] + "..."


def describe_media(media: Media) -> str:
    """One line text stand-in for media on text-only transports"""
    label = MEDIA_LABELS.get(media.type, "📎 Media")
    return f"{label}: {media.source}"


class TextRenderer:
    """Flattens a response into the single string a text transport shows"""

    def __init__(self, message: Optional[str], choices: Optional[Dict[str, str]] = None, media: Optional[Media] = None):
        self.message = message
        self.choices = choices
        self.media = media

    def render(self) -> str:
        parts = [self.message or None, self._build_choices(), self._build_media()]
        return "\n\n".join(part for part in parts if part)

    def _build_choices(self) -> Optional[str]:
        if not self.choices:
            return None
        return "\n".join(f"{key}. {label}" for key, label in self.choices.items())

    def _build_media(self) -> Optional[str]:
        if not self.media:
            return None
        return describe_media(self.media)


class MessageType(str, Enum):
    """Rich message layouts"""
    TEXT = "text"
    INTERACTIVE_BUTTONS = "interactive_buttons"
    INTERACTIVE_LIST = "interactive_list"
    MEDIA_IMAGE = "media_image"
    MEDIA_DOCUMENT = "media_document"
    MEDIA_AUDIO = "media_audio"
    MEDIA_VIDEO = "media_video"
    MEDIA_STICKER = "media_sticker"


class InteractiveMessage(BaseModel):
    """Rendered message for rich chat transports"""
    type: MessageType
    body: str = ""
    payload: Dict[str, Any] = Field(default_factory=dict)


class InteractiveRenderer:
    """Chooses buttons, lists or media layouts for rich chat transports"""

    def __init__(self, message: Optional[str], choices: Optional[Dict[str, str]] = None, media: Optional[Media] = None):
        self.message = message or ""
        self.choices = choices
        self.media = media

    def render(self) -> InteractiveMessage:
        if self.media:
            return self._build_media_message()
        if self.choices:
            if len(self.choices) <= MAX_BUTTONS:
                return self._build_buttons_message()
            return self._build_list_message()
        return InteractiveMessage(type=MessageType.TEXT, body=self.message)

    def _build_media_message(self) -> InteractiveMessage:
        media = self.media
        payload: Dict[str, Any] = {"url": media.source}

        # Stickers don't support captions
        if media.type != MediaType.STICKER:
            payload["caption"] = self.message
        if media.type == MediaType.DOCUMENT:
            payload["filename"] = media.filename

        return InteractiveMessage(type=MessageType(f"media_{media.type.value}"), payload=payload)

    def _build_buttons_message(self) -> InteractiveMessage:
        buttons = [
            {"id": str(key), "title": truncate_text(str(label), BUTTON_TITLE_LIMIT)}
            for key, label in self.choices.items()
        ]
        return InteractiveMessage(
            type=MessageType.INTERACTIVE_BUTTONS,
            body=self.message,
            payload={"buttons": buttons}
        )

    def _build_list_message(self) -> InteractiveMessage:
        rows: List[Dict[str, str]] = []
        for key, label in self.choices.items():
            text = str(label)
            row = {"id": str(key), "title": truncate_text(text, ROW_TITLE_LIMIT)}
            # Full text goes in the description when the title is cut
            if len(text) > ROW_TITLE_LIMIT:
                row["description"] = truncate_text(text, ROW_DESCRIPTION_LIMIT)
            rows.append(row)

        if len(rows) <= MAX_LIST_ROWS_PER_SECTION:
            sections = [{"title": "Options", "rows": rows}]
        else:
            sections = []
            for index in range(0, len(rows), MAX_LIST_ROWS_PER_SECTION):
                section_rows = rows[index:index + MAX_LIST_ROWS_PER_SECTION]
                sections.append({
                    "title": f"{index + 1}-{index + len(section_rows)}",
                    "rows": section_rows
                })

        return InteractiveMessage(
            type=MessageType.INTERACTIVE_LIST,
            body=self.message,
            payload={"sections": sections}
        )
