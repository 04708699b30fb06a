from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from app.logging_config import get_logger

logger = get_logger("rule_schema")

GLOBAL_TRIGGERS = ("*", "**", "***")
ALL_CONTACTS = "ALL"


class ResponseType(str, Enum):
    TEXT = "text"
    TEXT_IMAGE = "text_image"
    TEXT_BUTTONS = "text_buttons"
    TEXT_LIST = "text_list"


INTERACTIVE_RESPONSE_TYPES = {ResponseType.TEXT_BUTTONS.value, ResponseType.TEXT_LIST.value}


class CooldownMode(str, Enum):
    POLITE = "polite"  # fixed 24h
    MODERATE = "moderate"  # rule.cooldown_hours
    FREE = "free"  # always, text only


class RuleButton(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    text: str = ""
    trigger: str = ""

    @field_validator("id", "text", "trigger", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ListItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    title: str = ""
    description: Optional[str] = None
    trigger: str = ""

    @field_validator("id", "title", "trigger", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ListSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = ""
    items: list[ListItem] = []

    @field_validator("title", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ResponseContent(BaseModel):
    """Parsed `chatbot_rules.response_content`."""

    model_config = ConfigDict(extra="ignore")

    text: str = ""
    image_url: Optional[str] = None
    buttons: list[RuleButton] = []
    list_title: Optional[str] = None
    list_button: Optional[str] = None
    sections: list[ListSection] = []

    @field_validator("text", mode="before")
    @classmethod
    def none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("buttons", "sections", mode="before")
    @classmethod
    def none_to_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_raw(cls, raw: Any) -> "ResponseContent":
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            logger.warning("Malformed rule response_content", extra={"context": {"error": str(exc)}})
            return cls(text=raw.get("text") if isinstance(raw.get("text"), str) else "")
