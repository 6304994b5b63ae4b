"""Field descriptors and selector strategies produced by the detector."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    EMAIL = "email"
    PASSWORD = "password"
    PHONE = "phone"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    NAME = "name"
    USERNAME = "username"
    ADDRESS = "address"
    CITY = "city"
    STATE = "state"
    ZIP = "zip"
    COUNTRY = "country"
    COMPANY = "company"
    WEBSITE = "website"
    DATE = "date"
    AGE = "age"
    GENDER = "gender"
    MESSAGE = "message"
    SUBJECT = "subject"
    CARD = "card"
    CVV = "cvv"
    SSN = "ssn"
    # Native HTML5 input types without a text-pattern counterpart
    NUMBER = "number"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"
    COLOR = "color"
    TIME = "time"
    MONTH = "month"
    WEEK = "week"
    RANGE = "range"
    SELECT = "select"
    TEXT = "text"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class BoundingBox(BaseModel):
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


class VisionHint(BaseModel):
    """Supplementary hints merged in from the optional vision analyzer."""
    label: str = ""
    type: str = ""
    required: Optional[bool] = None
    hints: str = ""


class FieldDescriptor(BaseModel):
    """One interactive element discovered on a page snapshot.

    Descriptors are created fresh on every scan and never mutated;
    classification and hint merging return updated copies.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    kind: str = "input"  # input, textarea, select, contenteditable, aria-role
    tag: str = "input"
    input_type: str = "text"
    id: str = ""
    name: str = ""
    placeholder: str = ""
    aria_label: str = ""
    autocomplete: str = ""
    class_name: str = ""
    role: str = ""
    text: str = ""
    label: str = ""
    context: str = ""  # classification signal only, never used as a value
    value: str = ""
    required: bool = False
    disabled: bool = False
    readonly: bool = False
    max_length: Optional[int] = None
    pattern: str = ""
    min_value: str = ""
    max_value: str = ""
    options: list[str] = Field(default_factory=list)
    bounding_box: Optional[BoundingBox] = Field(default=None, exclude=True)
    tag_ordinal: int = 0
    detected_type: FieldType = FieldType.TEXT
    confidence: Confidence = Confidence.LOW
    vision_hints: Optional[VisionHint] = None

    @property
    def display_name(self) -> str:
        return self.label or self.name or self.id or self.placeholder or f"{self.tag}#{self.index}"

    @property
    def is_fillable(self) -> bool:
        return not (self.disabled or self.readonly)


class SelectorStrategy(BaseModel):
    """A ranked candidate locator for one element."""
    # id, name, placeholder, aria-label, typeAndPlaceholder, text, class, role, tag-index
    kind: str = Field(validation_alias=AliasChoices("kind", "type"))
    value: str
    selector: str
