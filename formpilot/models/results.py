"""Result structures returned by fill, navigation and login operations."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from formpilot.models.field import FieldDescriptor


class Diagnostics(BaseModel):
    """Partial diagnostics preserved when an operation fails structurally."""
    url: str = ""
    screenshot_path: str = ""
    text_sample: str = ""


class FillResult(BaseModel):
    success: bool = True
    filled: int = 0
    total: int = 0
    fields: list[FieldDescriptor] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)  # display names of fields that errored
    skipped: list[str] = Field(default_factory=list)  # disabled, readonly and file inputs
    diagnostics: Optional[Diagnostics] = None


class FieldSummary(BaseModel):
    name: str
    type: str
    label: str = ""
    required: bool = False
    confidence: str = ""


class FormAnalysis(BaseModel):
    total_fields: int = 0
    required_fields: int = 0
    optional_fields: int = 0
    field_types: dict[str, int] = Field(default_factory=dict)
    fields: list[FieldSummary] = Field(default_factory=list)


class NavigationOutcome(str, Enum):
    LANDED = "landed"  # landing page recognized
    STUCK = "stuck"  # same URL kept coming back without effect
    NO_PROGRESS = "no_progress"  # nothing actionable on the page
    MAX_STEPS = "max_steps"  # step budget exhausted


class NavigationStep(BaseModel):
    page_url: str
    action: str = "none"  # none, agreement_toggled, button_clicked
    button_label: Optional[str] = None
    url_changed: bool = False


class NavigationResult(BaseModel):
    steps_taken: int = 0
    outcome: NavigationOutcome = NavigationOutcome.NO_PROGRESS
    final_url: str = ""
    history: list[NavigationStep] = Field(default_factory=list)

    @property
    def landed(self) -> bool:
        return self.outcome == NavigationOutcome.LANDED


class LoginResult(BaseModel):
    success: bool
    error: Optional[str] = None
    username_selector: str = ""
    password_selector: str = ""
    post_login_url: str = ""
    navigation: Optional[NavigationResult] = None
    diagnostics: Optional[Diagnostics] = None


class AutomationResult(BaseModel):
    success: bool
    url: str = ""
    fill: Optional[FillResult] = None
    analysis: Optional[FormAnalysis] = None
    submitted: bool = False
    navigation: Optional[NavigationResult] = None
    error: Optional[str] = None
