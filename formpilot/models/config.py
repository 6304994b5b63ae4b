"""Configuration models for FormPilot."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator


class ViewportConfig(BaseModel):
    width: int = 1280
    height: int = 720


class BrowserConfig(BaseModel):
    headless: bool = False
    slow_mo: int = 100
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    user_agent: Optional[str] = None
    # Hide navigator.webdriver and the AutomationControlled blink feature
    mask_automation: bool = True


class FillConfig(BaseModel):
    locale: str = "en_US"
    # Override table keyed by field id, name, label or placeholder
    custom_data: dict[str, Union[bool, str]] = Field(default_factory=dict)
    settle_delay_ms: int = 100
    typing_delay_ms: int = 50
    selector_timeout_ms: int = 5000
    post_submit_delay_ms: int = 1000
    seed: Optional[int] = None


class NavigatorConfig(BaseModel):
    max_steps: int = 10
    # Consecutive iterations on one URL, without a state change, before giving up
    stuck_threshold: int = 3
    pre_scan_delay_ms: int = 2000
    post_action_delay_ms: int = 2000
    settle_timeout_ms: int = 30000
    click_timeout_ms: int = 3000
    enable_wait_ms: int = 5000
    landing_url_tokens: list[str] = Field(
        default_factory=lambda: ["home", "dashboard", "main"]
    )
    flow_url_tokens: list[str] = Field(
        default_factory=lambda: ["login", "agreement", "flow"]
    )
    landing_text_indicators: list[str] = Field(
        default_factory=lambda: [
            "dashboard",
            "home",
            "welcome",
            "logged in",
            "my account",
            "profile",
            "main menu",
        ]
    )
    consent_words: list[str] = Field(
        default_factory=lambda: ["agree", "terms", "accept", "consent"]
    )
    toggle_selectors: list[str] = Field(
        default_factory=lambda: [
            'button[role="switch"]',
            '[role="switch"]',
            ".slds-checkbox_toggle",
            'input[type="checkbox"]',
            "lightning-input",
        ]
    )
    button_labels: list[str] = Field(
        default_factory=lambda: [
            "Finish",
            "Done",
            "Complete",
            "Next",
            "Continue",
            "Proceed",
            "Submit",
            "Accept",
            "Confirm",
            "OK",
        ]
    )


class RecorderConfig(BaseModel):
    keep_passwords: bool = False
    poll_interval_ms: int = 500
    actions_file: str = "recorded-actions.json"


class VisionConfig(BaseModel):
    enabled: bool = False
    model: str = "claude-sonnet-4-5"
    max_tokens: int = 1000
    # Exchange log directory; None disables it
    debug_dir: Optional[str] = None


class LoginConfig(BaseModel):
    login_url: str
    username: str
    password: str
    auto_navigate: bool = True

    @field_validator("password", mode="before")
    @classmethod
    def resolve_env_password(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v


class FormPilotConfig(BaseModel):
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    fill: FillConfig = Field(default_factory=FillConfig)
    navigator: NavigatorConfig = Field(default_factory=NavigatorConfig)
    recorder: RecorderConfig = Field(default_factory=RecorderConfig)
    vision: VisionConfig = Field(default_factory=VisionConfig)

    # Diagnostics
    screenshot: bool = True
    screenshot_dir: str = "./screenshots"

    @classmethod
    def load(cls, path: str | Path) -> "FormPilotConfig":
        """Load a formpilot.json file; omitted sections keep their defaults."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, encoding="utf-8") as f:
            return cls.model_validate(json.load(f))

    def save(self, path: str | Path) -> None:
        """Write every setting, defaults included, so the file documents itself."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
