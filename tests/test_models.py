"""Tests for configuration, field and recording models."""

import json
import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from formpilot.models.config import FormPilotConfig, LoginConfig, NavigatorConfig
from formpilot.models.field import FieldDescriptor, SelectorStrategy
from formpilot.models.recording import ElementSnapshot, RecordedAction, load_action_log, save_action_log
from formpilot.models.results import NavigationOutcome, NavigationResult


class TestFormPilotConfig:
    """Tests for FormPilotConfig."""

    def test_defaults(self):
        config = FormPilotConfig()
        assert config.browser.headless is False
        assert config.navigator.max_steps == 10
        assert config.navigator.stuck_threshold == 3
        assert config.fill.locale == "en_US"
        assert config.vision.enabled is False

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "formpilot.json"
        config = FormPilotConfig()
        config.fill.custom_data = {"email": "a@b.com", "terms": True}
        config.save(path)
        loaded = FormPilotConfig.load(path)
        assert loaded.fill.custom_data == {"email": "a@b.com", "terms": True}

    def test_load_partial(self, tmp_path):
        path = tmp_path / "formpilot.json"
        path.write_text(json.dumps({"navigator": {"max_steps": 4}}))
        config = FormPilotConfig.load(path)
        assert config.navigator.max_steps == 4
        assert config.navigator.button_labels[0] == "Finish"

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FormPilotConfig.load(tmp_path / "missing.json")

    def test_navigator_defaults_are_independent(self):
        first, second = NavigatorConfig(), NavigatorConfig()
        first.button_labels.append("Go")
        assert "Go" not in second.button_labels


class TestLoginConfig:
    """Tests for LoginConfig password resolution."""

    def test_literal_password(self):
        assert LoginConfig(login_url="https://a.com", username="u", password="p").password == "p"

    def test_env_password(self):
        with patch.dict(os.environ, {"PORTAL_PASSWORD": "s3cret"}):
            config = LoginConfig(login_url="https://a.com", username="u", password="env:PORTAL_PASSWORD")
        assert config.password == "s3cret"

    def test_missing_env_password(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValidationError, match="PORTAL_PASSWORD"):
                LoginConfig(login_url="https://a.com", username="u", password="env:PORTAL_PASSWORD")


class TestFieldDescriptor:
    def test_frozen(self):
        field = FieldDescriptor(index=0, name="email")
        with pytest.raises(ValidationError):
            field.name = "other"

    def test_display_name(self):
        assert FieldDescriptor(index=0, label="Email", name="e").display_name == "Email"
        assert FieldDescriptor(index=2, tag="textarea").display_name == "textarea#2"

    def test_is_fillable(self):
        assert FieldDescriptor(index=0).is_fillable
        assert not FieldDescriptor(index=0, readonly=True).is_fillable

    def test_selector_strategy_type_alias(self):
        strategy = SelectorStrategy.model_validate({"type": "id", "value": "x", "selector": "#x"})
        assert strategy.kind == "id"


class TestRecordingModels:
    def test_camel_case_snapshot(self):
        element = ElementSnapshot.model_validate(
            {"tagName": "input", "className": "form-control", "ariaLabel": "Email", "type": "email"}
        )
        assert element.tag == "input"
        assert element.class_name == "form-control"
        assert element.aria_label == "Email"
        assert element.input_type == "email"

    def test_navigation_from_alias(self):
        action = RecordedAction.model_validate({"type": "navigation", "from": "https://a.com", "to": "https://b.com"})
        assert action.from_url == "https://a.com"

    def test_load_skips_unknown_types(self, tmp_path):
        path = tmp_path / "actions.json"
        path.write_text(json.dumps([
            {"type": "click", "timestamp": 1, "url": "https://a.com", "element": {"tagName": "button"}},
            {"type": "hover", "timestamp": 2},
            "not an action",
            {"type": "input", "timestamp": 3, "value": "x"},
        ]))
        actions = load_action_log(path)
        assert [a.type for a in actions] == ["click", "input"]

    def test_load_requires_array(self, tmp_path):
        path = tmp_path / "actions.json"
        path.write_text("{}")
        with pytest.raises(ValueError):
            load_action_log(path)

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_action_log(tmp_path / "missing.json")

    def test_save_writes_aliases(self, tmp_path):
        path = tmp_path / "out" / "actions.json"
        save_action_log([RecordedAction(type="navigation", from_url="https://a.com", to="https://b.com")], path)
        assert json.loads(path.read_text()) == [
            {"type": "navigation", "timestamp": 0, "url": "", "from": "https://a.com", "to": "https://b.com"}
        ]


class TestNavigationResult:
    def test_landed(self):
        assert NavigationResult(outcome=NavigationOutcome.LANDED).landed
        assert not NavigationResult(outcome=NavigationOutcome.STUCK).landed
