"""Tests for ranked selector synthesis."""

import pytest

from formpilot.executor.selector_synthesizer import id_selector, rank_selectors, selector_for
from formpilot.models.field import FieldDescriptor
from formpilot.models.recording import ElementSnapshot


class TestIdSelector:
    def test_plain_id(self):
        assert id_selector("UserName") == "#UserName"

    @pytest.mark.parametrize("element_id", [
        "j_id0:form:email",
        "field[0]",
        "a(b)",
        "x{1}",
        "123abc",
    ])
    def test_special_ids_use_attribute_form(self, element_id):
        assert id_selector(element_id) == f'[id="{element_id}"]'

    def test_quotes_are_escaped(self):
        assert id_selector('a"b') == '[id="a\\"b"]'


class TestRankSelectors:
    def test_full_order(self):
        field = FieldDescriptor(
            index=0,
            id="email",
            name="user_email",
            placeholder="you@example.com",
            aria_label="Email address",
            input_type="email",
            class_name="ng-touched form-input",
            role="textbox",
            tag_ordinal=2,
        )
        kinds = [s.kind for s in rank_selectors(field)]
        assert kinds == [
            "id", "name", "placeholder", "aria-label", "typeAndPlaceholder", "class", "role", "tag-index",
        ]

    def test_selectors(self):
        field = FieldDescriptor(index=0, name="q", placeholder="Search", tag_ordinal=3)
        selectors = [s.selector for s in rank_selectors(field)]
        assert selectors == [
            '[name="q"]',
            '[placeholder="Search"]',
            'input[type="text"][placeholder="Search"]',
            ":nth-match(input:visible, 3)",
        ]

    def test_framework_classes_skipped(self):
        field = FieldDescriptor(index=0, class_name="ng-valid _x css-1abc sc-foo jsx-1 svelte-2 ember3")
        assert [s.kind for s in rank_selectors(field)] == ["tag-index"]

    def test_bare_tag_without_ordinal(self):
        assert selector_for(FieldDescriptor(index=0, tag="textarea", kind="textarea")).selector == "textarea"

    def test_long_text_skipped(self):
        snapshot = ElementSnapshot(tag="button", text="x" * 60)
        assert "text" not in [s.kind for s in rank_selectors(snapshot)]

    def test_snapshot_text(self):
        snapshot = ElementSnapshot(tag="button", text=" Log in ")
        assert selector_for(snapshot).selector == 'text="Log in"'

    def test_snapshot_without_type_has_no_type_and_placeholder(self):
        snapshot = ElementSnapshot(tag="input", placeholder="Email")
        assert [s.kind for s in rank_selectors(snapshot)] == ["placeholder", "tag-index"]

    def test_selector_for_prefers_id(self):
        strategy = selector_for(FieldDescriptor(index=0, id="UserName", name="username"))
        assert strategy.kind == "id"
        assert strategy.value == "UserName"
        assert strategy.selector == "#UserName"

    def test_always_at_least_one(self):
        assert len(rank_selectors(ElementSnapshot())) == 1
