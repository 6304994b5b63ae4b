"""Test-value generation by detected field type."""

from __future__ import annotations

import logging
import math
import random
from datetime import date, datetime
from typing import Any, Callable, Optional, Union

from faker import Faker

from formpilot.models.field import FieldDescriptor, FieldType

logger = logging.getLogger(__name__)

Value = Union[str, bool, None]

# Returned when a pattern constraint is present; satisfies the usual
# upper/lower/digit/special requirements.
PATTERN_SAFE_PASSWORD = "Test@1234"

DATETIME_INPUT_TYPES = ("datetime-local", "datetime")


class DataGenerator:
    """Produces a value for a field, preferring caller-supplied overrides.

    Override keys are tried in order: id, name, label, placeholder. A hit
    is returned verbatim. ``seed`` makes Faker output and the positional
    picks (checkbox state, select index) reproducible.
    """

    def __init__(
        self,
        locale: str = "en_US",
        custom_data: Optional[dict[str, Value]] = None,
        seed: Optional[int] = None,
    ):
        self.locale = locale
        self.custom_data: dict[str, Value] = dict(custom_data or {})
        self.faker = Faker(locale)
        self.random = random.Random(seed)
        if seed is not None:
            self.faker.seed_instance(seed)

    def set_custom_data(self, custom_data: dict[str, Value]) -> None:
        """Merge ``custom_data`` into the override table; later keys win."""
        self.custom_data = {**self.custom_data, **custom_data}

    def get_custom_data(self, field: FieldDescriptor) -> tuple[bool, Value]:
        """Return ``(found, value)`` for the first override key the field carries."""
        for key in (field.id, field.name, field.label, field.placeholder):
            if key and key in self.custom_data:
                return True, self.custom_data[key]
        return False, None

    def generate(self, field: FieldDescriptor) -> Value:
        """Return an override or a synthesized value for ``field``.

        Selects and file inputs yield ``None``: selects are filled by
        position and files are never populated. Never raises.
        """
        found, value = self.get_custom_data(field)
        if found:
            return value

        field_type = self._effective_type(field)
        generator = self._generators().get(field_type)
        if generator is None:
            return self.generate_generic_text(field)
        try:
            return generator(field)
        except (ValueError, TypeError, AttributeError, OverflowError) as e:
            logger.warning("Could not generate %s value for '%s': %s", field_type.value, field.display_name, e)
            return self.generate_generic_text(field)

    def generate_data_set(self, fields: list[FieldDescriptor]) -> dict[str, Value]:
        """Generate values for every field, keyed by name, id or position."""
        return {
            field.name or field.id or f"field_{field.index}": self.generate(field)
            for field in fields
        }

    def pick_option_index(self, option_count: int) -> Optional[int]:
        """Pick a select option uniformly among indexes 1..n-1 (index 0 is a placeholder)."""
        if option_count <= 1:
            return None
        return self.random.randint(1, option_count - 1)

    # ------------------------------------------------------------------
    # Type dispatch
    # ------------------------------------------------------------------

    def _effective_type(self, field: FieldDescriptor) -> FieldType:
        # The control kind outranks a text match: a checkbox labelled
        # "Email me" still needs a boolean.
        if field.kind == "select":
            return FieldType.SELECT
        if field.kind == "input" and field.input_type in ("checkbox", "radio", "file"):
            return FieldType(field.input_type)
        if field.detected_type == FieldType.TEXT and field.vision_hints and field.vision_hints.type:
            try:
                return FieldType(field.vision_hints.type.lower())
            except ValueError:
                pass
        return field.detected_type

    def _generators(self) -> dict[FieldType, Callable[[FieldDescriptor], Value]]:
        fake = self.faker
        return {
            FieldType.EMAIL: lambda f: fake.email(),
            FieldType.PASSWORD: self.generate_password,
            FieldType.PHONE: lambda f: fake.phone_number(),
            FieldType.FIRST_NAME: lambda f: fake.first_name(),
            FieldType.LAST_NAME: lambda f: fake.last_name(),
            FieldType.NAME: lambda f: fake.name(),
            FieldType.USERNAME: lambda f: fake.user_name(),
            FieldType.ADDRESS: lambda f: fake.street_address(),
            FieldType.CITY: lambda f: fake.city(),
            FieldType.STATE: lambda f: fake.state(),
            FieldType.ZIP: lambda f: fake.postcode(),
            FieldType.COUNTRY: lambda f: fake.country(),
            FieldType.COMPANY: lambda f: fake.company(),
            FieldType.WEBSITE: lambda f: fake.url(),
            FieldType.DATE: self.generate_date,
            FieldType.AGE: lambda f: str(fake.random_int(min=18, max=80)),
            FieldType.GENDER: lambda f: fake.random_element(("female", "male")),
            FieldType.MESSAGE: lambda f: fake.paragraph(),
            FieldType.SUBJECT: lambda f: fake.sentence(),
            FieldType.CARD: lambda f: fake.credit_card_number(),
            FieldType.CVV: lambda f: fake.credit_card_security_code(),
            FieldType.SSN: lambda f: fake.ssn(),
            FieldType.NUMBER: self.generate_number,
            FieldType.CHECKBOX: lambda f: self.random.random() > 0.5,
            FieldType.RADIO: lambda f: True,
            FieldType.SELECT: lambda f: None,
            FieldType.FILE: lambda f: None,
            FieldType.COLOR: lambda f: fake.hex_color(),
            FieldType.TIME: lambda f: fake.time(pattern="%H:%M"),
            FieldType.MONTH: lambda f: self._past_date().strftime("%Y-%m"),
            FieldType.WEEK: self._generate_week,
            FieldType.RANGE: self._generate_range,
        }

    # ------------------------------------------------------------------
    # Constrained generators
    # ------------------------------------------------------------------

    def generate_password(self, field: FieldDescriptor) -> str:
        if field.pattern:
            return PATTERN_SAFE_PASSWORD
        # Never longer than maxLength
        length = min(field.max_length, 64) if field.max_length else 12
        if length < 4:
            # Too short to carry all four character classes
            return self.faker.pystr(min_chars=length, max_chars=length)
        return self.faker.password(length=length, special_chars=True, digits=True, upper_case=True, lower_case=True)

    def generate_date(self, field: FieldDescriptor) -> str:
        input_type = field.input_type.lower()
        if input_type == "date":
            return self._past_date().isoformat()
        if input_type in DATETIME_INPUT_TYPES:
            moment: datetime = self.faker.date_time_between(start_date="-30d", end_date="now")
            return moment.strftime("%Y-%m-%dT%H:%M")
        return self._past_date().strftime("%m/%d/%Y")

    def generate_number(self, field: FieldDescriptor) -> str:
        # HTML bounds may be fractional ("0.5"); an integer within them is preferred
        low_bound = float(field.min_value) if field.min_value else None
        high_bound = float(field.max_value) if field.max_value else None
        if low_bound is None:
            low_bound = 0.0 if high_bound is None or high_bound >= 0 else high_bound - 100
        if high_bound is None:
            high_bound = 100.0 if low_bound <= 100 else low_bound + 100
        if low_bound > high_bound:
            raise ValueError(f"min {field.min_value} exceeds max {field.max_value}")
        low, high = math.ceil(low_bound), math.floor(high_bound)
        if low > high:
            return f"{self.random.uniform(low_bound, high_bound):.2f}"
        return str(self.faker.random_int(min=low, max=high))

    def generate_generic_text(self, field: FieldDescriptor) -> str:
        max_length = field.max_length
        if max_length and max_length < 20:
            return self.faker.word()
        if max_length and max_length < 50:
            return " ".join(self.faker.words(nb=3))
        if field.tag == "textarea":
            return self.faker.paragraph()
        return " ".join(self.faker.words(nb=2))

    def _past_date(self) -> date:
        return self.faker.date_between(start_date="-1y", end_date="today")

    def _generate_week(self, field: FieldDescriptor) -> str:
        year, week, _ = self._past_date().isocalendar()
        return f"{year}-W{week:02d}"

    def _generate_range(self, field: FieldDescriptor) -> str:
        if field.min_value or field.max_value:
            return self.generate_number(field)
        return "50"
