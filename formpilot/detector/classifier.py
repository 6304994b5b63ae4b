"""Semantic field classification: an ordered pattern table over textual attributes."""

from __future__ import annotations

import re

from formpilot.models.field import Confidence, FieldDescriptor, FieldType


def _token(word: str) -> str:
    """Match ``word`` only when not embedded in a longer alphabetic run."""
    return rf"(?<![a-z]){word}(?![a-z])"


# Evaluated in order; the first match wins. Specific types come before the
# generic "name" pattern, which would otherwise swallow username, company
# name, card name and similar fields.
FIELD_PATTERNS: list[tuple[FieldType, re.Pattern]] = [
    (FieldType.EMAIL, re.compile(r"email|e-mail|correo")),
    (FieldType.PASSWORD, re.compile(r"password|passwd|pwd|contrase")),
    (FieldType.PHONE, re.compile(rf"phone|{_token('tel')}|mobile|celular|{_token('cell')}")),
    (FieldType.FIRST_NAME, re.compile(r"first[\s_-]?name|fname|given[\s_-]?name|nombre[\s_-]?pila|forename")),
    (FieldType.LAST_NAME, re.compile(r"last[\s_-]?name|lname|surname|family[\s_-]?name|apellido")),
    (FieldType.USERNAME, re.compile(rf"user[\s_-]?name|{_token('login')}|usuario|user[\s_-]?id")),
    (FieldType.COMPANY, re.compile(r"company|organi[sz]ation|empresa|organizaci[oó]n|employer")),
    (FieldType.CARD, re.compile(r"card[\s_-]?number|credit[\s_-]?card|tarjeta|ccnum")),
    (FieldType.CVV, re.compile(rf"{_token('cvv')}|{_token('cvc')}|security[\s_-]?code")),
    (FieldType.SSN, re.compile(rf"{_token('ssn')}|social[\s_-]?security")),
    (FieldType.NAME, re.compile(rf"name|nombre|{_token('nom')}")),
    (FieldType.ADDRESS, re.compile(r"address|direcci[oó]n|street|calle")),
    (FieldType.CITY, re.compile(rf"{_token('city')}|ciudad|{_token('town')}")),
    (FieldType.STATE, re.compile(rf"{_token('state')}|province|provincia|{_token('region')}")),
    (FieldType.ZIP, re.compile(rf"{_token('zip')}|zipcode|postal|post[\s_-]?code|c[oó]digo[\s_-]?postal")),
    (FieldType.COUNTRY, re.compile(rf"country|{_token('pa[ií]s')}|nationality")),
    (FieldType.WEBSITE, re.compile(rf"website|{_token('url')}|web[\s_-]?site|sitio[\s_-]?web|homepage")),
    (FieldType.DATE, re.compile(rf"{_token('date')}|fecha|birthday|birth[\s_-]?date|{_token('dob')}")),
    (FieldType.AGE, re.compile(rf"{_token('age')}|{_token('edad')}")),
    (FieldType.GENDER, re.compile(rf"gender|{_token('sex')}|g[eé]nero|sexo")),
    (FieldType.MESSAGE, re.compile(r"message|comment|mensaje|comentario|description")),
    (FieldType.SUBJECT, re.compile(rf"subject|asunto|{_token('topic')}")),
]

# Non-generic HTML5 input types count as a classification signal when no
# text pattern matched.
NATIVE_INPUT_TYPES: dict[str, FieldType] = {
    "email": FieldType.EMAIL,
    "password": FieldType.PASSWORD,
    "tel": FieldType.PHONE,
    "url": FieldType.WEBSITE,
    "date": FieldType.DATE,
    "datetime-local": FieldType.DATE,
    "number": FieldType.NUMBER,
    "checkbox": FieldType.CHECKBOX,
    "radio": FieldType.RADIO,
    "file": FieldType.FILE,
    "color": FieldType.COLOR,
    "time": FieldType.TIME,
    "month": FieldType.MONTH,
    "week": FieldType.WEEK,
    "range": FieldType.RANGE,
}


def build_search_text(field: FieldDescriptor) -> str:
    """Concatenate the textual signals of a field into one lower-cased string."""
    return " ".join([
        field.id,
        field.name,
        field.placeholder,
        field.label,
        field.aria_label,
        field.autocomplete,
        field.context,
    ]).lower()


def match_field_type(search_text: str) -> FieldType | None:
    """Return the first pattern-table type matching ``search_text``."""
    for field_type, pattern in FIELD_PATTERNS:
        if pattern.search(search_text):
            return field_type
    return None


def classify_field(field: FieldDescriptor) -> FieldDescriptor:
    """Return a copy of ``field`` with ``detected_type`` and ``confidence`` set.

    Pure: the result depends only on the descriptor's textual attributes,
    input type and tag kind. Never raises; missing signals only lower the
    confidence.
    """
    matched = match_field_type(build_search_text(field))
    if matched is not None:
        return field.model_copy(update={"detected_type": matched, "confidence": Confidence.HIGH})

    native = NATIVE_INPUT_TYPES.get((field.input_type or "").lower())
    if native is not None and field.kind == "input":
        return field.model_copy(update={"detected_type": native, "confidence": Confidence.HIGH})

    if field.kind == "textarea":
        detected, confidence = FieldType.MESSAGE, Confidence.MEDIUM
    elif field.kind == "select":
        detected, confidence = FieldType.SELECT, Confidence.HIGH
    else:
        detected, confidence = FieldType.TEXT, Confidence.LOW
    return field.model_copy(update={"detected_type": detected, "confidence": confidence})
