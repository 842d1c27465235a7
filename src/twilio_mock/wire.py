"""
Helpers for the provider's wire format.

Request parameters travel form-encoded with PascalCase keys and every value
as a string; credentials travel as HTTP basic auth.
"""

from base64 import b64encode
from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any
from urllib.parse import parse_qs

import httpx

HTTP_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Accept-Charset": "utf-8",
}

FormFields = dict[str, list[str]]


def twilify(key: str) -> str:
    """Convert a snake_case parameter name to the wire's PascalCase.

    ``from_`` becomes ``From``; keys already capitalized are kept.
    """
    if key[:1].isupper():
        return key
    return "".join(part.capitalize() for part in key.strip("_").split("_"))


def stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_form_fields(params: Mapping[str, Any]) -> FormFields:
    """Normalize caller parameters to the shape a parsed form body has."""
    fields: FormFields = {}
    for key, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        fields[twilify(key)] = [stringify(v) for v in values]
    return fields


def parse_form(request: httpx.Request) -> FormFields:
    content = request.read()
    if not content:
        return {}
    return parse_qs(content.decode("utf-8"), keep_blank_values=True)


def first(fields: Mapping[str, list[str]], key: str) -> str | None:
    values = fields.get(key)
    return values[0] if values else None


def basic_auth_header(username: str, password: str) -> str:
    token = b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
