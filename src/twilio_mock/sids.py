"""
Provider-style resource identifiers: two-letter prefix + 32 lowercase hex chars.
"""

import random
import re

SID_PATTERN = re.compile(r"[A-Z]{2}[0-9a-z]{32}")

MESSAGE_PREFIX = "SM"
PHONE_NUMBER_PREFIX = "PN"


def is_sid(value: object) -> bool:
    return isinstance(value, str) and SID_PATTERN.fullmatch(value) is not None


class SidGenerator:
    """Draws SIDs from an explicit random source."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def new(self, prefix: str) -> str:
        return f"{prefix}{self._rng.getrandbits(128):032x}"

    def message(self) -> str:
        return self.new(MESSAGE_PREFIX)

    def phone_number(self) -> str:
        return self.new(PHONE_NUMBER_PREFIX)
