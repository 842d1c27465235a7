"""
Test phone number generation.

The provider reserves the ``+1 500 555 xxxx`` block for test credentials: those
numbers never reach a real subscriber. Generated numbers keep that layout for
every country:

    +1<area><555><suffix>

``<area>`` is the requested area code or the reserved ``500`` and ``<suffix>``
is four random digits. The block therefore always sits at the same offset:
numbers contain ``150055``, and area code ``123`` gives ``112355``. The country
is validated but does not change the number; the provider has no reserved test
block outside the NANP.
"""

import random
import re
import threading

from twilio_mock.errors import (
    InvalidAreaCodeError,
    NumberPoolExhaustedError,
    StubArrangementError,
)
from twilio_mock.shared.logging import get_logger

logger = get_logger(__name__)

TEST_NUMBER_PREFIX = "+1"
RESERVED_AREA_CODE = "500"
RESERVED_EXCHANGE = "555"
RESERVED_BLOCK = RESERVED_AREA_CODE + RESERVED_EXCHANGE
RESERVED_OFFSET = len(TEST_NUMBER_PREFIX)

# 0000-0009 are the provider's magic numbers (invalid, unroutable, ...).
SUFFIX_MIN = 10
SUFFIX_MAX = 9999

NANP_COUNTRIES = frozenset({"US", "CA", "PR"})

AREA_CODE_PATTERN = re.compile(r"[0-9]{3}")
COUNTRY_PATTERN = re.compile(r"[A-Z]{2}")


def validate_area_code(area_code: str | int | None) -> str | None:
    """Return the area code as a string, or raise if it is not three digits.

    Malformed area codes are rejected, never truncated or padded.
    """
    if area_code is None:
        return None
    value = str(area_code)
    if not AREA_CODE_PATTERN.fullmatch(value):
        raise InvalidAreaCodeError(
            f"Area code must be exactly 3 digits, got {area_code!r}",
            error_code="INVALID_AREA_CODE",
            details={"area_code": area_code},
        )
    return value


def validate_country(country: str) -> str:
    value = country.upper() if isinstance(country, str) else country
    if not isinstance(value, str) or not COUNTRY_PATTERN.fullmatch(value):
        raise StubArrangementError(
            f"Country must be a two-letter ISO code, got {country!r}",
            error_code="INVALID_COUNTRY",
            details={"country": country},
        )
    return value


class NumberGenerator:
    """Produces fresh test phone numbers.

    Randomness comes from the ``rng`` passed in; two generators built with
    equally seeded ``random.Random`` instances yield the same sequence.
    ``generate`` may be called from worker threads.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        default_country: str = "US",
    ) -> None:
        self._rng = rng or random.Random()
        self._default_country = validate_country(default_country)
        self._issued: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    @property
    def default_country(self) -> str:
        return self._default_country

    def reset(self) -> None:
        with self._lock:
            self._issued.clear()

    def generate(
        self,
        country: str | None = None,
        area_code: str | int | None = None,
    ) -> str:
        """Generate a test number not issued before by this generator.

        Args:
            country: Two-letter ISO country code; defaults to the generator's
                default country. Numbers stay in the reserved ``+1`` block.
            area_code: Three-digit area code embedded right after the prefix.

        Returns:
            Phone number in E.164 format.
        """
        country = validate_country(country or self._default_country)
        area = validate_area_code(area_code) or RESERVED_AREA_CODE
        if country not in NANP_COUNTRIES:
            logger.debug(
                "No reserved block outside the NANP, using +1",
                extra={"country": country},
            )
        head = f"{TEST_NUMBER_PREFIX}{area}{RESERVED_EXCHANGE}"

        with self._lock:
            issued = self._issued.setdefault(head, set())
            if len(issued) >= SUFFIX_MAX - SUFFIX_MIN + 1:
                raise NumberPoolExhaustedError(
                    f"All test numbers starting with {head} were issued",
                    error_code="NUMBER_POOL_EXHAUSTED",
                    details={"prefix": head},
                )

            while True:
                number = f"{head}{self._rng.randint(SUFFIX_MIN, SUFFIX_MAX):04d}"
                if number not in issued:
                    issued.add(number)
                    return number
