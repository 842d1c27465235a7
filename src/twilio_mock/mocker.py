"""
Public façade of the API double.

Each operation arranges resource state and installs (or replaces) the stub
rule of one simulated endpoint.

Usage:

    from twilio_mock import Mocker

    with Mocker() as mocker:
        mocker.stub_available_numbers(area_code="415")
        mocker.fetch_message(sid, {"status": "failed", "error_code": 30004})
        ...  # code under test talks to api.twilio.com through httpx
        assert mocker.messages()[-1].body == "Hello"
"""

from __future__ import annotations

import logging
import random
import re
from collections.abc import Iterable, Mapping
from typing import Any

import respx

from twilio_mock.binder import StubBinder, StubRule
from twilio_mock.config import TwilioMockConfig, get_config
from twilio_mock.errors import StubArrangementError
from twilio_mock.models import IncomingPhoneNumber, Message
from twilio_mock.numbers import NumberGenerator, validate_area_code, validate_country
from twilio_mock.producers import (
    AvailableNumbersProducer,
    BuyNumberProducer,
    CreateMessageProducer,
    FetchMessageProducer,
    FetchNumberProducer,
    IncomingNumberListProducer,
)
from twilio_mock.shared.logging import get_logger, log_with_context, mask
from twilio_mock.sids import SidGenerator, is_sid
from twilio_mock.store import ResourceStore
from twilio_mock.wire import to_form_fields

logger = get_logger(__name__)

# Endpoint keys
AVAILABLE_NUMBERS = "available_numbers"
CREATE_MESSAGE = "create_message"
BUY_NUMBER = "buy_number"
INCOMING_NUMBER_LIST = "incoming_number_list"
FETCH_MESSAGE = "fetch_message:{sid}"
FETCH_NUMBER = "fetch_number:{sid}"

COUNTRY_SEGMENT = r"(?P<country>[A-Z]{2})"


def _require_sid(sid: str) -> None:
    if not is_sid(sid):
        raise StubArrangementError(
            f"Invalid SID {sid!r}: expected two uppercase letters and 32 "
            "lowercase alphanumerics",
            error_code="INVALID_SID",
            details={"sid": sid},
        )


class Mocker:
    """Simulated Twilio account plus the stubs answering for it."""

    def __init__(
        self,
        config: TwilioMockConfig | None = None,
        *,
        rng: random.Random | None = None,
        router: respx.MockRouter | None = None,
    ) -> None:
        self._config = config or get_config()
        self._rng = rng or random.Random(self._config.seed)
        self.numbers = NumberGenerator(self._rng, self._config.default_country)
        self.sids = SidGenerator(self._rng)
        self.store = ResourceStore()
        self.binder = StubBinder(self._config, router)

    @property
    def config(self) -> TwilioMockConfig:
        return self._config

    # Lifecycle

    def start(self) -> "Mocker":
        """Start intercepting httpx traffic toward the provider host."""
        self.binder.start()
        if self._config.auto_stub:
            self.install_defaults()
        return self

    def stop(self) -> None:
        self.binder.stop()

    def __enter__(self) -> "Mocker":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def reset(self) -> None:
        """Clear the store, unbind every rule and forget issued numbers."""
        self.store.clear()
        self.binder.unbind_all()
        self.numbers.reset()
        log_with_context(
            logger,
            logging.INFO,
            "Mocker reset",
            account_sid=mask(self._config.account_sid),
        )
        if self._config.auto_stub and self.binder.is_active:
            self.install_defaults()

    def install_defaults(self) -> None:
        """Happy-path stubs for the endpoints a client hits without arrangement."""
        self.stub_available_numbers()
        self.stub_create_message()
        self.stub_buy_number()
        self.stub_incoming_number_list()

    # Stub operations

    def stub_available_numbers(
        self,
        *,
        empty_list: bool = False,
        country: str | None = None,
        area_code: str | int | None = None,
    ) -> StubRule:
        """Answer the available local numbers list.

        Args:
            empty_list: Answer with no numbers at all.
            country: Only match this country's path; any country when None.
            area_code: Embed this area code; otherwise the request's
                ``AreaCode`` parameter is used when present.

        Raises:
            InvalidAreaCodeError: ``area_code`` is not three digits.
            StubArrangementError: ``country`` is not a two-letter code.
        """
        area = validate_area_code(area_code)
        if country:
            segment = f"(?P<country>{re.escape(validate_country(country))})"
        else:
            segment = COUNTRY_SEGMENT
        producer = AvailableNumbersProducer(
            generator=self.numbers,
            empty_list=empty_list,
            area_code=area,
        )
        return self.binder.bind(
            AVAILABLE_NUMBERS,
            "GET",
            rf"/AvailablePhoneNumbers/{segment}/Local\.json",
            producer,
        )

    def stub_create_message(self, **expected_fields: Any) -> StubRule:
        """Answer message creation, recording each message in the store.

        Keyword arguments, when given, must equal the request body exactly
        (``from_="+1..."`` matches the ``From`` parameter).
        """
        producer = CreateMessageProducer(store=self.store, sids=self.sids)
        return self.binder.bind(
            CREATE_MESSAGE,
            "POST",
            r"/Messages\.json",
            producer,
            body=to_form_fields(expected_fields) if expected_fields else None,
        )

    def stub_buy_number(self, **expected_fields: Any) -> StubRule:
        producer = BuyNumberProducer(
            store=self.store,
            generator=self.numbers,
            account_sid=self._config.account_sid,
        )
        return self.binder.bind(
            BUY_NUMBER,
            "POST",
            r"/IncomingPhoneNumbers\.json",
            producer,
            body=to_form_fields(expected_fields) if expected_fields else None,
        )

    def set_incoming_number_list(self, numbers: Iterable[str]) -> StubRule:
        """Seed the account's incoming numbers and answer the list endpoint."""
        seeded = [
            IncomingPhoneNumber(sid=self.sids.phone_number(), phone_number=number)
            for number in numbers
        ]
        self.store.set_incoming_numbers(seeded)
        return self.stub_incoming_number_list()

    def stub_incoming_number_list(self) -> StubRule:
        """Answer the incoming numbers list from the store as it is at request time."""
        return self.binder.bind(
            INCOMING_NUMBER_LIST,
            "GET",
            r"/IncomingPhoneNumbers\.json",
            IncomingNumberListProducer(store=self.store),
        )

    def fetch_message(self, sid: str, attributes: Mapping[str, Any]) -> StubRule:
        """Answer fetching message ``sid`` with exactly ``attributes``.

        Re-arranging the same SID replaces the attributes, which is how a
        test simulates the message status moving on.
        """
        _require_sid(sid)
        self.store.upsert_fetchable_message(sid, attributes)
        return self.binder.bind(
            FETCH_MESSAGE.format(sid=sid),
            "GET",
            rf"/Messages/{re.escape(sid)}\.json",
            FetchMessageProducer(store=self.store, sid=sid),
        )

    def fetch_number(self, sid: str, attributes: Mapping[str, Any]) -> StubRule:
        _require_sid(sid)
        self.store.upsert_fetchable_number(sid, attributes)
        return self.binder.bind(
            FETCH_NUMBER.format(sid=sid),
            "GET",
            rf"/IncomingPhoneNumbers/{re.escape(sid)}\.json",
            FetchNumberProducer(store=self.store, sid=sid),
        )

    # Accessors

    def messages(self) -> list[Message]:
        return self.store.list_messages()

    def incoming_numbers(self) -> list[IncomingPhoneNumber]:
        return self.store.list_incoming_numbers()
