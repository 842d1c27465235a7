"""
Response producers, one variant per simulated endpoint.

A producer is bound into a stub rule and evaluated only when a request
matches, so it always answers from the current store and generator state.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from twilio_mock.errors import InvalidAreaCodeError
from twilio_mock.models import (
    ApiError,
    AvailablePhoneNumber,
    IncomingPhoneNumber,
    Message,
    MessageStatus,
)
from twilio_mock.numbers import NumberGenerator
from twilio_mock.sids import SidGenerator
from twilio_mock.store import ResourceStore
from twilio_mock.wire import first, parse_form


def json_response(payload: dict[str, Any], status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code=status_code, json=payload)


def error_response(code: int, message: str, status_code: int = 400) -> httpx.Response:
    error = ApiError.build(code=code, message=message, status=status_code)
    return json_response(error.to_wire(), status_code=status_code)


def not_found(path: str) -> httpx.Response:
    return error_response(
        20404,
        f"The requested resource {path} was not found",
        status_code=404,
    )


class ResponseProducer(ABC):
    """Builds the response for a matched request."""

    kind: ClassVar[str]

    @abstractmethod
    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        ...


@dataclass
class AvailableNumbersProducer(ResponseProducer):
    kind: ClassVar[str] = "available_numbers"

    generator: NumberGenerator
    empty_list: bool = False
    area_code: str | None = None

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        if self.empty_list:
            return json_response({"available_phone_numbers": []})

        area_code = self.area_code or request.url.params.get("AreaCode")
        try:
            number = self.generator.generate(
                country=match.group("country"),
                area_code=area_code,
            )
        except InvalidAreaCodeError:
            return error_response(21452, f"Invalid AreaCode: {area_code}")

        item = AvailablePhoneNumber(phone_number=number)
        return json_response({"available_phone_numbers": [item.to_wire()]})


@dataclass
class CreateMessageProducer(ResponseProducer):
    kind: ClassVar[str] = "create_message"

    store: ResourceStore
    sids: SidGenerator

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        fields = parse_form(request)

        to = first(fields, "To")
        from_ = first(fields, "From")
        body = first(fields, "Body")
        if not to:
            return error_response(21604, "A 'To' phone number is required.")
        if not from_ and not first(fields, "MessagingServiceSid"):
            return error_response(21603, "A 'From' phone number is required.")
        if body is None and not first(fields, "MediaUrl"):
            return error_response(21602, "Message body is required.")

        message = Message(
            sid=self.sids.message(),
            from_=from_,
            to=to,
            body=body,
            status=MessageStatus.QUEUED,
        )
        self.store.append_message(message)
        return json_response(message.to_wire(), status_code=201)


@dataclass
class BuyNumberProducer(ResponseProducer):
    """Purchased numbers carry the account SID as their identifier."""

    kind: ClassVar[str] = "buy_number"

    store: ResourceStore
    generator: NumberGenerator
    account_sid: str

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        fields = parse_form(request)

        phone_number = first(fields, "PhoneNumber")
        area_code = first(fields, "AreaCode")
        if not phone_number and area_code:
            try:
                phone_number = self.generator.generate(area_code=area_code)
            except InvalidAreaCodeError:
                return error_response(21452, f"Invalid AreaCode: {area_code}")
        if not phone_number:
            return error_response(21452, "A 'PhoneNumber' or 'AreaCode' is required.")

        number = IncomingPhoneNumber(sid=self.account_sid, phone_number=phone_number)
        self.store.append_incoming_number(number)
        return json_response(number.to_wire(), status_code=201)


@dataclass
class IncomingNumberListProducer(ResponseProducer):
    kind: ClassVar[str] = "incoming_number_list"

    store: ResourceStore

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        numbers = self.store.list_incoming_numbers()
        wanted = request.url.params.get("PhoneNumber")
        if wanted:
            numbers = [n for n in numbers if n.phone_number == wanted]
        return json_response(
            {"incoming_phone_numbers": [n.to_wire() for n in numbers]}
        )


@dataclass
class FetchMessageProducer(ResponseProducer):
    kind: ClassVar[str] = "fetch_message"

    store: ResourceStore
    sid: str

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        message = self.store.get_fetchable_message(self.sid)
        if message is None:
            return not_found(request.url.path)
        return json_response(message.to_wire())


@dataclass
class FetchNumberProducer(ResponseProducer):
    kind: ClassVar[str] = "fetch_number"

    store: ResourceStore
    sid: str

    def produce(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        number = self.store.get_fetchable_number(self.sid)
        if number is None:
            return not_found(request.url.path)
        return json_response(number.to_wire())
