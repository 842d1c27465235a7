"""
In-memory store of the simulated account's resources.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from twilio_mock.errors import StubArrangementError
from twilio_mock.models import IncomingPhoneNumber, Message, field_names


def _build(model: type[BaseModel], sid: str, attributes: Mapping[str, Any]) -> Any:
    unknown = set(attributes) - field_names(model) - {"sid"}
    if unknown:
        raise StubArrangementError(
            f"Unknown {model.__name__} attributes: {', '.join(sorted(unknown))}",
            error_code="UNKNOWN_ATTRIBUTES",
            details={"sid": sid, "unknown": sorted(unknown)},
        )
    try:
        return model.model_validate({**attributes, "sid": sid})
    except ValidationError as e:
        raise StubArrangementError(
            f"Invalid {model.__name__} attributes for {sid}: {e}",
            error_code="INVALID_ATTRIBUTES",
            details={"sid": sid, "errors": e.errors(include_url=False)},
        ) from e


class ResourceStore:
    """Messages and incoming phone numbers of the simulated account.

    The append-based collections back the create and list endpoints; the
    fetchable registries back the fetch-by-SID endpoints and are filled only
    through explicit upserts.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []
        self._incoming_numbers: list[IncomingPhoneNumber] = []
        self._fetchable_messages: dict[str, Message] = {}
        self._fetchable_numbers: dict[str, IncomingPhoneNumber] = {}

    def clear(self) -> None:
        self._messages.clear()
        self._incoming_numbers.clear()
        self._fetchable_messages.clear()
        self._fetchable_numbers.clear()

    # Messages

    def append_message(self, message: Message) -> None:
        self._messages.append(message)

    def list_messages(self) -> list[Message]:
        return self._messages.copy()

    def message_count(self) -> int:
        return len(self._messages)

    # Incoming phone numbers

    def set_incoming_numbers(self, numbers: Iterable[IncomingPhoneNumber]) -> None:
        self._incoming_numbers = list(numbers)

    def append_incoming_number(self, number: IncomingPhoneNumber) -> None:
        self._incoming_numbers.append(number)

    def list_incoming_numbers(self) -> list[IncomingPhoneNumber]:
        return self._incoming_numbers.copy()

    # Fetch-by-SID registries

    def upsert_fetchable_message(
        self,
        sid: str,
        attributes: Mapping[str, Any],
    ) -> Message:
        """Register the message returned when fetching ``sid``.

        Raises:
            StubArrangementError: unknown keys, missing ``status`` or values
                that do not fit the message schema.
        """
        message = _build(Message, sid, attributes)
        self._fetchable_messages[sid] = message
        return message

    def upsert_fetchable_number(
        self,
        sid: str,
        attributes: Mapping[str, Any],
    ) -> IncomingPhoneNumber:
        number = _build(IncomingPhoneNumber, sid, attributes)
        self._fetchable_numbers[sid] = number
        return number

    def get_fetchable_message(self, sid: str) -> Message | None:
        return self._fetchable_messages.get(sid)

    def get_fetchable_number(self, sid: str) -> IncomingPhoneNumber | None:
        return self._fetchable_numbers.get(sid)
