"""
Pydantic models for the simulated resources and their wire shapes.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageStatus(str, Enum):
    """Message status values."""

    ACCEPTED = "accepted"
    SCHEDULED = "scheduled"
    QUEUED = "queued"
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    PARTIALLY_DELIVERED = "partially_delivered"
    UNDELIVERED = "undelivered"
    FAILED = "failed"
    RECEIVING = "receiving"
    RECEIVED = "received"
    READ = "read"
    CANCELED = "canceled"


class Resource(BaseModel):
    """Base for resources serialized with the provider's field names."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Message(Resource):
    """Message resource.

    Field order follows the wire shape: sid, from, to, body, status,
    error_code, error_message.
    """

    sid: str
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    body: str | None = None
    status: MessageStatus
    error_code: int | None = Field(default=None, strict=True)
    error_message: str | None = None


class IncomingPhoneNumber(Resource):
    """Incoming phone number resource."""

    sid: str
    phone_number: str


class AvailablePhoneNumber(Resource):
    """Item of the available phone numbers list."""

    phone_number: str = Field(alias="PhoneNumber")


class ApiError(Resource):
    """Provider error body returned with 4xx responses."""

    code: int
    message: str
    more_info: str
    status: int

    @classmethod
    def build(cls, code: int, message: str, status: int = 400) -> "ApiError":
        return cls(
            code=code,
            message=message,
            more_info=f"https://www.twilio.com/docs/errors/{code}",
            status=status,
        )


def field_names(model: type[BaseModel]) -> set[str]:
    """Accepted attribute keys for a model: python names and aliases."""
    names: set[str] = set()
    for name, info in model.model_fields.items():
        names.add(name)
        if info.alias:
            names.add(info.alias)
    return names
