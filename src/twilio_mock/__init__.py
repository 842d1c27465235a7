"""
Deterministic double of the Twilio REST API for tests.

Intercepts httpx traffic toward api.twilio.com and answers it from an
in-memory simulated account.
"""

from twilio_mock.config import TwilioMockConfig, get_config
from twilio_mock.errors import (
    InvalidAreaCodeError,
    NumberPoolExhaustedError,
    StubArrangementError,
    TwilioMockError,
    UnmatchedRequestError,
)
from twilio_mock.mocker import Mocker
from twilio_mock.models import IncomingPhoneNumber, Message, MessageStatus
from twilio_mock.numbers import NumberGenerator

__version__ = "0.1.0"

__all__ = [
    "IncomingPhoneNumber",
    "InvalidAreaCodeError",
    "Message",
    "MessageStatus",
    "Mocker",
    "NumberGenerator",
    "NumberPoolExhaustedError",
    "StubArrangementError",
    "TwilioMockConfig",
    "TwilioMockError",
    "UnmatchedRequestError",
    "get_config",
]
