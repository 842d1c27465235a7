"""
Pytest configuration and fixtures.
"""
from __future__ import annotations

import random
from collections.abc import Generator

import pytest

from twilio_mock.client import TwilioRestClient
from twilio_mock.config import TwilioMockConfig
from twilio_mock.numbers import NumberGenerator
from twilio_mock.pytest_plugin import twilio_mocker  # noqa: F401
from twilio_mock.store import ResourceStore

pytest_plugins = ["pytester"]

ACCOUNT_SID = "AC" + "a1" * 16
AUTH_TOKEN = "test_auth_token_12345"


@pytest.fixture
def twilio_mock_config() -> TwilioMockConfig:
    """Deterministic config: explicit values win over the environment."""
    return TwilioMockConfig(
        account_sid=ACCOUNT_SID,
        auth_token=AUTH_TOKEN,
        host="api.twilio.com",
        api_version="2010-04-01",
        default_country="US",
        auto_stub=False,
        match_headers=True,
        passthrough_unknown_hosts=False,
        seed=1234,
    )


@pytest.fixture
def client(twilio_mock_config: TwilioMockConfig) -> Generator[TwilioRestClient, None, None]:
    with TwilioRestClient.from_config(twilio_mock_config) as rest_client:
        yield rest_client


@pytest.fixture
def number_generator() -> NumberGenerator:
    return NumberGenerator(random.Random(42))


@pytest.fixture
def store() -> ResourceStore:
    return ResourceStore()
