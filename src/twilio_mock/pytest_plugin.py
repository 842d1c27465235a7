"""
pytest plugin: a started Mocker per test.

Registered through the ``pytest11`` entry point, so installing the package is
enough to get the fixtures.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from twilio_mock.config import TwilioMockConfig, get_config
from twilio_mock.mocker import Mocker
from twilio_mock.shared.logging import setup_logging


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("twilio-mock")
    group.addoption(
        "--twilio-mock-log",
        action="store",
        default=None,
        metavar="LEVEL",
        help="Emit twilio-mock structured logs at LEVEL.",
    )


def pytest_configure(config: pytest.Config) -> None:
    level = config.getoption("--twilio-mock-log", default=None)
    if level:
        setup_logging(level)


@pytest.fixture
def twilio_mock_config() -> TwilioMockConfig:
    """Override to change the simulated account for a module or package."""
    return get_config()


@pytest.fixture
def twilio_mocker(twilio_mock_config: TwilioMockConfig) -> Generator[Mocker, None, None]:
    """Mocker intercepting provider traffic for the duration of one test."""
    mocker = Mocker(twilio_mock_config)
    mocker.start()
    yield mocker
    mocker.stop()
