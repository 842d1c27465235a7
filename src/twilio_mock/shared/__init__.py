"""Shared utilities."""

from twilio_mock.shared.logging import get_logger, log_with_context, mask, setup_logging

__all__ = ["get_logger", "log_with_context", "mask", "setup_logging"]
