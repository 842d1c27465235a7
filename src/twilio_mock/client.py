"""
Minimal Twilio REST client over httpx.

Speaks the same wire format the mocker answers: form-encoded PascalCase
parameters, basic auth with (account SID, auth token), JSON responses. Useful
as the client under test in this package's own suite and as a reference for
application code that talks to the provider through httpx.
"""

from __future__ import annotations

from typing import Any

import anyio
import httpx

from twilio_mock.config import TwilioMockConfig, get_config
from twilio_mock.errors import TwilioMockError
from twilio_mock.models import IncomingPhoneNumber, Message
from twilio_mock.shared.logging import get_logger
from twilio_mock.wire import HTTP_HEADERS, to_form_fields

logger = get_logger(__name__)

USER_AGENT = "twilio-mock-client/0.1"


class TwilioRestError(TwilioMockError):
    """Error response from the provider API or transport failure."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        provider_response: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=provider_response)
        self.status_code = status_code
        self.provider_response = provider_response or {}


class TwilioRestClient:
    """Twilio REST client for messages and phone numbers.

    Uses httpx for HTTP requests. Async entrypoints delegate to the sync
    implementation in a worker thread.
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        *,
        host: str = "api.twilio.com",
        api_version: str = "2010-04-01",
        http_client: httpx.Client | None = None,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._host = host
        self._api_version = api_version
        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_config(
        cls,
        config: TwilioMockConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> "TwilioRestClient":
        cfg = config or get_config()
        return cls(
            cfg.account_sid,
            cfg.auth_token,
            host=cfg.host,
            api_version=cfg.api_version,
            http_client=http_client,
        )

    def __enter__(self) -> "TwilioRestClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _get_client(self) -> httpx.Client:
        if self._http_client is None:
            self._http_client = httpx.Client(
                timeout=httpx.Timeout(30.0),
                headers={**HTTP_HEADERS, "User-Agent": USER_AGENT},
            )
        return self._http_client

    def close(self) -> None:
        if self._owns_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None

    def _get_auth(self) -> tuple[str, str]:
        return (self._account_sid, self._auth_token)

    def _get_api_url(self, endpoint: str) -> str:
        return (
            f"https://{self._host}/{self._api_version}"
            f"/Accounts/{self._account_sid}{endpoint}"
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = self._get_client()
        url = self._get_api_url(endpoint)
        try:
            response = client.request(
                method,
                url,
                data=to_form_fields(data) if data else None,
                params=to_form_fields(params) if params else None,
                headers=HTTP_HEADERS,
                auth=self._get_auth(),
            )
        except httpx.HTTPError as e:
            logger.exception(
                "HTTP error during Twilio request",
                extra={"method": method, "endpoint": endpoint},
            )
            raise TwilioRestError(
                message=f"HTTP error: {e!s}",
                error_code="HTTP_ERROR",
            ) from e

        if response.status_code >= 400:
            error_data = response.json() if response.content else {}
            logger.error(
                "Twilio request failed",
                extra={
                    "status_code": response.status_code,
                    "error": error_data,
                    "endpoint": endpoint,
                },
            )
            raise TwilioRestError(
                message=error_data.get("message", "Twilio request failed"),
                error_code=str(error_data.get("code", response.status_code)),
                status_code=response.status_code,
                provider_response=error_data,
            )

        return response.json()

    # Messages

    def create_message(
        self,
        to: str,
        from_: str | None = None,
        body: str | None = None,
        **params: Any,
    ) -> Message:
        """Send a message; extra keyword arguments become wire parameters."""
        data = {"to": to, "from_": from_, "body": body, **params}
        return Message.model_validate(self._request("POST", "/Messages.json", data=data))

    def fetch_message(self, sid: str) -> Message:
        return Message.model_validate(self._request("GET", f"/Messages/{sid}.json"))

    async def create_message_async(
        self,
        to: str,
        from_: str | None = None,
        body: str | None = None,
        **params: Any,
    ) -> Message:
        """Async wrapper around ``create_message``."""
        return await anyio.to_thread.run_sync(
            lambda: self.create_message(to, from_, body, **params)
        )

    async def fetch_message_async(self, sid: str) -> Message:
        return await anyio.to_thread.run_sync(self.fetch_message, sid)

    # Phone numbers

    def list_available_numbers(
        self,
        country: str = "US",
        area_code: str | int | None = None,
    ) -> list[str]:
        """List local numbers available for purchase in ``country``."""
        data = self._request(
            "GET",
            f"/AvailablePhoneNumbers/{country}/Local.json",
            params={"area_code": area_code},
        )
        return [item["PhoneNumber"] for item in data.get("available_phone_numbers", [])]

    def buy_number(
        self,
        phone_number: str | None = None,
        area_code: str | int | None = None,
        **params: Any,
    ) -> IncomingPhoneNumber:
        data = {"phone_number": phone_number, "area_code": area_code, **params}
        return IncomingPhoneNumber.model_validate(
            self._request("POST", "/IncomingPhoneNumbers.json", data=data)
        )

    def list_incoming_numbers(
        self,
        phone_number: str | None = None,
    ) -> list[IncomingPhoneNumber]:
        data = self._request(
            "GET",
            "/IncomingPhoneNumbers.json",
            params={"phone_number": phone_number},
        )
        return [
            IncomingPhoneNumber.model_validate(item)
            for item in data.get("incoming_phone_numbers", [])
        ]

    def fetch_incoming_number(self, sid: str) -> IncomingPhoneNumber:
        return IncomingPhoneNumber.model_validate(
            self._request("GET", f"/IncomingPhoneNumbers/{sid}.json")
        )
