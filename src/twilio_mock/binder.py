"""
Stub rules and their resolution against intercepted requests.

respx patches the httpx transports; a single route for the provider host hands
every intercepted request to ``StubBinder.dispatch``, which owns precedence.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

import httpx
import respx

from twilio_mock.config import TwilioMockConfig
from twilio_mock.errors import UnmatchedRequestError
from twilio_mock.producers import ResponseProducer
from twilio_mock.shared.logging import get_logger, mask
from twilio_mock.wire import HTTP_HEADERS, FormFields, basic_auth_header, parse_form

logger = get_logger(__name__)

ROUTE_NAME = "twilio-api"


@dataclass
class StubRule:
    """One interception rule: a request predicate paired with a producer."""

    key: str
    method: str
    url: re.Pattern[str]
    producer: ResponseProducer
    credentials: tuple[str, str]
    headers: dict[str, str] = field(default_factory=dict)
    body: FormFields | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def match_url(self, request: httpx.Request) -> re.Match[str] | None:
        url = request.url
        return self.url.fullmatch(f"{url.scheme}://{url.host}{url.path}")

    def evaluate(self, request: httpx.Request) -> tuple[re.Match[str] | None, str | None]:
        """Return the URL match when ``request`` matches, else why it does not."""
        match = self.match_url(request)
        if match is None:
            return None, "url"
        if request.method != self.method:
            return None, f"method {request.method} != {self.method}"
        if request.headers.get("Authorization") != basic_auth_header(*self.credentials):
            return None, "credentials"
        for name, value in self.headers.items():
            if request.headers.get(name) != value:
                return None, f"header {name}"
        if self.body is not None and parse_form(request) != self.body:
            return None, "body"
        return match, None

    def mismatch(self, request: httpx.Request) -> str | None:
        """Return why ``request`` does not match, or None when it does."""
        return self.evaluate(request)[1]

    def respond(self, request: httpx.Request, match: re.Match[str]) -> httpx.Response:
        self.requests.append(request)
        return self.producer.produce(request, match)


class StubBinder:
    """Ordered mapping from logical endpoint key to its current rule."""

    def __init__(
        self,
        config: TwilioMockConfig,
        router: respx.MockRouter | None = None,
    ) -> None:
        self._config = config
        self._router = router or respx.MockRouter(
            assert_all_called=False,
            assert_all_mocked=True,
        )
        self._rules: dict[str, StubRule] = {}
        self._active = False

    @property
    def router(self) -> respx.MockRouter:
        return self._router

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def rules(self) -> list[StubRule]:
        """Rules in resolution order, most recently bound first."""
        return list(reversed(self._rules.values()))

    def rule(self, key: str) -> StubRule | None:
        return self._rules.get(key)

    def url_pattern(self, path: str) -> re.Pattern[str]:
        """Anchor a path regex on the account-scoped base URL."""
        return re.compile(re.escape(self._config.base_url) + path)

    def bind(
        self,
        key: str,
        method: str,
        path: str,
        producer: ResponseProducer,
        *,
        body: Mapping[str, list[str]] | None = None,
    ) -> StubRule:
        """Install ``producer`` for ``key``, superseding any earlier rule.

        Args:
            key: Logical endpoint key; one current rule per key.
            method: HTTP method, matched exactly.
            path: Regex for the path below the account base URL.
            producer: Evaluated at request time.
            body: Exact form fields the request body must carry, or None to
                accept any body.
        """
        rule = StubRule(
            key=key,
            method=method.upper(),
            url=self.url_pattern(path),
            producer=producer,
            credentials=self._config.credentials,
            headers=dict(HTTP_HEADERS) if self._config.match_headers else {},
            body=dict(body) if body is not None else None,
        )
        # Re-inserting moves the key to the end: latest bind resolves first.
        self._rules.pop(key, None)
        self._rules[key] = rule

        logger.info(
            "Stub bound",
            extra={
                "stub_key": key,
                "method": rule.method,
                "producer": producer.kind,
                "account_sid": mask(self._config.account_sid),
            },
        )
        return rule

    def unbind(self, key: str) -> StubRule | None:
        return self._rules.pop(key, None)

    def unbind_all(self) -> None:
        self._rules.clear()

    def resolve(self, request: httpx.Request) -> tuple[StubRule, re.Match[str]]:
        """Return the first matching rule with its URL match.

        Raises:
            UnmatchedRequestError: no rule accepts ``request``.
        """
        refusals: dict[str, str] = {}
        for rule in self.rules:
            match, reason = rule.evaluate(request)
            if match is not None:
                return rule, match
            if reason != "url":
                refusals[rule.key] = reason

        logger.warning(
            "Unmatched request",
            extra={
                "method": request.method,
                "url": str(request.url),
                "refusals": refusals,
            },
        )
        detail = "; ".join(f"{k}: {v}" for k, v in refusals.items()) or "no stub for this URL"
        raise UnmatchedRequestError(
            f"No stub matches {request.method} {request.url} ({detail})",
            error_code="UNMATCHED_REQUEST",
            details={
                "method": request.method,
                "url": str(request.url),
                "refusals": refusals,
            },
        )

    def dispatch(self, request: httpx.Request) -> httpx.Response:
        rule, match = self.resolve(request)
        response = rule.respond(request, match)
        logger.debug(
            "Stub matched",
            extra={
                "stub_key": rule.key,
                "method": request.method,
                "url": str(request.url),
                "status_code": response.status_code,
            },
        )
        return response

    def start(self) -> None:
        if self._active:
            return
        self._router.route(scheme="https", host=self._config.host, name=ROUTE_NAME).mock(
            side_effect=self.dispatch
        )
        if self._config.passthrough_unknown_hosts:
            self._router.route(name="passthrough").pass_through()
        self._router.start()
        self._active = True

    def stop(self) -> None:
        if not self._active:
            return
        self._router.stop()
        self._active = False
