"""Tests for the Mocker façade, driven through the REST client."""

from __future__ import annotations

import re

import pytest

from twilio_mock.client import TwilioRestClient, TwilioRestError
from twilio_mock.config import TwilioMockConfig
from twilio_mock.errors import (
    InvalidAreaCodeError,
    StubArrangementError,
    UnmatchedRequestError,
)
from twilio_mock.mocker import Mocker

SID_PATTERN = re.compile(r"\ASM[a-z\d]{32}\Z")
MESSAGE_SID = "SM" + "5d41402abc4b2a76b9719d911017c592"
NUMBER_SID = "PN" + "7d793037a0760186574b0282f2f435e7"


class TestAvailableNumbers:
    def test_returns_test_number(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_available_numbers()

        numbers = client.list_available_numbers("US")

        assert len(numbers) == 1
        assert "150055" in numbers[0]

    def test_area_code_from_request(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_available_numbers()

        numbers = client.list_available_numbers("US", area_code="123")

        assert "112355" in numbers[0]

    def test_area_code_from_stub(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_available_numbers(area_code="415")

        assert client.list_available_numbers()[0].startswith("+1415555")

    def test_other_country(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_available_numbers()

        number = client.list_available_numbers("BR")[0]

        assert "150055" in number
        assert number.startswith("+1500555")

    def test_country_restricted_stub(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_available_numbers(country="GB")

        assert "150055" in client.list_available_numbers("GB")[0]
        with pytest.raises(UnmatchedRequestError):
            client.list_available_numbers("US")

    def test_fresh_number_each_call(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_available_numbers()

        first = client.list_available_numbers()[0]
        second = client.list_available_numbers()[0]

        assert first != second
        assert "150055" in first
        assert "150055" in second

    def test_empty_list(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_available_numbers(empty_list=True)

        assert client.list_available_numbers() == []

    def test_rebind_supersedes_empty_list(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_available_numbers(empty_list=True)
        twilio_mocker.stub_available_numbers()

        assert len(client.list_available_numbers()) == 1

    def test_invalid_area_code_rejected_at_bind(self, twilio_mocker: Mocker) -> None:
        with pytest.raises(InvalidAreaCodeError):
            twilio_mocker.stub_available_numbers(area_code="12")

    def test_invalid_request_area_code_is_provider_error(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_available_numbers()

        with pytest.raises(TwilioRestError) as exc_info:
            client.list_available_numbers(area_code="12345")

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "21452"


class TestCreateMessage:
    @pytest.fixture
    def params(self, twilio_mocker: Mocker) -> dict[str, str]:
        return {
            "from_": twilio_mocker.numbers.generate(),
            "to": "+15005550003",
            "body": "Example",
        }

    def test_returns_mandatory_attributes(
        self, twilio_mocker: Mocker, client: TwilioRestClient, params: dict[str, str]
    ) -> None:
        twilio_mocker.stub_create_message()

        message = client.create_message(**params)

        assert message.body == "Example"
        assert SID_PATTERN.match(message.sid)
        assert message.status == "queued"
        assert message.to == "+15005550003"
        assert message.from_ == params["from_"]

    def test_adds_to_messages(
        self, twilio_mocker: Mocker, client: TwilioRestClient, params: dict[str, str]
    ) -> None:
        twilio_mocker.stub_create_message()

        client.create_message(**params)

        message = twilio_mocker.messages()[-1]
        assert message.from_ == params["from_"]
        assert message.to == params["to"]
        assert message.body == params["body"]

    def test_two_messages_in_creation_order(
        self, twilio_mocker: Mocker, client: TwilioRestClient, params: dict[str, str]
    ) -> None:
        twilio_mocker.stub_create_message()

        first = client.create_message(**{**params, "body": "one"})
        second = client.create_message(**{**params, "body": "two"})

        messages = twilio_mocker.messages()
        assert len(messages) == 2
        assert [m.body for m in messages] == ["one", "two"]
        assert [m.sid for m in messages] == [first.sid, second.sid]
        assert first.sid != second.sid
        assert all(m.status == "queued" for m in messages)
        assert all(SID_PATTERN.match(m.sid) for m in messages)

    def test_expected_body_matches(
        self, twilio_mocker: Mocker, client: TwilioRestClient, params: dict[str, str]
    ) -> None:
        twilio_mocker.stub_create_message(**params)

        client.create_message(**params)

        with pytest.raises(UnmatchedRequestError):
            client.create_message(**{**params, "body": "Other"})
        assert twilio_mocker.store.message_count() == 1

    def test_expected_body_compares_string_forms(
        self, twilio_mocker: Mocker, client: TwilioRestClient, params: dict[str, str]
    ) -> None:
        twilio_mocker.stub_create_message(**params, validity_period=60)

        client.create_message(**params, validity_period="60")

        assert twilio_mocker.store.message_count() == 1

    def test_missing_to_is_provider_error(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_create_message()

        with pytest.raises(TwilioRestError) as exc_info:
            client.create_message("", from_="+15005550006", body="hi")

        assert exc_info.value.error_code == "21604"
        assert twilio_mocker.messages() == []

    def test_missing_body_is_provider_error(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_create_message()

        with pytest.raises(TwilioRestError) as exc_info:
            client.create_message("+15005550003", from_="+15005550006")

        assert exc_info.value.error_code == "21602"

    def test_unstubbed_create_fails_loudly(self, client: TwilioRestClient, twilio_mocker: Mocker) -> None:
        with pytest.raises(UnmatchedRequestError):
            client.create_message("+15005550003", from_="+15005550006", body="hi")


class TestBuyNumber:
    def test_buy_returns_number(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_buy_number()
        phone_number = twilio_mocker.numbers.generate()

        number = client.buy_number(phone_number, sms_url="test.host/callback", sms_method="POST")

        assert number.phone_number == phone_number
        assert number.sid == twilio_mocker.config.account_sid
        assert twilio_mocker.incoming_numbers() == [number]

    def test_buy_by_area_code(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_buy_number()

        number = client.buy_number(area_code="212")

        assert number.phone_number.startswith("+1212555")

    def test_expected_fields(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.stub_buy_number(phone_number="+15005550006", sms_method="POST")

        client.buy_number("+15005550006", sms_method="POST")

        with pytest.raises(UnmatchedRequestError):
            client.buy_number("+15005550006", sms_method="GET")

    def test_missing_number_is_provider_error(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_buy_number()

        with pytest.raises(TwilioRestError) as exc_info:
            client.buy_number()

        assert exc_info.value.status_code == 400


class TestIncomingNumberList:
    def test_returns_seeded_numbers_in_order(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        number_1 = twilio_mocker.numbers.generate()
        number_2 = twilio_mocker.numbers.generate()
        twilio_mocker.set_incoming_number_list([number_1, number_2])

        numbers = client.list_incoming_numbers()

        assert len(numbers) == 2
        assert [n.phone_number for n in numbers] == [number_1, number_2]
        assert all(n.sid.startswith("PN") for n in numbers)

    def test_reseeding_replaces_list(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.set_incoming_number_list(["+15005550010", "+15005550011"])
        twilio_mocker.set_incoming_number_list(["+15005550012"])

        numbers = client.list_incoming_numbers()

        assert [n.phone_number for n in numbers] == ["+15005550012"]

    def test_filter_by_phone_number(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.set_incoming_number_list(["+15005550010", "+15005550011"])

        numbers = client.list_incoming_numbers(phone_number="+15005550011")

        assert [n.phone_number for n in numbers] == ["+15005550011"]

    def test_bought_numbers_are_listed(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.set_incoming_number_list(["+15005550010"])
        twilio_mocker.stub_buy_number()

        client.buy_number("+15005550020")

        assert [n.phone_number for n in client.list_incoming_numbers()] == [
            "+15005550010",
            "+15005550020",
        ]


class TestFetch:
    def test_fetch_message_exact_attributes(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.fetch_message(
            MESSAGE_SID,
            {"status": "failed", "error_code": 30004, "error_message": "Message blocked"},
        )

        message = client.fetch_message(MESSAGE_SID)

        assert message.sid == MESSAGE_SID
        assert message.status == "failed"
        assert message.error_code == 30004
        assert message.error_message == "Message blocked"

    def test_fetch_message_wire_shape(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "delivered", "body": "hi"})

        response = client._get_client().get(
            client._get_api_url(f"/Messages/{MESSAGE_SID}.json"),
            auth=client._get_auth(),
        )

        assert response.json() == {
            "sid": MESSAGE_SID,
            "from": None,
            "to": None,
            "body": "hi",
            "status": "delivered",
            "error_code": None,
            "error_message": None,
        }

    def test_status_progression(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "queued"})
        assert client.fetch_message(MESSAGE_SID).status == "queued"

        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "delivered"})
        assert client.fetch_message(MESSAGE_SID).status == "delivered"

    def test_partially_delivered_round_trips(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "partially_delivered"})

        assert client.fetch_message(MESSAGE_SID).status == "partially_delivered"

    def test_string_error_code_rejected_at_bind(self, twilio_mocker: Mocker) -> None:
        with pytest.raises(StubArrangementError):
            twilio_mocker.fetch_message(MESSAGE_SID, {"status": "failed", "error_code": "30004"})

    def test_fetch_other_sid_unmatched(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "sent"})

        with pytest.raises(UnmatchedRequestError):
            client.fetch_message("SM" + "f" * 32)

    def test_fetch_message_requires_status(self, twilio_mocker: Mocker) -> None:
        with pytest.raises(StubArrangementError):
            twilio_mocker.fetch_message(MESSAGE_SID, {"body": "hi"})

        assert twilio_mocker.binder.rule(f"fetch_message:{MESSAGE_SID}") is None

    def test_fetch_message_bad_sid(self, twilio_mocker: Mocker) -> None:
        with pytest.raises(StubArrangementError) as exc_info:
            twilio_mocker.fetch_message("not-a-sid", {"status": "sent"})

        assert exc_info.value.error_code == "INVALID_SID"

    def test_fetch_number(self, twilio_mocker: Mocker, client: TwilioRestClient) -> None:
        phone_number = twilio_mocker.numbers.generate()
        twilio_mocker.fetch_number(NUMBER_SID, {"phone_number": phone_number})

        number = client.fetch_incoming_number(NUMBER_SID)

        assert number.sid == NUMBER_SID
        assert number.phone_number == phone_number

    def test_fetch_number_accepts_any_prefix(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.fetch_number(MESSAGE_SID, {"phone_number": "+15005550006"})

        assert client.fetch_incoming_number(MESSAGE_SID).sid == MESSAGE_SID


class TestLifecycle:
    def test_reset_clears_state_and_rules(
        self, twilio_mocker: Mocker, client: TwilioRestClient
    ) -> None:
        twilio_mocker.stub_create_message()
        client.create_message("+15005550003", from_="+15005550006", body="hi")
        twilio_mocker.fetch_message(MESSAGE_SID, {"status": "sent"})

        twilio_mocker.reset()

        assert twilio_mocker.messages() == []
        assert twilio_mocker.binder.rules == []
        with pytest.raises(UnmatchedRequestError):
            client.fetch_message(MESSAGE_SID)

    def test_auto_stub_defaults(
        self, twilio_mock_config: TwilioMockConfig, client: TwilioRestClient
    ) -> None:
        config = twilio_mock_config.model_copy(update={"auto_stub": True})

        with Mocker(config) as mocker:
            number = client.list_available_numbers()[0]
            client.create_message("+15005550003", from_=number, body="hi")
            client.buy_number(number)

            assert len(mocker.messages()) == 1
            assert [n.phone_number for n in client.list_incoming_numbers()] == [number]

    def test_reset_reinstalls_defaults_when_active(
        self, twilio_mock_config: TwilioMockConfig, client: TwilioRestClient
    ) -> None:
        config = twilio_mock_config.model_copy(update={"auto_stub": True})

        with Mocker(config) as mocker:
            mocker.stub_available_numbers(empty_list=True)
            mocker.reset()

            assert len(client.list_available_numbers()) == 1

    def test_seeded_mockers_agree(self, twilio_mock_config: TwilioMockConfig) -> None:
        first = Mocker(twilio_mock_config)
        second = Mocker(twilio_mock_config)

        assert first.numbers.generate() == second.numbers.generate()
        assert first.sids.message() == second.sids.message()

    def test_stopped_mocker_does_not_intercept(
        self, twilio_mock_config: TwilioMockConfig
    ) -> None:
        mocker = Mocker(twilio_mock_config)
        mocker.start()
        mocker.stop()

        assert not mocker.binder.is_active
