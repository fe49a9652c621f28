"""Tests for SettlementEvent extraction from checkout sessions."""

import pytest

from tollgate.adapters.payment.fake import make_checkout_event
from tollgate.domains.settlement.exceptions import InvalidSettlementEventError
from tollgate.domains.settlement.types import SettlementEvent


def _session(**kwargs):
    return make_checkout_event(**kwargs)["data"]["object"]


class TestFromCheckoutSession:
    def test_reads_seconds_from_metadata(self):
        event = SettlementEvent.from_checkout_session("evt_1", _session(hours_in_seconds="7200"))

        assert event.seconds_to_credit == 7200
        assert event.principal_id == "user_1"
        assert event.amount_paid == 500
        assert event.currency == "eur"
        assert event.reference == "cs_test_1"
        assert event.customer_reference == "cus_test_1"

    def test_falls_back_to_hours(self):
        event = SettlementEvent.from_checkout_session(
            "evt_1", _session(hours="3", hours_in_seconds=None)
        )

        assert event.seconds_to_credit == 3 * 3600
        assert event.hours_purchased == 3

    def test_expanded_customer_object(self):
        session = _session()
        session["customer"] = {"id": "cus_expanded", "object": "customer"}

        event = SettlementEvent.from_checkout_session("evt_1", session)

        assert event.customer_reference == "cus_expanded"

    def test_missing_amount_defaults_to_zero(self):
        session = _session()
        session["amount_total"] = None

        assert SettlementEvent.from_checkout_session("evt_1", session).amount_paid == 0

    @pytest.mark.parametrize(
        "overrides",
        [
            {"principal_id": None},
            {"principal_id": ""},
            {"hours": None, "hours_in_seconds": None},
            {"hours": "lots", "hours_in_seconds": None},
            {"hours_in_seconds": "0"},
            {"hours_in_seconds": "-3600"},
        ],
    )
    def test_rejects_malformed_metadata(self, overrides):
        with pytest.raises(InvalidSettlementEventError) as exc_info:
            SettlementEvent.from_checkout_session("evt_bad", _session(**overrides))

        assert exc_info.value.event_id == "evt_bad"

    def test_invalid_event_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            SettlementEvent.parse(event_id="evt_1", principal_id="user_1", seconds_to_credit=0)
