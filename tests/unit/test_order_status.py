from datetime import datetime, timedelta, timezone

import pytest

from order_tracking.domain.order_status import (
    StatusPolicy,
    add_tag,
    can_cancel,
    derive_status,
    parse_platform_datetime,
    parse_tags,
)

NOW = datetime(2026, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def _order(**kw):
    base = {
        "created_at": (NOW - timedelta(days=1)).isoformat(),
        "financial_status": "pending",
        "fulfillment_status": None,
        "cancelled_at": None,
        "tags": "",
    }
    base.update(kw)
    return base


# ---------- derive_status ----------


@pytest.mark.parametrize("policy", list(StatusPolicy))
@pytest.mark.parametrize("financial", ["paid", "pending", "refunded", None])
@pytest.mark.parametrize("fulfillment", ["fulfilled", "partial", None])
@pytest.mark.parametrize("stage", ["delivered", "processing", None])
def test_cancelled_wins_over_everything(policy, financial, fulfillment, stage):
    order = _order(
        cancelled_at="2026-03-09T10:00:00Z",
        financial_status=financial,
        fulfillment_status=fulfillment,
        tags="payment-confirmed",
    )
    metafield = {"namespace": "custom", "key": "fulfillment_stage", "value": stage} if stage else None
    assert derive_status(order, metafield, policy=policy) == "cancelled"


def test_paid_without_stage_is_confirmed():
    # order #2050: paid, unfulfilled, no stage metafield, no tags
    order = _order(name="#2050", financial_status="paid")
    assert derive_status(order) == "confirmed"


def test_pending_without_metadata_is_pending_payment():
    # order #2051
    order = _order(name="#2051", financial_status="pending")
    assert derive_status(order) == "pending_payment"


@pytest.mark.parametrize("financial", ["authorized", "partially_paid", "voided", "refunded", None])
def test_other_financial_statuses_fall_back_to_pending_payment(financial):
    assert derive_status(_order(financial_status=financial)) == "pending_payment"


@pytest.mark.parametrize("value,expected", [("Shipped", "shipped"), (" DELIVERED ", "delivered"), ("processing", "processing")])
def test_metafield_stage_is_case_insensitive(value, expected):
    metafield = {"namespace": "custom", "key": "fulfillment_stage", "value": value}
    assert derive_status(_order(financial_status="paid"), metafield) == expected


def test_metafield_stage_accepts_plain_value():
    assert derive_status(_order(), "shipped") == "shipped"


def test_unknown_stage_value_is_ignored():
    metafield = {"value": "lost-in-transit"}
    assert derive_status(_order(financial_status="paid"), metafield) == "confirmed"


def test_metafield_policy_ignores_platform_fields():
    order = _order(financial_status="paid", fulfillment_status="fulfilled", tags="payment-confirmed")
    assert derive_status(order, None, policy=StatusPolicy.METAFIELD) == "confirmed"


@pytest.mark.parametrize(
    "fulfillment,tags,expected",
    [
        ("fulfilled", "", "delivered"),
        ("partial", "", "shipped"),
        ("shipped", "", "shipped"),
        (None, "vip, payment-confirmed", "processing"),
        ("fulfilled", "payment-confirmed", "delivered"),
        (None, "vip", "confirmed"),
    ],
)
def test_platform_policy(fulfillment, tags, expected):
    order = _order(financial_status="paid", fulfillment_status=fulfillment, tags=tags)
    assert derive_status(order, policy=StatusPolicy.PLATFORM) == expected


def test_platform_policy_ignores_stage_metafield():
    metafield = {"value": "delivered"}
    assert derive_status(_order(), metafield, policy="platform") == "pending_payment"


# ---------- can_cancel ----------


@pytest.mark.parametrize("fulfillment", ["fulfilled", "shipped"])
@pytest.mark.parametrize("age_days", [0, 1, 2.5, 30])
def test_fulfilled_or_shipped_orders_cannot_be_cancelled(fulfillment, age_days):
    order = _order(
        fulfillment_status=fulfillment,
        created_at=(NOW - timedelta(days=age_days)).isoformat(),
    )
    assert can_cancel(order, now=NOW) is False


def test_cancel_window_boundary_is_inclusive():
    order = _order(created_at=(NOW - timedelta(days=3)).isoformat())
    assert can_cancel(order, now=NOW) is True


def test_cancel_window_just_past_three_days():
    # 3.0000001 days
    order = _order(created_at=(NOW - timedelta(days=3.0000001)).isoformat())
    assert can_cancel(order, now=NOW) is False


def test_old_order_cannot_be_cancelled():
    order = _order(created_at=(NOW - timedelta(days=10)).isoformat())
    assert can_cancel(order, now=NOW) is False


def test_cancelled_order_cannot_be_cancelled_again():
    assert can_cancel(_order(cancelled_at=NOW.isoformat()), now=NOW) is False


def test_partial_fulfillment_still_cancellable():
    assert can_cancel(_order(fulfillment_status="partial"), now=NOW) is True


@pytest.mark.parametrize("created_at", [None, "", "not-a-date"])
def test_unknown_creation_time_is_not_cancellable(created_at):
    assert can_cancel(_order(created_at=created_at), now=NOW) is False


def test_platform_offsets_are_respected():
    # 2026-03-07T08:00:00-05:00 == 13:00Z, i.e. 2 days 23 hours before NOW
    assert can_cancel(_order(created_at="2026-03-07T08:00:00-05:00"), now=NOW) is True
    assert can_cancel(_order(created_at="2026-03-07T06:00:00-05:00"), now=NOW) is False


# ---------- helpers ----------


def test_parse_platform_datetime_handles_z_and_naive():
    assert parse_platform_datetime("2026-03-10T12:00:00Z") == NOW
    assert parse_platform_datetime("2026-03-10T12:00:00") == NOW


def test_parse_tags_trims_and_drops_blanks():
    assert parse_tags("vip,  wholesale , ,payment-confirmed") == ["vip", "wholesale", "payment-confirmed"]
    assert parse_tags(None) == []
    assert parse_tags("") == []


def test_add_tag_is_order_preserving_union():
    assert add_tag(["vip"], "payment-confirmed") == ["vip", "payment-confirmed"]
    assert add_tag(["payment-confirmed", "vip"], "payment-confirmed") == ["payment-confirmed", "vip"]
