"""Tests for subscription liveness."""
import datetime as dt

import pytest

from app.services.plan_access import is_subscription_active

NOW = dt.datetime(2025, 6, 15, 12, 0, tzinfo=dt.timezone.utc)


@pytest.mark.parametrize("status", ["active", "trialing", "ACTIVE", " Trialing "])
def test_live_statuses_without_period_end(status):
    assert is_subscription_active(status, None, now=NOW) is True


@pytest.mark.parametrize("status", [None, "", "canceled", "past_due", "incomplete", "unpaid", "incomplete_expired"])
def test_other_statuses_are_inactive(status):
    future = NOW + dt.timedelta(days=10)
    assert is_subscription_active(status, future, now=NOW) is False


def test_period_end_in_future_is_active():
    assert is_subscription_active("active", NOW + dt.timedelta(seconds=1), now=NOW) is True


def test_period_end_equal_to_now_is_still_active():
    assert is_subscription_active("active", NOW, now=NOW) is True


def test_period_end_in_past_is_inactive_even_if_status_active():
    assert is_subscription_active("active", NOW - dt.timedelta(seconds=1), now=NOW) is False


def test_naive_period_end_is_treated_as_utc():
    naive_future = (NOW + dt.timedelta(hours=1)).replace(tzinfo=None)
    naive_past = (NOW - dt.timedelta(hours=1)).replace(tzinfo=None)
    assert is_subscription_active("active", naive_future, now=NOW) is True
    assert is_subscription_active("active", naive_past, now=NOW) is False


def test_iso_string_period_end():
    assert is_subscription_active("active", "2025-07-01T00:00:00Z", now=NOW) is True
    assert is_subscription_active("active", "2025-06-01T00:00:00+00:00", now=NOW) is False


def test_unparseable_period_end_is_inactive():
    assert is_subscription_active("active", "not-a-date", now=NOW) is False


def test_empty_string_period_end_means_no_end():
    assert is_subscription_active("trialing", "", now=NOW) is True
