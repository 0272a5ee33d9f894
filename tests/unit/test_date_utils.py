"""Unit tests for timestamp parsing"""

from datetime import datetime, timedelta, timezone

import pytest

from depco_simulator.utils.date_utils import parse_timestamp


def test_parse_timestamp_with_offset():
    parsed = parse_timestamp("2026-10-01T09:00:00+02:00")

    assert parsed == datetime(2026, 10, 1, 7, 0, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(hours=2)


def test_parse_timestamp_naive_is_utc():
    assert parse_timestamp("2026-10-01T09:00:00") == datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [None, ""])
def test_parse_timestamp_absent(value):
    assert parse_timestamp(value) is None


@pytest.mark.parametrize("value", ["yesterday", 1727773200])
def test_parse_timestamp_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_timestamp(value)
