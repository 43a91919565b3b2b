"""Date keys, aim status and filter criteria."""

from datetime import date

import pytest

from todayaim.model import (Aim, DateKey, FilterCriterion, key_of, offset_in_range,
                            predicate_for)
from todayaim.navigation import YearMonth


def test_date_keys_compare_by_fields():
    assert DateKey(2026, 10, 17) == DateKey(2026, 10, 17)
    assert DateKey(2026, 10, 17) != DateKey(2026, 10, 18)
    assert hash(DateKey(2026, 10, 17)) == hash(DateKey(2026, 10, 17))


def test_date_key_works_as_dict_key():
    buckets = {DateKey(2026, 1, 2): "a"}
    assert buckets[DateKey.from_date(date(2026, 1, 2))] == "a"
    assert DateKey(2026, 2, 1) not in buckets


def test_key_of_adds_offset(today):
    assert key_of(today, 0) == DateKey(2026, 10, 17)
    assert key_of(today, 1) == DateKey(2026, 10, 18)
    assert key_of(today, -17) == DateKey(2026, 9, 30)


def test_key_of_rolls_over_year_and_leap_day():
    assert key_of(date(2026, 12, 31), 1) == DateKey(2027, 1, 1)
    assert key_of(date(2028, 2, 28), 1) == DateKey(2028, 2, 29)
    assert key_of(date(2027, 2, 28), 1) == DateKey(2027, 3, 1)


def test_offset_in_range(today):
    assert offset_in_range(0, today)
    assert offset_in_range(-365, today)
    assert not offset_in_range(99999999, today)
    assert not offset_in_range(-99999999, today)


def test_date_key_helpers(today):
    key = DateKey(2026, 10, 17)
    assert key.to_date() == today
    assert key.is_today(today)
    assert key.in_month(YearMonth(2026, 10))
    assert not key.in_month(YearMonth(2026, 11))
    assert key.isoformat() == "2026-10-17"


def test_aim_status():
    assert Aim(1, -3, is_accomplished=True).status() == "accomplished"
    assert Aim(2, -3).status() == "missed"
    assert Aim(3, 0).status() == "pending"
    assert Aim(4, 2).status() == "pending"


def test_filter_predicates():
    plain = Aim(1, 0)
    done = Aim(2, 0, is_accomplished=True)
    starred = Aim(3, 0, is_accomplished=True, is_favorited=True)

    assert all(predicate_for(FilterCriterion.ALL)(a) for a in (plain, done, starred))
    assert [a.id for a in (plain, done, starred)
            if FilterCriterion.ACCOMPLISHED.matches(a)] == [2, 3]
    assert [a.id for a in (plain, done, starred)
            if FilterCriterion.FAVORITED.matches(a)] == [3]


def test_filter_parse_accepts_known_values():
    assert FilterCriterion.parse("all") is FilterCriterion.ALL
    assert FilterCriterion.parse(" Favorited ") is FilterCriterion.FAVORITED


def test_filter_parse_rejects_unknown_values():
    with pytest.raises(ValueError, match="Unknown filter"):
        FilterCriterion.parse("starred")


def test_filter_display_and_cycle():
    assert FilterCriterion.ACCOMPLISHED.display_string == "Accomplished"
    assert FilterCriterion.ALL.next() is FilterCriterion.ACCOMPLISHED
    assert FilterCriterion.FAVORITED.next() is FilterCriterion.ALL
