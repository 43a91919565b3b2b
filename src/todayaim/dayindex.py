import logging
from datetime import date
from typing import Dict, Iterable, List

from .model import Aim, DateKey, FilterCriterion, predicate_for

logger = logging.getLogger(__name__)

DayIndex = Dict[DateKey, List[Aim]]


def build_day_index(aims: Iterable[Aim], today: date,
                    criterion: FilterCriterion = FilterCriterion.ALL) -> DayIndex:
    """
    Groups aims by their calendar day under the given filter.
    Order inside each day follows the input order; days without a
    matching aim get no key at all. An aim whose day falls outside the
    calendar is logged and left out.
    """
    keep = predicate_for(criterion)
    index: DayIndex = {}
    for aim in aims:
        if not keep(aim):
            continue
        try:
            key = aim.date_key(today)
        except OverflowError:
            logger.warning("Skipping aim %s: offset %s is out of range",
                           aim.id, aim.offset_from_today)
            continue
        index.setdefault(key, []).append(aim)
    return index


def lookup(index: DayIndex, key: DateKey) -> List[Aim]:
    return list(index.get(key, []))


def aims_in_month(index: DayIndex, year_month) -> DayIndex:
    """Sub-index for one displayed month, sorted by day."""
    return {key: index[key] for key in sorted(index, key=lambda k: k.to_date())
            if key.in_month(year_month)}
