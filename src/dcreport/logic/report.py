# src/dcreport/logic/report.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from dcreport.logic.derivation import round_half_up
from dcreport.models.case_record import CaseRecord

REFERRER_LABEL_MAX = 15
TOP_REFERRER_LIMIT = 5


@dataclass
class ReferrerGroup:
    """Cases of one referring doctor, in the order they were collected."""
    referrer: str
    cases: List[CaseRecord] = field(default_factory=list)

    @property
    def dc_total(self) -> int:
        return sum(c.dc_amount for c in self.cases)


@dataclass(frozen=True)
class SummaryMetrics:
    total_collected: float    # sum of fee_paid
    total_outstanding: float  # sum of fee_due
    patient_count: int        # distinct patient_name values
    total_dc: int             # sum of dc_amount


@dataclass(frozen=True)
class ChartPoint:
    label: str
    count: int


def group_by_referrer(cases: Iterable[CaseRecord]) -> List[ReferrerGroup]:
    """
    Group cases by referrer.

    Groups are sorted by referrer name; cases keep their input order.
    Only referrers that actually occur get a group.
    """
    groups: Dict[str, ReferrerGroup] = {}
    for case in cases:
        group = groups.get(case.referrer)
        if group is None:
            group = groups[case.referrer] = ReferrerGroup(referrer=case.referrer)
        group.cases.append(case)
    return [groups[key] for key in sorted(groups)]


def summarize(cases: Iterable[CaseRecord]) -> SummaryMetrics:
    """
    Dashboard totals.

    patient_count counts distinct display names, so two people sharing
    both name and age are counted once.
    """
    collected = 0.0
    outstanding = 0.0
    dc = 0
    names = set()
    for case in cases:
        collected += case.fee_paid
        outstanding += case.fee_due
        dc += case.dc_amount
        names.add(case.patient_name)
    return SummaryMetrics(
        total_collected=collected,
        total_outstanding=outstanding,
        patient_count=len(names),
        total_dc=dc,
    )


def _count_in_encounter_order(values: Iterable[str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for v in values:
        counts[v] = counts.get(v, 0) + 1
    return counts


def shorten_label(text: str, limit: int = REFERRER_LABEL_MAX) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def top_referrers(cases: Iterable[CaseRecord], limit: int = TOP_REFERRER_LIMIT) -> List[ChartPoint]:
    """
    Referrers with the most cases, highest first.

    Counting uses the full name; only the label is shortened. Ties keep
    the order in which the referrers first appeared.
    """
    counts = _count_in_encounter_order(c.referrer for c in cases)
    # sorted() is stable, so equal counts stay in encounter order
    ranked = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [ChartPoint(label=shorten_label(name), count=n) for name, n in ranked[:limit]]


def case_type_distribution(cases: Iterable[CaseRecord]) -> List[ChartPoint]:
    """Every case type with its count, in first-encounter order."""
    counts = _count_in_encounter_order(c.case_type for c in cases)
    return [ChartPoint(label=name, count=n) for name, n in counts.items()]


def format_currency(amount: float) -> str:
    """
    Indian digit grouping, no decimals, no currency symbol.

    e.g. 1234567 -> "12,34,567", 999.5 -> "1,000", -2.5 -> "-3"
    """
    # halves round away from zero on both sides
    value = round_half_up(abs(amount))
    sign = "-" if amount < 0 and value else ""
    digits = str(value)
    if len(digits) <= 3:
        return sign + digits

    head, tail = digits[:-3], digits[-3:]
    pairs: List[str] = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return sign + ",".join(pairs) + "," + tail
