"""
Report Aggregator - Listing, summary and export views over a student snapshot.

Every function here takes a snapshot (any sequence of records exposing the
Student attributes) and returns new sequences. Records are never mutated and
no state is kept between calls, so concurrent requests can aggregate the same
snapshot safely.

Views provided:
1. filter_records   - case-insensitive name search AND risk tier filter
2. sort_records     - stable sort by any listed column, asc or desc
3. paginate         - zero-based page slice, empty past the end
4. summarize        - total and per-tier counts
5. to_export_rows / to_spreadsheet_rows - fixed-column rows for the PDF and
   Excel renderers, always ordered by dropout probability descending
"""

import enum
from datetime import datetime, timezone
from typing import Iterable, List, NamedTuple, Optional, Sequence

from dropout_tracker.errors import AggregationError
from dropout_tracker.services.risk_model import RiskTier

ALL_TIERS = "All"

EXPORT_COLUMNS = ["Name", "Attendance %", "CGPA", "Assignments %", "Dropout Risk %", "Risk Level"]
SPREADSHEET_COLUMNS = EXPORT_COLUMNS + ["Date Added"]


class SortKey(str, enum.Enum):
    NAME = "name"
    ATTENDANCE = "attendance"
    CGPA = "cgpa"
    ASSIGNMENT_COMPLETION = "assignmentCompletion"
    DROPOUT_PROBABILITY = "dropoutProbability"
    RISK_LEVEL = "riskLevel"
    CREATED_AT = "createdAt"


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class ReportSummary(NamedTuple):
    total: int
    high_count: int
    medium_count: int
    low_count: int

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "highCount": self.high_count,
            "mediumCount": self.medium_count,
            "lowCount": self.low_count,
        }


class ReportView(NamedTuple):
    """One page of a filtered, sorted listing plus whole-snapshot counts."""
    items: list
    summary: ReportSummary
    total_matching: int
    page_index: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total_matching + self.page_size - 1) // self.page_size


# Snake-case aliases so Python callers can use attribute names directly
_SORT_KEY_ALIASES = {
    "assignment_completion": SortKey.ASSIGNMENT_COMPLETION,
    "dropout_probability": SortKey.DROPOUT_PROBABILITY,
    "risk_level": SortKey.RISK_LEVEL,
    "created_at": SortKey.CREATED_AT,
}

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _parse_sort_key(key) -> SortKey:
    if isinstance(key, SortKey):
        return key
    if key in _SORT_KEY_ALIASES:
        return _SORT_KEY_ALIASES[key]
    try:
        return SortKey(key)
    except ValueError:
        raise AggregationError(
            "Unknown sort key {!r}; expected one of {}".format(key, [k.value for k in SortKey])
        ) from None


def _parse_direction(direction) -> SortDirection:
    if isinstance(direction, SortDirection):
        return direction
    try:
        return SortDirection(str(direction).lower())
    except ValueError:
        raise AggregationError("Unknown sort direction {!r}; expected 'asc' or 'desc'".format(direction)) from None


def _parse_tier_filter(tier_filter) -> Optional[RiskTier]:
    """Return None for 'All' (no filtering), else the requested tier."""
    if tier_filter is None or str(tier_filter).strip().lower() == ALL_TIERS.lower():
        return None
    try:
        return RiskTier.parse(tier_filter)
    except ValueError:
        raise AggregationError(
            "Unknown risk level filter {!r}; expected All, Low, Medium or High".format(tier_filter)
        ) from None


def _tier_of(record) -> RiskTier:
    return RiskTier.parse(record.risk_level)


def _timestamp(record) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC
    created_at = record.created_at
    if created_at is None:
        return _EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


_SORT_ACCESSORS = {
    SortKey.NAME: lambda r: r.name.casefold(),
    SortKey.ATTENDANCE: lambda r: r.attendance,
    SortKey.CGPA: lambda r: r.cgpa,
    SortKey.ASSIGNMENT_COMPLETION: lambda r: r.assignment_completion,
    SortKey.DROPOUT_PROBABILITY: lambda r: r.dropout_probability,
    SortKey.RISK_LEVEL: lambda r: _tier_of(r).ordinal,
    SortKey.CREATED_AT: _timestamp,
}


def filter_records(records: Iterable, search_term: Optional[str] = None,
                   tier_filter: Optional[str] = ALL_TIERS) -> list:
    """
    Keep records whose name contains search_term (case-insensitive) and whose
    risk level equals tier_filter. Both predicates must hold; a blank search
    term and the 'All' tier match everything.
    """
    tier = _parse_tier_filter(tier_filter)
    needle = (search_term or "").strip().casefold()

    return [
        r for r in records
        if (not needle or needle in r.name.casefold())
        and (tier is None or _tier_of(r) is tier)
    ]


def sort_records(records: Iterable, key="createdAt", direction="asc") -> list:
    """
    Stable sort by one column.

    Records with equal keys keep their incoming relative order in both
    directions, so paging through a listing is reproducible across requests.
    Risk level sorts by ordinal (High > Medium > Low), not alphabetically.
    """
    accessor = _SORT_ACCESSORS[_parse_sort_key(key)]
    descending = _parse_direction(direction) is SortDirection.DESC
    # sorted(reverse=True) preserves the original order of equal elements
    return sorted(records, key=accessor, reverse=descending)


def paginate(records: Sequence, page_index: int, page_size: int) -> list:
    """Return page `page_index` (zero-based) of `page_size` records."""
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise AggregationError("page_size must be a positive integer, got {!r}".format(page_size))
    if isinstance(page_index, bool) or not isinstance(page_index, int) or page_index < 0:
        raise AggregationError("page_index must be a non-negative integer, got {!r}".format(page_index))

    start = page_index * page_size
    return list(records[start:start + page_size])


def summarize(records: Iterable) -> ReportSummary:
    """Count records in total and per risk tier."""
    counts = {RiskTier.HIGH: 0, RiskTier.MEDIUM: 0, RiskTier.LOW: 0}
    for r in records:
        counts[_tier_of(r)] += 1
    return ReportSummary(
        total=sum(counts.values()),
        high_count=counts[RiskTier.HIGH],
        medium_count=counts[RiskTier.MEDIUM],
        low_count=counts[RiskTier.LOW],
    )


def _by_risk(records: Iterable) -> list:
    return sort_records(records, SortKey.DROPOUT_PROBABILITY, SortDirection.DESC)


def to_export_rows(records: Iterable) -> List[list]:
    """
    Flat rows for the PDF report, highest dropout risk first.

    Ordering ignores whatever filter or sort the caller had applied to the
    listing: reports are a full, risk-ordered snapshot.
    Columns follow EXPORT_COLUMNS.
    """
    return [
        [
            r.name,
            "{}%".format(r.attendance),
            "{:.2f}".format(r.cgpa),
            "{}%".format(r.assignment_completion),
            "{}%".format(r.dropout_probability),
            _tier_of(r).value,
        ]
        for r in _by_risk(records)
    ]


def to_spreadsheet_rows(records: Iterable) -> List[list]:
    """
    Rows for the Excel report: raw numbers, CGPA as a 2-decimal string and
    the creation date. Same ordering as to_export_rows.
    Columns follow SPREADSHEET_COLUMNS.
    """
    return [
        [
            r.name,
            r.attendance,
            "{:.2f}".format(r.cgpa),
            r.assignment_completion,
            r.dropout_probability,
            _tier_of(r).value,
            _timestamp(r).strftime("%Y-%m-%d") if r.created_at else "",
        ]
        for r in _by_risk(records)
    ]


def build_report_view(records: Sequence, search_term: Optional[str] = None,
                      tier_filter: Optional[str] = ALL_TIERS, sort_key="createdAt",
                      direction="desc", page_index: int = 0, page_size: int = 10) -> ReportView:
    """
    Compose filter → sort → paginate for one listing request.

    The summary always covers the whole snapshot so the listing header and
    the PDF footer show the same numbers.
    """
    # Validate paging arguments before doing any work
    paginate([], page_index, page_size)

    matching = sort_records(filter_records(records, search_term, tier_filter), sort_key, direction)
    return ReportView(
        items=paginate(matching, page_index, page_size),
        summary=summarize(records),
        total_matching=len(matching),
        page_index=page_index,
        page_size=page_size,
    )
