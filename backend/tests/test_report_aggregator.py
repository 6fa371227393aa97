"""Unit tests for the report aggregator."""

import copy

import pytest

from conftest import make_student
from dropout_tracker.errors import AggregationError
from dropout_tracker.services.report_aggregator import (
    EXPORT_COLUMNS,
    SPREADSHEET_COLUMNS,
    ReportSummary,
    SortDirection,
    SortKey,
    build_report_view,
    filter_records,
    paginate,
    sort_records,
    summarize,
    to_export_rows,
    to_spreadsheet_rows,
)


def names(records):
    return [r.name for r in records]


# ── filter ───────────────────────────────────────────────────

def test_filter_search_is_case_insensitive_substring(cohort):
    assert names(filter_records(cohort, "SINGH")) == ["vikram singh"]
    assert names(filter_records(cohort, "an")) == ["Rohan Iyer", "Ananya Reddy"]


def test_filter_blank_search_and_all_tier_match_everything(cohort):
    assert filter_records(cohort, None, "All") == cohort
    assert filter_records(cohort, "   ", "all") == cohort


def test_filter_by_tier(cohort):
    assert names(filter_records(cohort, tier_filter="High")) == ["Ananya Reddy", "Arjun Das"]
    assert names(filter_records(cohort, tier_filter="low")) == ["Priya Sharma", "vikram singh"]


def test_filter_predicates_are_and_combined(cohort):
    assert names(filter_records(cohort, "a", "Medium")) == ["Rohan Iyer", "Meera Nair"]
    assert filter_records(cohort, "Priya", "High") == []


def test_filter_unknown_tier_is_rejected(cohort):
    with pytest.raises(AggregationError):
        filter_records(cohort, tier_filter="Critical")


# ── sort ─────────────────────────────────────────────────────

def test_sort_by_name_ignores_case(cohort):
    assert names(sort_records(cohort, "name", "asc")) == [
        "Ananya Reddy", "Arjun Das", "Meera Nair", "Priya Sharma", "Rohan Iyer", "vikram singh"
    ]


def test_sort_by_probability_desc(cohort):
    ordered = sort_records(cohort, SortKey.DROPOUT_PROBABILITY, SortDirection.DESC)
    assert [r.dropout_probability for r in ordered] == [87, 76, 62, 50, 26, 6]


def test_sort_numeric_columns(cohort):
    assert [r.attendance for r in sort_records(cohort, "attendance")] == [10, 20, 40, 50, 75, 95]
    assert [r.cgpa for r in sort_records(cohort, "cgpa", "desc")] == [9.2, 7.5, 5.0, 4.0, 3.0, 2.0]
    assert [r.assignment_completion for r in sort_records(cohort, "assignmentCompletion")] == [
        5, 20, 30, 50, 70, 98
    ]


def test_sort_accepts_snake_case_aliases(cohort):
    assert sort_records(cohort, "dropout_probability") == sort_records(cohort, "dropoutProbability")
    assert sort_records(cohort, "created_at", "desc") == list(reversed(cohort))


def test_sort_by_risk_level_uses_ordinal_not_alphabet(cohort):
    ordered = sort_records(cohort, "riskLevel", "desc")
    assert [r.risk_level for r in ordered] == ["High", "High", "Medium", "Medium", "Low", "Low"]
    # ties keep their incoming order
    assert names(ordered) == [
        "Ananya Reddy", "Arjun Das", "Rohan Iyer", "Meera Nair", "Priya Sharma", "vikram singh"
    ]


def test_sort_by_created_at(cohort):
    assert sort_records(cohort, "createdAt", "asc") == cohort
    assert sort_records(cohort, "createdAt", "desc") == list(reversed(cohort))


def test_sort_is_stable_in_both_directions():
    tied = [
        make_student("First", 50, 5.0, 50, minutes=2),
        make_student("Second", 50, 5.0, 50, minutes=0),
        make_student("Third", 50, 5.0, 50, minutes=1),
        make_student("Low", 100, 10, 100, minutes=3),
    ]
    asc = sort_records(tied, "dropoutProbability", "asc")
    desc = sort_records(tied, "dropoutProbability", "desc")
    assert names(asc) == ["Low", "First", "Second", "Third"]
    assert names(desc) == ["First", "Second", "Third", "Low"]
    # sorting again yields the same output
    assert sort_records(desc, "dropoutProbability", "desc") == desc


def test_sort_rejects_unknown_key_and_direction(cohort):
    with pytest.raises(AggregationError):
        sort_records(cohort, "email")
    with pytest.raises(AggregationError):
        sort_records(cohort, "name", "sideways")


def test_sort_does_not_mutate_input(cohort):
    before = list(cohort)
    sort_records(cohort, "name", "desc")
    assert cohort == before


# ── paginate ─────────────────────────────────────────────────

def test_paginate_partial_last_page_and_past_end():
    records = list(range(25))
    assert paginate(records, 0, 10) == list(range(10))
    assert paginate(records, 2, 10) == [20, 21, 22, 23, 24]
    assert paginate(records, 3, 10) == []
    assert paginate(records, 100, 10) == []


def test_paginate_rejects_invalid_arguments():
    with pytest.raises(AggregationError):
        paginate([1, 2, 3], 0, 0)
    with pytest.raises(AggregationError):
        paginate([1, 2, 3], 0, -5)
    with pytest.raises(AggregationError):
        paginate([1, 2, 3], -1, 10)


# ── summarize ────────────────────────────────────────────────

def test_summarize_counts_per_tier(cohort):
    summary = summarize(cohort)
    assert summary == ReportSummary(total=6, high_count=2, medium_count=2, low_count=2)
    assert summary.total == summary.high_count + summary.medium_count + summary.low_count


def test_summarize_empty_snapshot():
    assert summarize([]) == ReportSummary(0, 0, 0, 0)
    assert summarize([]).to_dict() == {"total": 0, "highCount": 0, "mediumCount": 0, "lowCount": 0}


# ── export rows ──────────────────────────────────────────────

def test_export_rows_format_and_order(cohort):
    rows = to_export_rows(cohort)
    assert len(EXPORT_COLUMNS) == 6
    assert rows[0] == ["Ananya Reddy", "10%", "2.00", "5%", "87%", "High"]
    assert rows[-1] == ["Priya Sharma", "95%", "9.20", "98%", "6%", "Low"]
    assert [r[4] for r in rows] == ["87%", "76%", "62%", "50%", "26%", "6%"]


def test_export_rows_ignore_prior_sort_and_filter_state(cohort):
    by_name = sort_records(cohort, "name", "asc")
    assert to_export_rows(by_name) == to_export_rows(cohort)
    assert to_export_rows(list(reversed(cohort))) == to_export_rows(cohort)


def test_spreadsheet_rows_keep_raw_numbers_and_date(cohort):
    rows = to_spreadsheet_rows(cohort)
    assert len(SPREADSHEET_COLUMNS) == 7
    assert SPREADSHEET_COLUMNS[-1] == "Date Added"
    assert rows[0] == ["Ananya Reddy", 10, "2.00", 5, 87, "High", "2026-01-01"]
    assert [r[4] for r in rows] == [87, 76, 62, 50, 26, 6]


def test_export_rows_empty_snapshot():
    assert to_export_rows([]) == []
    assert to_spreadsheet_rows([]) == []


def test_export_does_not_mutate_records(cohort):
    snapshot = copy.deepcopy([r.to_dict() for r in cohort])
    to_export_rows(cohort)
    to_spreadsheet_rows(cohort)
    assert [r.to_dict() for r in cohort] == snapshot


# ── report view ──────────────────────────────────────────────

def test_build_report_view_composes_filter_sort_paginate(cohort):
    view = build_report_view(cohort, search_term="n", tier_filter="All",
                             sort_key="dropoutProbability", direction="desc",
                             page_index=0, page_size=2)
    assert names(view.items) == ["Ananya Reddy", "Arjun Das"]
    assert view.total_matching == 5
    assert view.total_pages == 3
    # summary covers the whole snapshot, not just the matching records
    assert view.summary.total == 6


def test_build_report_view_empty_input():
    view = build_report_view([], page_index=0, page_size=10)
    assert view.items == []
    assert view.total_matching == 0
    assert view.total_pages == 0
    assert view.summary == ReportSummary(0, 0, 0, 0)


def test_build_report_view_rejects_bad_page_size(cohort):
    with pytest.raises(AggregationError):
        build_report_view(cohort, page_index=0, page_size=0)
