from datetime import date, datetime

import pytest

from dyntables.core.enums import SortDirection
from dyntables.domain.entities.query import RecordQuery
from dyntables.services.query_engine import (
    apply_filters,
    apply_search,
    apply_sort,
    daily_counts,
    paginate,
    query,
)


@pytest.fixture
def records(make_record):
    return [
        make_record({"nombre": "Ana", "email": "ana@x.com", "edad": 30, "estado": "cliente",
                     "alta": "2024-01-10T00:00:00", "activo": True},
                    created_at=datetime(2024, 1, 15, 9, 0)),
        make_record({"nombre": "Luis", "email": "luis@x.com", "edad": 41, "estado": "nuevo",
                     "activo": False, "lastMessage": {"body": "Quiero una cotización"}},
                    created_at=datetime(2024, 2, 1, 18, 30)),
        make_record({"nombre": "Marta", "email": "marta@y.com", "edad": 25, "estado": "nuevo",
                     "alta": "2024-03-05T00:00:00"},
                    created_at=datetime(2024, 3, 20, 8, 0)),
    ]


def names(records):
    return [r.data["nombre"] for r in records]


class TestFilters:
    def test_created_at_range_with_whole_day_upper_bound(self, records, contacts_table):
        result = apply_filters(records, {"createdAt": {"gte": "2024-02-01", "lte": "2024-02-01"}}, contacts_table)
        assert names(result) == ["Luis"]

    def test_exact_match_is_case_insensitive(self, records, contacts_table):
        assert names(apply_filters(records, {"estado": "NUEVO"}, contacts_table)) == ["Luis", "Marta"]

    def test_numeric_range(self, records, contacts_table):
        assert names(apply_filters(records, {"edad": {"gte": 26, "lte": "40"}}, contacts_table)) == ["Ana"]

    def test_list_means_any_of(self, records, contacts_table):
        assert names(apply_filters(records, {"nombre": ["ana", "Marta"]}, contacts_table)) == ["Ana", "Marta"]

    def test_boolean_filter(self, records, contacts_table):
        assert names(apply_filters(records, {"activo": "false"}, contacts_table)) == ["Luis"]

    def test_date_field_matches_whole_day(self, records, contacts_table):
        assert names(apply_filters(records, {"alta": "2024-03-05"}, contacts_table)) == ["Marta"]

    def test_blank_and_unknown_filters_are_ignored(self, records, contacts_table):
        filters = {"estado": "", "edad": {"gte": None, "lte": ""}, "color": "rojo", "nombre": {}}
        assert len(apply_filters(records, filters, contacts_table)) == 3

    def test_unsupported_operators_are_ignored(self, records, contacts_table):
        assert len(apply_filters(records, {"edad": {"gt": 35}}, contacts_table)) == 3
        assert names(apply_filters(records, {"edad": {"gte": 35, "gt": 1}}, contacts_table)) == ["Luis"]


class TestSearch:
    def test_searches_text_fields(self, records, contacts_table):
        assert names(apply_search(records, "@Y.COM", contacts_table)) == ["Marta"]

    def test_searches_message_body(self, records, contacts_table):
        assert names(apply_search(records, "cotización", contacts_table)) == ["Luis"]

    def test_numbers_are_not_searched(self, records, contacts_table):
        assert apply_search(records, "41", contacts_table) == []

    def test_empty_term_returns_everything(self, records, contacts_table):
        assert len(apply_search(records, "  ", contacts_table)) == 3


class TestSort:
    def test_default_is_newest_first(self, records, contacts_table):
        assert names(apply_sort(records, "created_at", SortDirection.DESC, contacts_table)) == ["Marta", "Luis", "Ana"]

    def test_numeric_sort(self, records, contacts_table):
        assert names(apply_sort(records, "edad", SortDirection.ASC, contacts_table)) == ["Marta", "Ana", "Luis"]

    def test_missing_values_go_last(self, records, contacts_table):
        assert names(apply_sort(records, "alta", SortDirection.DESC, contacts_table)) == ["Marta", "Ana", "Luis"]
        assert names(apply_sort(records, "alta", SortDirection.ASC, contacts_table)) == ["Ana", "Marta", "Luis"]

    def test_text_field_mixing_lists_and_strings(self, make_record, contacts_table):
        mixed = [
            make_record({"nombre": "Luis"}),
            make_record({"nombre": ["ana", "b"]}),
            make_record({"nombre": "Marta"}),
        ]
        ordered = apply_sort(mixed, "nombre", SortDirection.ASC, contacts_table)
        assert [r.data["nombre"] for r in ordered] == [["ana", "b"], "Luis", "Marta"]

    def test_unknown_field_falls_back_to_created_at(self, records, contacts_table):
        assert names(apply_sort(records, "color", SortDirection.ASC, contacts_table)) == ["Ana", "Luis", "Marta"]


class TestPagination:
    def test_pages_partition_the_result(self, records, contacts_table):
        seen = []
        for page in (1, 2):
            result = query(records, RecordQuery(page=page, page_size=2), contacts_table)
            assert result.total == 3
            assert result.pages == 2
            seen.extend(r.id for r in result.records)
        assert sorted(seen) == sorted(r.id for r in records)

    def test_page_past_the_end_is_empty(self, records):
        assert paginate(records, 5, 2) == []

    def test_page_size_is_capped(self, records, contacts_table):
        result = query(records, RecordQuery(page_size=500), contacts_table, max_page_size=2)
        assert result.page_size == 2
        assert len(result.records) == 2


def test_daily_counts_cover_every_day(fixed_now):
    stamps = [datetime(2024, 3, 1, 8), datetime(2024, 3, 1, 9), datetime(2024, 2, 28, 23)]
    assert daily_counts(stamps, 3, now=fixed_now) == [
        (date(2024, 2, 28), 1),
        (date(2024, 2, 29), 0),
        (date(2024, 3, 1), 2),
    ]
