import datetime as dt

import pytest

from expense_service import ExpenseFilter, parse_date


class TestParseDate:
    def test_iso_date(self):
        assert parse_date("2024-01-31") == dt.date(2024, 1, 31)

    def test_timestamp_keeps_date_part(self):
        assert parse_date("2024-01-31T23:59:59Z") == dt.date(2024, 1, 31)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_means_no_constraint(self, value):
        assert parse_date(value) is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_date("31/01/2024")


class TestExpenseFilter:
    def test_from_query(self):
        filters = ExpenseFilter.from_query(
            {"startDate": "2024-01-01", "endDate": "2024-01-31", "category": "Office"}
        )
        assert filters == ExpenseFilter(
            start_date=dt.date(2024, 1, 1),
            end_date=dt.date(2024, 1, 31),
            category="Office",
        )

    def test_from_empty_query(self):
        assert ExpenseFilter.from_query({}) == ExpenseFilter()
        assert ExpenseFilter.from_query({"category": ""}).category is None

    def test_category_is_kept_verbatim(self):
        assert ExpenseFilter.from_query({"category": " Office "}).category == " Office "

    def test_where_clause_mentions_only_set_fields(self):
        sql = str(ExpenseFilter(start_date=dt.date(2024, 1, 1), category="Office").where_clause())
        assert "expense_by_category.date >=" in sql
        assert "expense_by_category.category =" in sql
        assert "<=" not in sql

    def test_all_category_adds_no_constraint(self):
        sql = str(ExpenseFilter(category="All").where_clause())
        assert "category" not in sql

    def test_to_params_round_trips_through_query(self):
        filters = ExpenseFilter(end_date=dt.date(2024, 2, 29), category="Salaries")
        assert filters.to_params() == {"endDate": "2024-02-29", "category": "Salaries"}
        assert ExpenseFilter.from_query(filters.to_params()) == filters
