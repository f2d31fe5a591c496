"""
Tests unitarios para RowQueryEngine.
"""
import pytest

from tablesync.domain.entities.table import Cell
from tablesync.shared.exceptions.domain import SchemaError, ValidationError


@pytest.fixture
def tickets(backend, schema_store):
    """
    Tabla de ejemplo:
        1: t1 | open    | ana  | {"a": 1}
        2: t2 | pending | luis | not json
        3: t3 | closed  | ana  |
        4: t4 |         | eva  | [1, 2]
    """
    schema_store.ensure_table("Tickets", ["id", "Status", "Owner", "Message"])
    rows = [
        ["t1", "open", "ana", '{"a": 1}'],
        ["t2", "pending", "luis", "not json"],
        ["t3", "closed", "ana", ""],
        ["t4", "", "eva", "[1, 2]"],
    ]
    for number, values in enumerate(rows, start=1):
        backend.insert_row("Tickets", number, [Cell(value=v) for v in values])
    return "Tickets"


class TestFindByHeaderValue:
    """Tests para find_by_header_value."""

    def test_or_semantics_across_values(self, query_engine, tickets):
        assert query_engine.find_by_header_value(tickets, "Status", ["open", "pending"]) == [1, 2]

    def test_single_value_is_normalized_to_list(self, query_engine, tickets):
        assert query_engine.find_by_header_value(tickets, "Owner", "ana") == [1, 3]

    def test_false_matches_empty_cells(self, query_engine, tickets):
        assert query_engine.find_by_header_value(tickets, "Status", [False]) == [4]

    def test_no_match_returns_empty_list(self, query_engine, tickets):
        assert query_engine.find_by_header_value(tickets, "Status", ["archived"]) == []

    def test_data_return_type_maps_headers_and_parses_message(self, query_engine, tickets):
        data = query_engine.find_by_header_value(tickets, "Owner", ["ana", "luis"], return_type="data")

        assert data == [
            {"id": "t1", "Status": "open", "Owner": "ana", "Message": {"a": 1}},
            {"id": "t2", "Status": "pending", "Owner": "luis", "Message": "not json"},
            {"id": "t3", "Status": "closed", "Owner": "ana", "Message": ""},
        ]

    def test_formula_cells_return_value_and_formula(self, query_engine, backend, tickets):
        backend.set_formula(tickets, 1, 2, '=IF(A2="t1","ana","")', "ana")

        data = query_engine.find_by_header_value(tickets, "id", "t1", return_type="data")

        assert data[0]["Owner"] == {"value": "ana", "formula": '=IF(A2="t1","ana","")'}

    def test_unknown_header_fails(self, query_engine, tickets):
        with pytest.raises(SchemaError) as exc:
            query_engine.find_by_header_value(tickets, "Priority", ["high"])

        assert exc.value.error_code == "UNKNOWN_HEADER"

    def test_invalid_return_type_fails_before_reading(self, query_engine, backend, tickets, monkeypatch):
        def explode(name):
            raise AssertionError("no deberia leer filas")

        monkeypatch.setattr(backend, "read_rows", explode)

        with pytest.raises(SchemaError):
            query_engine.find_by_header_value(tickets, "Status", ["open"], return_type="json")

    def test_unknown_table_fails(self, query_engine):
        with pytest.raises(SchemaError) as exc:
            query_engine.find_by_header_value("Missing", "Status", ["open"])

        assert exc.value.error_code == "TABLE_NOT_FOUND"


class TestFindByMultipleHeaderValues:
    """Tests para find_by_multiple_header_values."""

    def test_all_requires_every_predicate(self, query_engine, tickets):
        rows = query_engine.find_by_multiple_header_values(
            tickets,
            [("Owner", ["ana"]), ("Status", ["open"])],
            condition="all",
        )

        assert rows == [1]

    def test_any_requires_one_predicate(self, query_engine, tickets):
        rows = query_engine.find_by_multiple_header_values(
            tickets,
            [("Owner", ["ana"]), ("Status", ["open"])],
            condition="any",
        )

        assert rows == [1, 3]

    def test_mapping_predicates_and_empty_is_false(self, query_engine, tickets):
        rows = query_engine.find_by_multiple_header_values(
            tickets,
            {"Status": [False, "pending"], "Owner": ["eva", "luis"]},
        )

        assert rows == [2, 4]

    def test_dict_predicates_with_data_return_type(self, query_engine, tickets):
        data = query_engine.find_by_multiple_header_values(
            tickets,
            [{"header": "Status", "values": "closed"}],
            return_type="data",
        )

        assert [d["id"] for d in data] == ["t3"]

    def test_invalid_condition_fails(self, query_engine, tickets):
        with pytest.raises(SchemaError):
            query_engine.find_by_multiple_header_values(tickets, [("Owner", ["ana"])], condition="most")

    def test_unknown_header_in_any_predicate_fails(self, query_engine, tickets):
        with pytest.raises(SchemaError):
            query_engine.find_by_multiple_header_values(
                tickets,
                [("Owner", ["ana"]), ("Priority", ["high"])],
            )

    def test_empty_predicates_fail(self, query_engine, tickets):
        with pytest.raises(ValidationError):
            query_engine.find_by_multiple_header_values(tickets, [])
