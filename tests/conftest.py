from types import SimpleNamespace

import pytest


class FakeQuery:
    """Minimal stand-in for the Supabase table query builder."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self.client = client
        self.table_name = table
        self.filters: list = []
        self.pending_insert: list | None = None

    def select(self, *args, **kwargs):
        return self

    def limit(self, *args):
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def insert(self, rows):
        self.pending_insert = list(rows)
        return self

    def execute(self):
        if self.pending_insert is not None:
            self.client.tables.setdefault(self.table_name, []).extend(self.pending_insert)
            return SimpleNamespace(data=self.pending_insert)
        rows = self.client.tables.get(self.table_name, [])
        return SimpleNamespace(data=[row for row in rows if all(check(row) for check in self.filters)])


class FakeSupabase:
    def __init__(self, tables: dict | None = None) -> None:
        self.tables = {name: list(rows) for name, rows in (tables or {}).items()}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase(
        {
            "houses": [
                {"id": "H1", "address": "1 Elm St", "latitude": 40.01, "longitude": -75.0},
                {"id": "H2", "address": "2 Elm St", "latitude": "40.02", "longitude": "-75.0"},
                {"id": "H3", "address": "3 Elm St", "latitude": 40.03, "longitude": -75.0},
                {"id": "H4", "address": "No coordinates", "latitude": None, "longitude": None},
            ],
            "assignments": [
                {"house_id": "H3", "status": "assigned"},
                {"house_id": "H2", "status": "completed"},
            ],
            "employee_locations": [
                {"employee_id": "E1", "latitude": 40.0, "longitude": -75.0, "is_online": True},
                {"employee_id": "E2", "latitude": 41.0, "longitude": -74.0, "is_online": False},
            ],
            "profiles": [
                {"id": "E1", "full_name": "Jane Doe", "email": "jane@example.com"},
                {"id": "E2", "full_name": None, "email": "sam@example.com"},
            ],
        }
    )
