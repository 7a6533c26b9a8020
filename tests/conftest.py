import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tablestore_mcp.config_loader import Settings  # noqa: E402
from tablestore_mcp.errors import BackendHTTPError  # noqa: E402
from tablestore_mcp.store.models import (  # noqa: E402
    Base,
    BaseSchema,
    Field,
    ListBasesResponse,
    Record,
    Table,
    View,
)


def make_table(table_id: str, name: str, field_specs: Iterable[Tuple[str, str, str]]) -> Table:
    """Build a table; the first field spec becomes the primary field."""

    fields = [Field(id=fid, name=fname, type=ftype) for fid, fname, ftype in field_specs]
    return Table(
        id=table_id,
        name=name,
        primaryFieldId=fields[0].id,
        fields=fields,
        views=[View(id=f"viw{table_id}", name="Grid view", type="grid")],
    )


class FakeStoreClient:
    """In-memory stand-in for RecordStoreClient that records every call."""

    def __init__(
        self,
        bases: List[Base],
        schemas: Dict[str, BaseSchema],
        records: Dict[Tuple[str, str], List[Record]],
        failing_tables: Iterable[Tuple[str, str]] = (),
        forbidden_bases: Iterable[str] = (),
    ) -> None:
        self.bases = bases
        self.schemas = schemas
        self.records = records
        self.failing_tables = set(failing_tables)
        self.forbidden_bases = set(forbidden_bases)
        self.calls: List[tuple] = []

    async def list_bases(self) -> ListBasesResponse:
        self.calls.append(("list_bases",))
        return ListBasesResponse(bases=self.bases)

    async def get_base_schema(self, base_id: str) -> BaseSchema:
        self.calls.append(("get_base_schema", base_id))
        if base_id in self.forbidden_bases:
            raise BackendHTTPError(403, "Forbidden", '{"error":"INVALID_PERMISSIONS"}')
        if base_id not in self.schemas:
            raise BackendHTTPError(404, "Not Found", '{"error":"NOT_FOUND"}')
        return self.schemas[base_id]

    async def search_records(
        self,
        base_id: str,
        table_id: str,
        term: str,
        field_names: Optional[List[str]] = None,
        max_records: Optional[int] = None,
        view: Optional[str] = None,
    ) -> List[Record]:
        self.calls.append(("search_records", base_id, table_id, term, max_records))
        if (base_id, table_id) in self.failing_tables:
            raise BackendHTTPError(500, "Internal Server Error", "boom")
        # Deliberately ignores max_records so callers must enforce their own caps.
        return list(self.records.get((base_id, table_id), []))

    async def list_records(self, base_id, table_id, **options) -> List[Record]:
        self.calls.append(("list_records", base_id, table_id, options))
        return list(self.records.get((base_id, table_id), []))

    async def get_record(self, base_id: str, table_id: str, record_id: str) -> Record:
        self.calls.append(("get_record", base_id, table_id, record_id))
        for record in self.records.get((base_id, table_id), []):
            if record.id == record_id:
                return record
        raise BackendHTTPError(404, "Not Found", '{"error":"NOT_FOUND"}')

    async def create_record(self, base_id, table_id, fields) -> Record:
        self.calls.append(("create_record", base_id, table_id, fields))
        return Record(id="recNEW", fields=fields)

    async def update_records(self, base_id, table_id, records) -> List[Record]:
        self.calls.append(("update_records", base_id, table_id, records))
        return [Record(id=item["id"], fields=item["fields"]) for item in records]

    async def delete_records(self, base_id, table_id, record_ids) -> List[str]:
        self.calls.append(("delete_records", base_id, table_id, record_ids))
        return list(record_ids)

    async def create_table(self, base_id, name, fields, description=None) -> Table:
        self.calls.append(("create_table", base_id, name, fields, description))
        return make_table("tblNEW", name, [("fldNEW", fields[0]["name"], fields[0]["type"])])

    async def update_table(self, base_id, table_id, updates) -> Table:
        self.calls.append(("update_table", base_id, table_id, updates))
        table = self.schemas[base_id].find_table(table_id)
        return table.model_copy(update={k: v for k, v in updates.items() if v is not None})

    async def create_field(self, base_id, table_id, field) -> Field:
        self.calls.append(("create_field", base_id, table_id, field))
        return Field(id="fldCREATED", **field)

    async def update_field(self, base_id, table_id, field_id, updates) -> Field:
        self.calls.append(("update_field", base_id, table_id, field_id, updates))
        return Field(id=field_id, name=updates.get("name") or "Old", type="singleLineText")

    def called(self, name: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="key-test-123", web_url="https://store.example")


@pytest.fixture
def fake_client() -> FakeStoreClient:
    projects = make_table(
        "tblProjects",
        "Projects",
        [
            ("fldName", "Project Name", "singleLineText"),
            ("fldStatus", "Status", "singleSelect"),
            ("fldBudget", "Budget", "number"),
            ("fldNotes", "Notes", "multilineText"),
        ],
    )
    broken = make_table("tblBroken", "Broken", [("fldTitle", "Title", "singleLineText")])
    contacts = make_table(
        "tblContacts",
        "Contacts",
        [("fldFull", "Full Name", "singleLineText"), ("fldEmail", "Email", "email")],
    )
    records = {
        ("appOne", "tblProjects"): [
            Record(
                id="rec1",
                fields={"Project Name": "Harbor Bridge", "Status": "Active", "Budget": 1200},
            ),
            Record(id="rec2", fields={"Project Name": "Mill Street", "Notes": "Needs permits"}),
        ],
        ("appTwo", "tblContacts"): [
            Record(id=f"recC{index}", fields={"Full Name": f"Person {index}"})
            for index in range(15)
        ],
    }
    return FakeStoreClient(
        bases=[
            Base(id="appOne", name="Operations", permissionLevel="create"),
            Base(id="appTwo", name="CRM", permissionLevel="read"),
        ],
        schemas={
            "appOne": BaseSchema(tables=[broken, projects]),
            "appTwo": BaseSchema(tables=[contacts]),
        },
        records=records,
        failing_tables=[("appOne", "tblBroken")],
    )
