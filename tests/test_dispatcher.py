import asyncio
import json
from dataclasses import replace

import pytest

from tablestore_mcp.errors import ConfigurationError
from tablestore_mcp.mcpserver.tools import build_registry, load_toolset

FULL_TOOL_NAMES = [
    "list_bases",
    "list_tables",
    "describe_table",
    "list_records",
    "search_records",
    "get_record",
    "create_record",
    "update_records",
    "delete_records",
    "create_table",
    "update_table",
    "create_field",
    "update_field",
]


def _run(coro):
    return asyncio.run(coro)


def _call(registry, name, arguments):
    envelope = _run(registry.call_tool(name, arguments))
    return envelope, json.loads(envelope["content"][0]["text"])


@pytest.fixture
def registry(settings, fake_client):
    return build_registry(settings, client=fake_client)


def test_profiles_expose_fixed_tool_sets(settings, fake_client):
    full = build_registry(settings, client=fake_client)
    minimal = build_registry(replace(settings, toolset="minimal"), client=fake_client)

    assert [tool["name"] for tool in full.list_tools()] == FULL_TOOL_NAMES
    assert [tool["name"] for tool in minimal.list_tools()] == ["search", "fetch"]


def test_unknown_toolset_is_a_configuration_error(settings, fake_client):
    with pytest.raises(ConfigurationError):
        build_registry(replace(settings, toolset="everything"), client=fake_client)
    with pytest.raises(ConfigurationError):
        load_toolset("")


def test_input_schemas_are_closed_objects(registry):
    for tool in registry.list_tools():
        schema = tool["inputSchema"]
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False
        assert tool["description"]

    by_name = {tool["name"]: tool["inputSchema"] for tool in registry.list_tools()}
    assert set(by_name["get_record"]["required"]) == {"baseId", "tableId", "recordId"}
    assert by_name["list_bases"]["properties"] == {}
    detail = by_name["list_tables"]["properties"]["detailLevel"]
    assert detail["enum"] == ["tableIdentifiersOnly", "identifiersOnly", "full"]
    assert detail["default"] == "full"


def test_unknown_tool_returns_error_envelope(registry, fake_client):
    envelope, message = _call(registry, "delete_everything", {})

    assert envelope["isError"] is True
    assert "Unknown tool: delete_everything" in message
    assert fake_client.calls == []


def test_invalid_arguments_return_error_envelope(registry, fake_client):
    envelope, message = _call(registry, "get_record", {"baseId": "appOne", "tableId": "tblProjects"})
    assert envelope["isError"] is True
    assert "recordId" in message

    envelope, message = _call(
        registry,
        "get_record",
        {"baseId": "appOne", "tableId": "tblProjects", "recordId": "rec1", "extra": True},
    )
    assert envelope["isError"] is True
    assert "extra" in message

    envelope, _ = _call(registry, "list_tables", {"baseId": "appOne", "detailLevel": "everything"})
    assert envelope["isError"] is True
    assert fake_client.calls == []


@pytest.mark.parametrize("max_records", ["5", 5.0, True])
def test_max_records_must_be_a_real_integer(registry, fake_client, max_records):
    for name, extra in (("list_records", {}), ("search_records", {"searchTerm": "harbor"})):
        arguments = {"baseId": "appOne", "tableId": "tblProjects", "maxRecords": max_records, **extra}
        envelope, message = _call(registry, name, arguments)
        assert envelope["isError"] is True
        assert "maxRecords" in message
    assert fake_client.calls == []


def test_non_object_arguments_return_error_envelope(registry, fake_client):
    envelope, message = _call(registry, "list_bases", ["not", "an", "object"])

    assert envelope["isError"] is True
    assert message == "Error in tool list_bases: Invalid arguments: expected an object"
    assert fake_client.calls == []


def test_missing_arguments_object_is_validated(registry):
    envelope, message = _call(registry, "list_bases", None)
    assert envelope["isError"] is False
    assert [base["id"] for base in message] == ["appOne", "appTwo"]

    envelope, _ = _call(registry, "describe_table", None)
    assert envelope["isError"] is True


def test_list_bases_exposes_declared_keys(registry):
    _, bases = _call(registry, "list_bases", {})
    assert bases[0] == {"id": "appOne", "name": "Operations", "permissionLevel": "create"}


def test_list_tables_detail_levels(registry):
    _, tables = _call(registry, "list_tables", {"baseId": "appOne", "detailLevel": "tableIdentifiersOnly"})
    assert tables == [
        {"id": "tblBroken", "name": "Broken"},
        {"id": "tblProjects", "name": "Projects"},
    ]

    _, tables = _call(registry, "list_tables", {"baseId": "appOne", "detailLevel": "identifiersOnly"})
    projects = tables[1]
    assert set(projects) == {"id", "name", "fields", "views"}
    assert projects["fields"][0] == {"id": "fldName", "name": "Project Name"}
    assert projects["views"] == [{"id": "viwtblProjects", "name": "Grid view"}]

    _, tables = _call(registry, "list_tables", {"baseId": "appOne"})
    assert tables[1]["fields"][2] == {"id": "fldBudget", "name": "Budget", "type": "number"}
    assert tables[1]["views"][0]["type"] == "grid"


def test_describe_table_and_missing_table(registry):
    envelope, table = _call(
        registry,
        "describe_table",
        {"baseId": "appTwo", "tableId": "tblContacts", "detailLevel": "tableIdentifiersOnly"},
    )
    assert envelope["isError"] is False
    assert table == {"id": "tblContacts", "name": "Contacts"}

    envelope, message = _call(registry, "describe_table", {"baseId": "appTwo", "tableId": "tblNope"})
    assert envelope["isError"] is True
    assert "Table tblNope not found in base appTwo" in message


def test_record_tools_pass_through_ids_and_fields(registry, fake_client):
    _, record = _call(registry, "get_record", {"baseId": "appOne", "tableId": "tblProjects", "recordId": "rec2"})
    assert record == {"id": "rec2", "fields": {"Project Name": "Mill Street", "Notes": "Needs permits"}}

    _, records = _call(
        registry,
        "list_records",
        {"baseId": "appOne", "tableId": "tblProjects", "sort": [{"field": "Status", "direction": "desc"}]},
    )
    assert [item["id"] for item in records] == ["rec1", "rec2"]
    options = fake_client.called("list_records")[0][3]
    assert options["sort"] == [{"field": "Status", "direction": "desc"}]
    assert options["max_records"] == 100

    _, created = _call(registry, "create_record", {"baseId": "appOne", "tableId": "tblProjects", "fields": {"Project Name": "New"}})
    assert created == {"id": "recNEW", "fields": {"Project Name": "New"}}

    _, updated = _call(
        registry,
        "update_records",
        {"baseId": "appOne", "tableId": "tblProjects", "records": [{"id": "rec1", "fields": {"Status": "Done"}}]},
    )
    assert updated == [{"id": "rec1", "fields": {"Status": "Done"}}]

    _, deleted = _call(registry, "delete_records", {"baseId": "appOne", "tableId": "tblProjects", "recordIds": ["rec1", "rec2"]})
    assert deleted == [{"id": "rec1"}, {"id": "rec2"}]


def test_search_records_forwards_arguments(registry, fake_client):
    envelope, records = _call(
        registry,
        "search_records",
        {"baseId": "appOne", "tableId": "tblProjects", "searchTerm": "bridge", "maxRecords": 5},
    )
    assert envelope["isError"] is False
    assert records[0]["id"] == "rec1"
    assert fake_client.called("search_records") == [("search_records", "appOne", "tblProjects", "bridge", 5)]


def test_schema_write_tools(registry, fake_client):
    _, table = _call(
        registry,
        "create_table",
        {"baseId": "appOne", "name": "Tasks", "fields": [{"name": "Task", "type": "singleLineText"}]},
    )
    assert table["id"] == "tblNEW"
    assert fake_client.called("create_table")[0][3] == [{"name": "Task", "type": "singleLineText"}]

    _, table = _call(registry, "update_table", {"baseId": "appOne", "tableId": "tblProjects", "description": "All projects"})
    assert table["description"] == "All projects"

    envelope, message = _call(registry, "update_table", {"baseId": "appOne", "tableId": "tblProjects"})
    assert envelope["isError"] is True
    assert "at least one" in message

    _, field = _call(
        registry,
        "create_field",
        {"baseId": "appOne", "tableId": "tblProjects", "field": {"name": "Due", "type": "date"}},
    )
    assert field == {"id": "fldCREATED", "name": "Due", "type": "date"}

    envelope, _ = _call(
        registry,
        "create_field",
        {"baseId": "appOne", "tableId": "tblProjects", "field": {"name": "Due", "type": "hologram"}},
    )
    assert envelope["isError"] is True

    _, field = _call(registry, "update_field", {"baseId": "appOne", "tableId": "tblProjects", "fieldId": "fldName", "name": "Title"})
    assert field["name"] == "Title"
