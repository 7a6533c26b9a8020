"""Record tools: list, search, get, create, update and delete records."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import Field as PydanticField

from ....store.models import Record
from ..base import ToolArgs, ToolContext, ToolSpec


class SortOption(ToolArgs):
    field: str
    direction: Optional[Literal["asc", "desc"]] = None


class ListRecordsArgs(ToolArgs):
    baseId: str
    tableId: str
    view: Optional[str] = None
    maxRecords: Optional[int] = PydanticField(
        default=100,
        gt=0,
        strict=True,
        description="Maximum number of records to return. Defaults to 100.",
    )
    filterByFormula: Optional[str] = PydanticField(
        default=None, description="Formula used to filter records"
    )
    sort: Optional[List[SortOption]] = None


class SearchRecordsArgs(ToolArgs):
    baseId: str
    tableId: str
    searchTerm: str = PydanticField(description="Text to search for in records")
    fieldIds: Optional[List[str]] = PydanticField(
        default=None,
        description=(
            "Names of text fields to search. Defaults to every text-like field of the table."
        ),
    )
    maxRecords: Optional[int] = PydanticField(
        default=100,
        gt=0,
        strict=True,
        description="Maximum number of records to return. Defaults to 100.",
    )
    view: Optional[str] = None


class GetRecordArgs(ToolArgs):
    baseId: str
    tableId: str
    recordId: str


class CreateRecordArgs(ToolArgs):
    baseId: str
    tableId: str
    fields: Dict[str, Any]


class RecordUpdate(ToolArgs):
    id: str
    fields: Dict[str, Any]


class UpdateRecordsArgs(ToolArgs):
    baseId: str
    tableId: str
    records: List[RecordUpdate] = PydanticField(min_length=1)


class DeleteRecordsArgs(ToolArgs):
    baseId: str
    tableId: str
    recordIds: List[str] = PydanticField(min_length=1)


def _record_payload(record: Record) -> Dict[str, Any]:
    return {"id": record.id, "fields": record.fields}


async def list_records(ctx: ToolContext, args: ListRecordsArgs) -> List[Dict[str, Any]]:
    records = await ctx.client.list_records(
        args.baseId,
        args.tableId,
        view=args.view,
        max_records=args.maxRecords,
        filter_by_formula=args.filterByFormula,
        sort=[option.model_dump(exclude_none=True) for option in args.sort or []],
    )
    return [_record_payload(record) for record in records]


async def search_records(ctx: ToolContext, args: SearchRecordsArgs) -> List[Dict[str, Any]]:
    records = await ctx.client.search_records(
        args.baseId,
        args.tableId,
        args.searchTerm,
        args.fieldIds,
        args.maxRecords,
        args.view,
    )
    return [_record_payload(record) for record in records]


async def get_record(ctx: ToolContext, args: GetRecordArgs) -> Dict[str, Any]:
    record = await ctx.client.get_record(args.baseId, args.tableId, args.recordId)
    return _record_payload(record)


async def create_record(ctx: ToolContext, args: CreateRecordArgs) -> Dict[str, Any]:
    record = await ctx.client.create_record(args.baseId, args.tableId, args.fields)
    return _record_payload(record)


async def update_records(ctx: ToolContext, args: UpdateRecordsArgs) -> List[Dict[str, Any]]:
    records = await ctx.client.update_records(
        args.baseId, args.tableId, [update.model_dump() for update in args.records]
    )
    return [_record_payload(record) for record in records]


async def delete_records(ctx: ToolContext, args: DeleteRecordsArgs) -> List[Dict[str, str]]:
    deleted = await ctx.client.delete_records(args.baseId, args.tableId, args.recordIds)
    return [{"id": record_id} for record_id in deleted]


SPECS = [
    ToolSpec(
        name="list_records",
        description="List records from a table",
        args_model=ListRecordsArgs,
        handler=list_records,
    ),
    ToolSpec(
        name="search_records",
        description="Search for records containing specific text",
        args_model=SearchRecordsArgs,
        handler=search_records,
    ),
    ToolSpec(
        name="get_record",
        description="Get a specific record by ID",
        args_model=GetRecordArgs,
        handler=get_record,
    ),
    ToolSpec(
        name="create_record",
        description="Create a new record in a table",
        args_model=CreateRecordArgs,
        handler=create_record,
    ),
    ToolSpec(
        name="update_records",
        description="Update one or more records in a table",
        args_model=UpdateRecordsArgs,
        handler=update_records,
    ),
    ToolSpec(
        name="delete_records",
        description="Delete records from a table",
        args_model=DeleteRecordsArgs,
        handler=delete_records,
    ),
]
