"""Fetch one search hit by its composite ``baseId:tableId:recordId`` id."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Tuple, TypedDict

from ....errors import ToolValidationError
from ..base import ToolArgs, ToolContext, ToolSpec
from ..values import dump_fields, primary_value
from .search import record_url


class FetchArgs(ToolArgs):
    id: str


class FetchResultItem(TypedDict):
    id: str
    title: str
    text: str
    url: str
    metadata: Dict[str, Any]


def split_composite_id(value: str) -> Tuple[str, str, str]:
    parts = value.split(":")
    if len(parts) != 3 or not all(parts):
        raise ToolValidationError("Invalid id format. Expected baseId:tableId:recordId")
    return parts[0], parts[1], parts[2]


async def fetch(ctx: ToolContext, args: FetchArgs) -> FetchResultItem:
    base_id, table_id, record_id = split_composite_id(args.id)
    record, schema = await asyncio.gather(
        ctx.client.get_record(base_id, table_id, record_id),
        ctx.client.get_base_schema(base_id),
    )
    table = schema.find_table(table_id)
    primary = table.primary_field if table else None
    title = primary_value(record.fields, primary.name if primary else None)
    if not title:
        title = f"{table.name if table else table_id} {record.id}"
    return {
        "id": args.id,
        "title": title,
        "text": dump_fields(record.fields),
        "url": record_url(ctx.settings.web_url, base_id, table_id, record.id),
        "metadata": {"baseId": base_id, "tableId": table_id},
    }


SPEC = ToolSpec(
    name="fetch",
    description="Fetch a single result by id and return id, title, text, url, metadata",
    args_model=FetchArgs,
    handler=fetch,
)
