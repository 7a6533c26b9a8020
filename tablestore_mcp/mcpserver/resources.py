"""Table schemas exposed as MCP resources under ``store://<baseId>/<tableId>/schema``."""

from __future__ import annotations

import asyncio
import re
from typing import Any, Dict, List, Tuple

from ..errors import NotFoundError
from ..store.client import RecordStoreClient
from .tools.base import to_json

URI_SCHEME = "store"
MIME_TYPE = "application/json"

_URI_RE = re.compile(rf"^{URI_SCHEME}://([^/]+)/([^/]+)/schema$")


def schema_uri(base_id: str, table_id: str) -> str:
    return f"{URI_SCHEME}://{base_id}/{table_id}/schema"


def parse_schema_uri(uri: str) -> Tuple[str, str]:
    match = _URI_RE.match(str(uri))
    if match is None:
        raise NotFoundError(f"Invalid resource URI: {uri}")
    return match.group(1), match.group(2)


async def list_resources(client: RecordStoreClient) -> List[Dict[str, str]]:
    """One descriptor per table of every accessible base."""

    listing = await client.list_bases()
    schemas = await asyncio.gather(*(client.get_base_schema(base.id) for base in listing.bases))
    resources: List[Dict[str, str]] = []
    for base, schema in zip(listing.bases, schemas):
        for table in schema.tables:
            resources.append(
                {
                    "uri": schema_uri(base.id, table.id),
                    "mimeType": MIME_TYPE,
                    "name": f"{base.name}: {table.name} schema",
                }
            )
    return resources


async def read_resource(client: RecordStoreClient, uri: str) -> str:
    """Return the full table descriptor behind *uri* as JSON text."""

    base_id, table_id = parse_schema_uri(uri)
    schema = await client.get_base_schema(base_id)
    table = schema.find_table(table_id)
    if table is None:
        raise NotFoundError(f"Table {table_id} not found in base {base_id}")
    payload: Dict[str, Any] = {
        "baseId": base_id,
        "tableId": table.id,
        "name": table.name,
        "description": table.description,
        "primaryFieldId": table.primaryFieldId,
        "fields": [field.model_dump(exclude_none=True) for field in table.fields],
        "views": [view.model_dump(exclude_none=True) for view in table.views],
    }
    return to_json(payload)


__all__ = [
    "MIME_TYPE",
    "URI_SCHEME",
    "list_resources",
    "parse_schema_uri",
    "read_resource",
    "schema_uri",
]
