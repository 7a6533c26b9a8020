"""Generic free-text search across every accessible base and table.

There is no index and no relevance model: each table's own formula search is
asked in turn and the hits are turned into readable snippets. Results come
back in discovery order (base listing order, then table schema order, then
backend order), never ranked.
"""

from __future__ import annotations

import logging
from typing import List, TypedDict

from ..base import ToolArgs, ToolContext, ToolSpec
from ..values import build_snippet, primary_value

logger = logging.getLogger(__name__)


class SearchArgs(ToolArgs):
    query: str


class SearchResultItem(TypedDict):
    id: str
    title: str
    text: str
    url: str


def record_url(web_url: str, base_id: str, table_id: str, record_id: str) -> str:
    return f"{web_url}/{base_id}/{table_id}/{record_id}"


async def search(ctx: ToolContext, args: SearchArgs) -> List[SearchResultItem]:
    """
    Search for content and return a list of results with id, title, text, url.
    """

    query = args.query.strip()
    if not query:
        return []

    settings = ctx.settings
    client = ctx.client
    allowed = set(settings.search_base_ids)
    max_total = settings.search_max_total
    per_table = settings.search_per_table_limit

    results: List[SearchResultItem] = []
    listing = await client.list_bases()
    for base in listing.bases:
        if len(results) >= max_total:
            break
        if allowed and base.id not in allowed:
            continue
        try:
            schema = await client.get_base_schema(base.id)
        except Exception as exc:
            logger.debug("Skipping base %s during search: %s", base.id, exc)
            continue
        for table in schema.tables:
            if len(results) >= max_total:
                break
            try:
                records = await client.search_records(
                    base.id, table.id, query, max_records=per_table
                )
            except Exception as exc:
                logger.debug("Skipping %s/%s during search: %s", base.id, table.id, exc)
                continue

            primary = table.primary_field
            primary_name = primary.name if primary else None
            for record in records[:per_table]:
                if len(results) >= max_total:
                    break
                title_suffix = primary_value(record.fields, primary_name) or record.id
                results.append(
                    {
                        "id": f"{base.id}:{table.id}:{record.id}",
                        "title": f"{base.name} – {table.name} – {title_suffix}",
                        "text": build_snippet(
                            record.fields, primary_name, settings.search_priority_fields
                        ),
                        "url": record_url(settings.web_url, base.id, table.id, record.id),
                    }
                )
    logger.info("search %r returned %d results", query, len(results))
    return results


SPEC = ToolSpec(
    name="search",
    description="Search for content and return a list of results with id, title, text, url",
    args_model=SearchArgs,
    handler=search,
)
