"""ListBases tool."""

from __future__ import annotations

from typing import Dict, List

from ..base import ToolArgs, ToolContext, ToolSpec


class ListBasesArgs(ToolArgs):
    pass


async def list_bases(ctx: ToolContext, args: ListBasesArgs) -> List[Dict[str, str]]:
    listing = await ctx.client.list_bases()
    return [
        {"id": base.id, "name": base.name, "permissionLevel": base.permissionLevel}
        for base in listing.bases
    ]


SPECS = [
    ToolSpec(
        name="list_bases",
        description="List all accessible bases",
        args_model=ListBasesArgs,
        handler=list_bases,
    ),
]
