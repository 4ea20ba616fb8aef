"""MCP tools over the maintenances manager."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP

from ..api._api_result import Payload, err
from ..api.maintenances import maintenance_manager
from ..settings import get_settings
from ._tool_args import optional_str, parse_id, parse_page


logger = logging.getLogger(__name__)

tool_maintenances = FastMCP(name="maintenances")

MAINTENANCE_STATUSES = ("planned", "in_progress", "completed", "canceled")
MAINTENANCE_TYPES = ("corrective", "preventive", "inspection", "improvement")
MAINTENANCE_REALIZATIONS = ("internal", "external", "both")


@tool_maintenances.tool(
    name="list",
    description=(
        "Paginated list of maintenances of the current site.\n\n"
        "**Args:**\n"
        "- `page` (`str`, optional): page number, 1 by default.\n"
        "- `search` (`str`, optional): free-text search.\n"
        "- `status` (`str`, optional): planned | in_progress | completed | canceled.\n"
        "- `type` (`str`, optional): corrective | preventive | inspection | improvement.\n"
        "- `realization` (`str`, optional): internal | external | both.\n\n"
        "**Returns:** Payload[{data, meta}]\n"
    ),
)
async def maintenances_list(
    page: str = "1",
    search: str | None = None,
    status: str | None = None,
    type: str | None = None,
    realization: str | None = None,
) -> Payload[Any]:
    """List maintenances."""
    page_int = parse_page(page)
    if page_int is None:
        return err(code="validation_error", error="page must be a positive integer.")
    if status and status not in MAINTENANCE_STATUSES:
        return err(code="validation_error", error=f"Unknown status: {status}")
    if type and type not in MAINTENANCE_TYPES:
        return err(code="validation_error", error=f"Unknown type: {type}")
    if realization and realization not in MAINTENANCE_REALIZATIONS:
        return err(code="validation_error", error=f"Unknown realization: {realization}")

    filters = {
        "page": page_int,
        "per_page": get_settings().DEFAULT_PER_PAGE,
        "search": optional_str(search),
        "status": status or None,
        "type": type or None,
        "realization": realization or None,
    }
    logger.info("[maintenances.list] filters=%s", filters)

    try:
        return await maintenance_manager.get_all(filters)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[maintenances.list] unexpected error: %s", exc)
        return err(code="internal_error", error="Could not load maintenances. Try again later.")


@tool_maintenances.tool(
    name="get",
    description=(
        "Full detail of one maintenance (incidents, operators, companies, parts).\n\n"
        "**Args:**\n"
        "- `maintenance_id` (`str`, required): maintenance id.\n"
    ),
)
async def maintenance_get(maintenance_id: str) -> Payload[Any]:
    """Fetch one maintenance."""
    id_int = parse_id(maintenance_id)
    if id_int is None:
        return err(code="validation_error", error="maintenance_id must be a positive integer.")

    try:
        return await maintenance_manager.get_by_id(id_int)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[maintenances.get] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not load the maintenance. Try again later.")


@tool_maintenances.tool(
    name="item_movements",
    description=(
        "Spare parts consumed by a maintenance, paginated. `meta.total_cost` "
        "holds the cost of all parts.\n\n"
        "**Args:**\n"
        "- `maintenance_id` (`str`, required): maintenance id.\n"
        "- `page` (`str`, optional): page number.\n"
    ),
)
async def maintenance_item_movements(maintenance_id: str, page: str = "1") -> Payload[Any]:
    """Parts used by a maintenance."""
    id_int = parse_id(maintenance_id)
    page_int = parse_page(page)
    if id_int is None or page_int is None:
        return err(
            code="validation_error",
            error="maintenance_id and page must be positive integers.",
        )

    try:
        return await maintenance_manager.get_item_movements(id_int, page_int)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[maintenances.item_movements] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not load spare parts. Try again later.")
