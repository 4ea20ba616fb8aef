"""MCP tools over the incidents manager.

Contract:
- ok(data)        the API answered
- err(code,error) validation / API / network failure
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP

from ..api._api_result import Payload, err
from ..api.incidents import incident_manager
from ..settings import get_settings
from ._tool_args import optional_str, parse_id, parse_page


logger = logging.getLogger(__name__)

tool_incidents = FastMCP(name="incidents")

INCIDENT_STATUSES = ("open", "in_progress", "resolved", "closed")
INCIDENT_SEVERITIES = ("low", "medium", "high", "critical")
INCIDENT_SORT_FIELDS = ("created_at", "started_at", "resolved_at", "severity", "status")


@tool_incidents.tool(
    name="list",
    description=(
        "Paginated list of incidents of the current site.\n\n"
        "**Args:**\n"
        "- `page` (`str`, optional): page number, 1 by default.\n"
        "- `search` (`str`, optional): free-text search.\n"
        "- `material_id` (`str`, optional): only incidents of this material.\n"
        "- `status` (`str`, optional): open | in_progress | resolved | closed.\n"
        "- `severity` (`str`, optional): low | medium | high | critical.\n"
        "- `sort_by` (`str`, optional): created_at | started_at | resolved_at | severity | status.\n"
        "- `sort_direction` (`str`, optional): asc | desc.\n\n"
        "**Returns:** Payload[{data, meta}]\n"
    ),
)
async def incidents_list(
    page: str = "1",
    search: str | None = None,
    material_id: str | None = None,
    status: str | None = None,
    severity: str | None = None,
    sort_by: str | None = None,
    sort_direction: str | None = None,
) -> Payload[Any]:
    """List incidents."""
    page_int = parse_page(page)
    if page_int is None:
        return err(code="validation_error", error="page must be a positive integer.")
    material_int = None
    if material_id:
        material_int = parse_id(material_id)
        if material_int is None:
            return err(code="validation_error", error="material_id must be a positive integer.")
    if status and status not in INCIDENT_STATUSES:
        return err(code="validation_error", error=f"Unknown status: {status}")
    if severity and severity not in INCIDENT_SEVERITIES:
        return err(code="validation_error", error=f"Unknown severity: {severity}")
    if sort_by and sort_by not in INCIDENT_SORT_FIELDS:
        return err(code="validation_error", error=f"Cannot sort by: {sort_by}")
    if sort_direction and sort_direction not in ("asc", "desc"):
        return err(code="validation_error", error="sort_direction must be asc or desc.")

    filters = {
        "page": page_int,
        "per_page": get_settings().DEFAULT_PER_PAGE,
        "search": optional_str(search),
        "material_id": material_int,
        "status": status or None,
        "severity": severity or None,
        "sort_by": sort_by or None,
        "sort_direction": sort_direction or None,
    }
    logger.info("[incidents.list] filters=%s", filters)

    try:
        return await incident_manager.get_all(filters)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[incidents.list] unexpected error: %s", exc)
        return err(code="internal_error", error="Could not load incidents. Try again later.")


@tool_incidents.tool(
    name="get",
    description=(
        "Full detail of one incident.\n\n"
        "**Args:**\n"
        "- `incident_id` (`str`, required): incident id.\n\n"
        "**Returns:** Payload[incident]\n"
    ),
)
async def incident_get(incident_id: str) -> Payload[Any]:
    """Fetch one incident."""
    id_int = parse_id(incident_id)
    if id_int is None:
        return err(code="validation_error", error="incident_id must be a positive integer.")

    logger.info("[incidents.get] id=%s", id_int)

    try:
        return await incident_manager.get_by_id(id_int)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[incidents.get] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not load the incident. Try again later.")


@tool_incidents.tool(
    name="delete",
    description=(
        "Delete an incident (hard delete, cannot be undone).\n\n"
        "ONLY use when the user explicitly asks to remove the incident.\n"
        "To close an incident, update its status instead.\n\n"
        "**Args:**\n"
        "- `incident_id` (`str`, required): incident id.\n\n"
        "**Returns:** Payload[None]\n"
    ),
)
async def incident_delete(incident_id: str) -> Payload[Any]:
    """Delete one incident."""
    id_int = parse_id(incident_id)
    if id_int is None:
        return err(code="validation_error", error="incident_id must be a positive integer.")

    logger.info("[incidents.delete] id=%s", id_int)

    try:
        return await incident_manager.delete(id_int)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[incidents.delete] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not delete the incident. Try again later.")


@tool_incidents.tool(
    name="options",
    description=(
        "Choices for the incident form: available materials, severities and "
        "statuses.\n\n"
        "**Returns:** Payload[{materials, severities, statuses}]\n"
    ),
)
async def incident_options() -> Payload[Any]:
    """Form options, loaded together."""
    try:
        return await incident_manager.get_form_options()
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[incidents.options] unexpected error: %s", exc)
        return err(code="internal_error", error="Could not load incident options.")
