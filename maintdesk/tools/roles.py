"""MCP tools over the roles manager."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP

from ..api._api_result import Payload, err
from ..api.roles import role_manager
from ..settings import get_settings
from ._tool_args import optional_str, parse_id, parse_page


logger = logging.getLogger(__name__)

tool_roles = FastMCP(name="roles")


@tool_roles.tool(
    name="list",
    description=(
        "Paginated list of roles.\n\n"
        "**Args:**\n"
        "- `page` (`str`, optional): page number.\n"
        "- `search` (`str`, optional): search on the role name.\n"
    ),
)
async def roles_list(page: str = "1", search: str | None = None) -> Payload[Any]:
    """List roles."""
    page_int = parse_page(page)
    if page_int is None:
        return err(code="validation_error", error="page must be a positive integer.")

    try:
        return await role_manager.get_all(
            {
                "page": page_int,
                "per_page": get_settings().DEFAULT_PER_PAGE,
                "search": optional_str(search),
            }
        )
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[roles.list] unexpected error: %s", exc)
        return err(code="internal_error", error="Could not load roles. Try again later.")


@tool_roles.tool(
    name="get",
    description=(
        "One role with its permissions.\n\n"
        "**Args:**\n"
        "- `role_id` (`str`, required): role id.\n"
    ),
)
async def role_get(role_id: str) -> Payload[Any]:
    """Fetch one role."""
    id_int = parse_id(role_id)
    if id_int is None:
        return err(code="validation_error", error="role_id must be a positive integer.")

    try:
        return await role_manager.get_by_id(id_int)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[roles.get] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not load the role. Try again later.")


@tool_roles.tool(
    name="users",
    description=(
        "Users holding a role, paginated.\n\n"
        "**Args:**\n"
        "- `role_id` (`str`, required): role id.\n"
        "- `page` (`str`, optional): page number.\n"
        "- `search` (`str`, optional): search on user name or email.\n"
    ),
)
async def role_users(role_id: str, page: str = "1", search: str | None = None) -> Payload[Any]:
    """Users of a role."""
    id_int = parse_id(role_id)
    page_int = parse_page(page)
    if id_int is None or page_int is None:
        return err(code="validation_error", error="role_id and page must be positive integers.")

    try:
        return await role_manager.get_users(id_int, page_int, optional_str(search))
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[roles.users] unexpected error id=%s: %s", id_int, exc)
        return err(code="internal_error", error="Could not load role users. Try again later.")
