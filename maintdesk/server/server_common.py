"""Assembly of the MCP server from the tool sub-servers."""

from __future__ import annotations

from typing import Iterable, Tuple

from fastmcp import FastMCP

from ..tools.incidents import tool_incidents
from ..tools.maintenances import tool_maintenances
from ..tools.qr_scan import tool_qr_scan
from ..tools.roles import tool_roles


Mount = Tuple[FastMCP, str]  # (tool server, namespace)

MOUNTS: list[Mount] = [
    (tool_incidents, "incidents"),
    (tool_maintenances, "maintenances"),
    (tool_roles, "roles"),
    (tool_qr_scan, "qr"),
]


def build_mcp(name: str, mounts: Iterable[Mount]) -> FastMCP:
    mcp = FastMCP(name=name)
    for tool, namespace in mounts:
        mcp.mount(tool, namespace)
    return mcp


def build_maintdesk() -> FastMCP:
    return build_mcp("maintdesk", MOUNTS)
