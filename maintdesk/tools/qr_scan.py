"""MCP tool resolving a scanned QR code to its material or item."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastmcp import FastMCP

from ..api._api_result import Payload, err
from ..api.qr_scan import SCAN_TARGETS, qr_scan_manager
from ._tool_args import parse_id


logger = logging.getLogger(__name__)

tool_qr_scan = FastMCP(name="qr_scan")


@tool_qr_scan.tool(
    name="scan",
    description=(
        "Resolve a scanned QR code.\n\n"
        "Returns what was scanned and the actions it allows: a material offers "
        "cleaning | maintenance | incident, an item offers entry | exit.\n\n"
        "**Args:**\n"
        "- `target` (`str`, required): material | item.\n"
        "- `target_id` (`str`, required): id encoded in the QR code.\n"
    ),
)
async def qr_scan(target: str, target_id: str) -> Payload[Any]:
    """Resolve a scanned code."""
    if target not in SCAN_TARGETS:
        return err(code="validation_error", error="target must be 'material' or 'item'.")
    id_int = parse_id(target_id)
    if id_int is None:
        return err(code="validation_error", error="target_id must be a positive integer.")

    logger.info("[qr_scan] target=%s id=%s", target, id_int)

    try:
        return await qr_scan_manager.scan(target, id_int)  # type: ignore[arg-type]
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.exception("[qr_scan] unexpected error target=%s id=%s: %s", target, id_int, exc)
        return err(code="internal_error", error="Could not resolve the QR code.")
