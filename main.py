"""
main.py: maintdesk entry point.

Runs the MCP server over SSE and:
- loads ENV (dev/prod) through init_runtime()
- opens / closes the shared HTTP client
- handles SIGINT / SIGTERM gracefully
- fails fast if the server exits on its own
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
import signal

from maintdesk.clients import close_clients, init_clients
from maintdesk.runtime import init_runtime
from maintdesk.server.server_common import build_maintdesk
from maintdesk.settings import get_settings

# --------------------------------------------------------------------------
# LOGGING
# --------------------------------------------------------------------------
logger = logging.getLogger("maintdesk")


def setup_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


# --------------------------------------------------------------------------
# MCP RUNNER
# --------------------------------------------------------------------------
async def run_server(host: str, port: int) -> None:
    logger.info("mcp.start host=%s port=%s", host, port)

    mcp = build_maintdesk()

    try:
        await mcp.run_async(transport="sse", host=host, port=port)
    except asyncio.CancelledError:
        logger.info("mcp.run.cancelled")
        raise
    except OSError:
        logger.exception("mcp.run.oserror port=%s", port)
        raise
    except Exception:
        logger.exception("mcp.run.failed")
        raise
    finally:
        logger.info("mcp.run.exit")


async def wait_stop_or_failure(task: asyncio.Task[None], stop_event: asyncio.Event) -> None:
    """
    - stop_event -> graceful shutdown (return)
    - server task finished -> fail-fast (raise), serve() must not return by itself
    """
    stop_task = asyncio.create_task(stop_event.wait(), name="stop_event")
    try:
        done, _pending = await asyncio.wait(
            [task, stop_task],
            return_when=asyncio.FIRST_COMPLETED,
        )

        if stop_task in done:
            logger.info("graceful shutdown requested")
            return

        exc = task.exception()
        if exc is not None:
            logger.error("server crashed", exc_info=exc)
            raise exc

        raise RuntimeError(f"server exited unexpectedly: {task.get_name()}")

    finally:
        stop_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await stop_task


# --------------------------------------------------------------------------
# SUPERVISOR
# --------------------------------------------------------------------------
async def main() -> None:
    http_inited = False

    init_runtime()
    setup_logging()

    settings = get_settings()
    logger.info(
        "Runtime ENV=%s LOG_LEVEL=%s API_BASE_URL=%s",
        settings.ENV,
        settings.LOG_LEVEL,
        settings.API_BASE_URL,
    )

    loop = asyncio.get_running_loop()

    logger.info("initializing http clients")
    await init_clients()
    http_inited = True

    stop_event = asyncio.Event()

    def _request_stop() -> None:
        logger.info("shutdown signal received")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop)
        except NotImplementedError:
            pass

    task: asyncio.Task[None] | None = None

    try:
        task = asyncio.create_task(
            run_server(settings.MCP_HOST, settings.MCP_PORT),
            name="mcp:maintdesk",
        )
        await wait_stop_or_failure(task, stop_event)

    finally:
        # stop the server before the HTTP client goes away
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass

        if http_inited:
            logger.info("closing http clients")
            await close_clients()


if __name__ == "__main__":
    asyncio.run(main())
