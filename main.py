# =============================================================================
# main.py  —  Entry Point for the deploy adapter MCP server
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Loads .env and reads Settings from the environment
#   2. Opens the configured catalog + dispatcher (Mongo / NATS / REST / memory)
#      — any connection failure here is fatal, exit status 1
#   3. Builds the FastMCP server around that context
#   4. Serves MCP over stdio until stdin closes or SIGINT/SIGTERM arrives
#      (on a signal: backends closed, then the process exits with status 0)
#   5. Closes every backend (NATS drained, Mongo and HTTP clients closed)
# =============================================================================

import asyncio
import logging
import os
import signal
import sys

from dotenv import load_dotenv

from backends.context import open_context
from core.config import Settings
from core.errors import ConfigError
from tools.mcp_server import configure_logging, create_server

logger = logging.getLogger("deploy_adapter")


async def serve(settings: Settings, stop: asyncio.Event) -> bool:
    """Serve until stdin closes or `stop` is set.

    Returns True when `stop` ended the run.  Backends are closed either way.
    """
    async with open_context(settings) as context:
        mcp = create_server(context)
        logger.info(
            "[MCP Server] Ready on stdio (catalog=%s, dispatch=%s)",
            settings.catalog_backend, settings.dispatch_backend,
        )
        server = asyncio.create_task(mcp.run_async(transport="stdio"))
        stopper = asyncio.create_task(stop.wait())
        done, _ = await asyncio.wait({server, stopper}, return_when=asyncio.FIRST_COMPLETED)

        stopped = stopper in done
        if stopped:
            logger.info("[MCP Server] Shutdown requested")
            server.cancel()
        else:
            stopper.cancel()
            server.result()
    logger.info("[MCP Server] Backends closed")
    return stopped


def _exit_now(status: int) -> None:
    # The stdio transport reads stdin in a worker thread that ignores
    # cancellation; asyncio.run() would wait on it forever.
    logging.shutdown()
    os._exit(status)


async def _run_until_signalled(settings: Settings) -> None:
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers; Ctrl+C still
            # arrives as KeyboardInterrupt.
            pass

    if await serve(settings, stop):
        _exit_now(0)


def main() -> int:
    load_dotenv()

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        configure_logging()
        logger.error("[Fatal] Invalid configuration: %s", exc)
        return 1

    configure_logging(settings.log_level)

    try:
        asyncio.run(_run_until_signalled(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("[Fatal] MCP server failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
