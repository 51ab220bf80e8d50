"""Tool handler for the ``doc`` command.

Receives AppState, delegates to the resolver and returns the reply text.
No MCP or FastMCP imports; server.py handles the MCP wiring, and chat
connectors can call ``handle`` directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from togglebot.errors import DocSearchError

if TYPE_CHECKING:
    from togglebot.state import AppState

GENERIC_FAILURE_MESSAGE = "Something went wrong while searching the docs. Please try again later."


async def handle(fqn: str, state: AppState) -> str:
    """Handle a ``doc`` command call."""
    log = structlog.get_logger().bind(tool="doc", path=fqn)
    log.info("handler_called")

    try:
        reply = await state.get_resolver().find(fqn)
    except DocSearchError as exc:
        log.error("doc_search_failed", **exc.to_dict()["error"], exc_info=True)
        return GENERIC_FAILURE_MESSAGE
    except Exception:
        log.error("doc_search_failed", code="INTERNAL_ERROR", exc_info=True)
        return GENERIC_FAILURE_MESSAGE

    log.info("doc_search_complete", reply=reply)
    return reply
