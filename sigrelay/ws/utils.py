"""WebSocket utility functions for cross-version compatibility."""

from typing import Any, Dict, Optional

from sigrelay.logger import logger


def is_websocket_closed(websocket: Any) -> bool:
    """Check if a WebSocket connection is closed in a version-compatible way.

    Older websockets releases expose a ``closed`` property; newer ones only
    set ``close_code`` once the closing handshake has happened.
    """
    closed = getattr(websocket, "closed", None)
    if isinstance(closed, bool):
        return closed

    return getattr(websocket, "close_code", None) is not None


def format_remote_address(websocket: Any) -> Optional[str]:
    """Render the peer address as ``host:port`` for logs."""
    address = getattr(websocket, "remote_address", None)
    if not address:
        return None
    if isinstance(address, (tuple, list)) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


async def close_websocket_safely(websocket: Any, code: int = 1000, reason: str = "") -> None:
    """Close a WebSocket connection, logging instead of raising."""
    try:
        if not is_websocket_closed(websocket):
            await websocket.close(code=code, reason=reason)
    except Exception as e:
        logger.debug(f"Error closing websocket: {e}")


def get_websocket_info(websocket: Any) -> Dict[str, Any]:
    """Get information about a WebSocket connection for debugging."""
    info = {
        "closed": is_websocket_closed(websocket),
        "remote_address": format_remote_address(websocket),
    }

    if hasattr(websocket, "close_code"):
        info["close_code"] = websocket.close_code
    if hasattr(websocket, "close_reason"):
        info["close_reason"] = websocket.close_reason
    if hasattr(websocket, "state"):
        info["state"] = str(websocket.state)

    return info
