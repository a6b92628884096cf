"""
Realtime Service
Process-wide registry of live WebSocket connections, keyed by user id
"""

from typing import Any, Dict, List

from fastapi import WebSocket

from travel_expense.utils.logger import setup_logger

logger = setup_logger()


class ConnectionRegistry:
    """Tracks connected users and delivers best-effort pushes"""

    def __init__(self):
        self._connections: Dict[int, List[WebSocket]] = {}

    def register(self, user_id: int, websocket: WebSocket):
        """Add a WebSocket connection for a user"""
        self._connections.setdefault(user_id, []).append(websocket)
        logger.info(f"User {user_id} connected ({len(self._connections[user_id])} live connection(s))")

    def unregister(self, user_id: int, websocket: WebSocket):
        """Remove a WebSocket connection for a user"""
        connections = self._connections.get(user_id)
        if not connections:
            return
        if websocket in connections:
            connections.remove(websocket)
        if not connections:
            del self._connections[user_id]
        logger.info(f"User {user_id} disconnected")

    def is_connected(self, user_id: int) -> bool:
        return bool(self._connections.get(user_id))

    async def push_if_connected(self, user_id: int, payload: Dict[str, Any]) -> bool:
        """
        Send a payload to every live connection of a user

        No-op when the user is not connected. A connection that fails to
        receive is dropped; nothing is raised to the caller.

        Returns:
            bool: True if at least one connection received the payload
        """
        delivered = False
        for websocket in list(self._connections.get(user_id, [])):
            try:
                await websocket.send_json(payload)
                delivered = True
            except Exception as e:
                logger.debug(f"Dropping stale connection for user {user_id}: {e}")
                self.unregister(user_id, websocket)
        return delivered


# Process-lifetime instance
connection_registry = ConnectionRegistry()
