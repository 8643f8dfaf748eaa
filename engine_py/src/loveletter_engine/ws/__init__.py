"""
WebSocket relay and event handling for Love Letter lobbies.
"""

from .server import ConnectionManager, LobbyManager, create_app

__all__ = ["ConnectionManager", "LobbyManager", "create_app"]
