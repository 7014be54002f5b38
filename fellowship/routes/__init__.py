"""API Routes"""

from fellowship.routes import (
    auth,
    families,
    media,
    notifications,
    posts,
    requests,
    setup,
    stats,
    users,
    websocket,
)

__all__ = [
    "auth",
    "families",
    "media",
    "notifications",
    "posts",
    "requests",
    "setup",
    "stats",
    "users",
    "websocket",
]
