"""
WebSocket API for live snapshots

Each connection subscribes to store collections for as long as it is open.
Whenever a watched collection changes the client receives the full matching
document list:

    {"type": "snapshot", "collection": "posts", "documents": [...]}

Connections authenticate with ``?token=<session token>``. A family stream is
closed with 4003 as soon as its user is no longer allowed to see the family.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from fellowship.auth import permissions
from fellowship.auth.jwt import resolve_user
from fellowship.services.database_service import (
    ADMIN_REQUESTS,
    MEDIA,
    NOTIFICATIONS,
    POSTS,
    USERS,
    Store,
)

logger = logging.getLogger(__name__)
router = APIRouter()

# Close codes
UNAUTHORIZED = 4001
FORBIDDEN = 4003


class SnapshotStream:
    """Store subscriptions owned by a single WebSocket connection."""

    def __init__(self, websocket: WebSocket, store: Store, allowed: Optional[Callable[[], bool]] = None):
        self.websocket = websocket
        self.store = store
        self.allowed = allowed or (lambda: True)
        self.queue: asyncio.Queue = asyncio.Queue()
        self.loop = asyncio.get_running_loop()
        self._unsubscribers: List[Callable[[], None]] = []

    def watch(self, name: str, collection: str, filters: Optional[Dict[str, Any]] = None):
        """Forward snapshots of ``collection`` to the client under ``name``."""

        def on_snapshot(documents):
            self.loop.call_soon_threadsafe(self.queue.put_nowait, {
                "type": "snapshot",
                "collection": name,
                "documents": documents
            })

        self._unsubscribers.append(self.store.subscribe(collection, filters, on_snapshot))

    def close(self):
        """Cancel every subscription of this connection."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    async def _send_loop(self):
        while True:
            message = await self.queue.get()
            if message["type"] == "snapshot" and not self.allowed():
                logger.info("WebSocket access revoked, closing")
                await self.websocket.close(code=FORBIDDEN, reason="Access revoked")
                return
            await self.websocket.send_json(message)

    async def _receive_loop(self):
        while True:
            data = await self.websocket.receive_json()
            if data.get("type") == "ping":
                self.queue.put_nowait({"type": "pong"})

    async def run(self):
        """Stream until the client disconnects, then release the subscriptions."""
        sender = asyncio.ensure_future(self._send_loop())
        receiver = asyncio.ensure_future(self._receive_loop())
        try:
            done, pending = await asyncio.wait(
                [sender, receiver], return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            for task in done:
                task.result()
        except WebSocketDisconnect:
            logger.info("WebSocket disconnected")
        finally:
            self.close()


async def authenticate(websocket: WebSocket) -> Optional[dict]:
    """Accept the connection and resolve its token, closing it when invalid."""
    await websocket.accept()
    token = websocket.query_params.get("token")
    user = None
    if token:
        user = resolve_user(token, websocket.app.state.store, websocket.app.state.settings)
    if user is None:
        await websocket.close(code=UNAUTHORIZED, reason="Invalid or missing token")
    return user


@router.websocket("/ws/families/{family_id}")
async def family_stream(websocket: WebSocket, family_id: str):
    """Members, posts, media and notifications of one family."""
    user = await authenticate(websocket)
    if user is None:
        return
    if not permissions.can_view_family(user, family_id):
        await websocket.close(code=FORBIDDEN, reason="Not a member of this family")
        return

    store = websocket.app.state.store

    def still_member() -> bool:
        current = store.get(USERS, user["id"])
        return current is not None and permissions.can_view_family(current, family_id)

    stream = SnapshotStream(websocket, store, allowed=still_member)
    stream.watch("members", USERS, {"family_id": family_id})
    stream.watch("posts", POSTS, {"family_id": family_id})
    stream.watch("media", MEDIA, {"family_id": family_id})
    stream.watch("notifications", NOTIFICATIONS, {"family_id": family_id})
    logger.info(f"User {user['id']} streaming family {family_id}")
    await stream.run()


@router.websocket("/ws/me")
async def profile_stream(websocket: WebSocket):
    """The caller's own profile."""
    user = await authenticate(websocket)
    if user is None:
        return

    stream = SnapshotStream(websocket, websocket.app.state.store)
    stream.watch("me", USERS, {"id": user["id"]})
    await stream.run()


@router.websocket("/ws/admin-requests")
async def admin_request_stream(websocket: WebSocket):
    """Pending admin requests, for the super-admin."""
    user = await authenticate(websocket)
    if user is None:
        return
    if not permissions.is_super_admin(user):
        await websocket.close(code=FORBIDDEN, reason="Only the super-admin can review admin requests")
        return

    stream = SnapshotStream(websocket, websocket.app.state.store)
    stream.watch("admin_requests", ADMIN_REQUESTS, {"status": "pending"})
    await stream.run()
