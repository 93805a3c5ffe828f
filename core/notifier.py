#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
WebSocket push channel for translation progress.

Each connected browser tab gets a client id. Translation jobs started with
that id push their progress to it; delivery is best-effort and nothing is
queued for clients that are gone.

Messages are {"type": ..., "data": ...} envelopes, except the connection ack
and heartbeat frames which are flat:

    {"type": "connected", "clientId": "...", "message": "Connection established"}
    {"type": "ping", "timestamp": 1700000000000}
    {"type": "pong", "timestamp": 1700000000000}
"""

import json
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import WebSocket

from config.constants import WEBSOCKET_HEARTBEAT, WS_ERROR_TRANSLATION_FAILED

from .ids import epoch_ms, generate_client_id
from .job_store import JobSnapshot

from config.logging_config import get_logger
logger = get_logger(__name__)


@dataclass
class ClientConnection:
    """A registered WebSocket client"""
    client_id: str
    websocket: WebSocket
    is_alive: bool = True
    connected_at: float = 0.0


class ConnectionManager:
    """
    Manage WebSocket connections for real-time translation updates.

    Attributes:
        heartbeat_interval: Seconds between liveness rounds.
        clients: Registered connections keyed by client id.

    Example:
        >>> manager = ConnectionManager()
        >>> client_id = await manager.connect(websocket)
        >>> await manager.send_to_client(client_id, "translation_start", {...})
    """

    def __init__(
        self,
        heartbeat_interval: float = WEBSOCKET_HEARTBEAT,
        id_factory: Callable[[], str] = generate_client_id,
    ):
        self.heartbeat_interval = heartbeat_interval
        self._id_factory = id_factory
        self.clients: Dict[str, ClientConnection] = {}

    def __len__(self) -> int:
        return len(self.clients)

    def is_connected(self, client_id: Optional[str]) -> bool:
        return client_id is not None and client_id in self.clients

    async def connect(self, websocket: WebSocket) -> str:
        """
        Accept and register a new WebSocket connection.

        Returns:
            The generated client id (also sent to the client in the ack).
        """
        await websocket.accept()
        client_id = self._id_factory()
        while client_id in self.clients:
            client_id = self._id_factory()
        self.clients[client_id] = ClientConnection(
            client_id=client_id,
            websocket=websocket,
            connected_at=time.time(),
        )
        logger.info(f"WebSocket client connected: {client_id}")
        await self._send_raw(client_id, {
            "type": "connected",
            "clientId": client_id,
            "message": "Connection established",
        })
        return client_id

    def disconnect(self, client_id: str) -> bool:
        """Deregister a client; unknown ids are ignored."""
        removed = self.clients.pop(client_id, None) is not None
        if removed:
            logger.info(f"WebSocket client disconnected: {client_id}")
        return removed

    async def handle_message(self, client_id: str, raw: str):
        """
        Process one inbound frame. Any frame counts as a sign of life.
        """
        connection = self.clients.get(client_id)
        if connection is None:
            return
        connection.is_alive = True

        try:
            message = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-JSON message from {client_id}")
            return

        if isinstance(message, dict) and message.get("type") == "ping":
            await self._send_raw(client_id, {"type": "pong", "timestamp": epoch_ms()})

    async def check_heartbeats(self):
        """
        Run one liveness round.

        Clients that have not answered since the previous round are closed
        and deregistered; the rest are marked pending and pinged.
        """
        for client_id, connection in list(self.clients.items()):
            if not connection.is_alive:
                logger.info(f"Terminating unresponsive WebSocket client: {client_id}")
                self.disconnect(client_id)
                try:
                    await connection.websocket.close()
                except Exception as e:
                    logger.debug(f"Close failed for {client_id}: {e}")
                continue

            connection.is_alive = False
            await self._send_raw(client_id, {"type": "ping", "timestamp": epoch_ms()})

    async def _send_raw(self, client_id: str, message: Dict[str, Any]) -> bool:
        connection = self.clients.get(client_id)
        if connection is None:
            return False
        try:
            await connection.websocket.send_json(message)
            return True
        except Exception as e:
            logger.warning(f"Failed to send '{message.get('type')}' to {client_id}: {e}")
            self.disconnect(client_id)
            return False

    async def send_to_client(self, client_id: Optional[str], message_type: str, data: Dict[str, Any]) -> bool:
        """
        Send a typed event to one client.

        Returns:
            True if the frame was written; False if the client is unknown,
            absent or the send failed (the client is then deregistered).
        """
        if not client_id or client_id not in self.clients:
            return False
        return await self._send_raw(client_id, {"type": message_type, "data": data})

    # =========================================================================
    # Translation events
    # =========================================================================

    async def send_translation_start(self, client_id: Optional[str], snapshot: JobSnapshot) -> bool:
        return await self.send_to_client(client_id, "translation_start", {
            "translationId": snapshot.id,
            "totalChunks": snapshot.total,
        })

    async def send_translation_update(
        self,
        client_id: Optional[str],
        snapshot: JobSnapshot,
        chunk_index: int,
    ) -> bool:
        """Push the fragment just written at ``chunk_index``."""
        text = dict(snapshot.completed_chunks).get(chunk_index)
        return await self.send_to_client(client_id, "translation_update", {
            "translationId": snapshot.id,
            "chunkIndex": chunk_index,
            "totalChunks": snapshot.total,
            "text": text,
            "progress": {
                "completed": snapshot.completed,
                "total": snapshot.total,
            },
        })

    async def send_translation_complete(self, client_id: Optional[str], snapshot: JobSnapshot) -> bool:
        return await self.send_to_client(client_id, "translation_complete", {
            "translationId": snapshot.id,
            "translatedText": snapshot.translated_text,
            "timestamp": epoch_ms(),
        })

    async def send_error(
        self,
        client_id: Optional[str],
        message: str,
        code: str = WS_ERROR_TRANSLATION_FAILED,
        translation_id: Optional[str] = None,
    ) -> bool:
        data: Dict[str, Any] = {"message": message, "code": code}
        if translation_id is not None:
            data["translationId"] = translation_id
        return await self.send_to_client(client_id, "error", data)
