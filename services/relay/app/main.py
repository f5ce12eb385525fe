import asyncio
import json
import logging
import uuid
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import RelaySettings, configure_logging
from .ice import build_ice_servers
from .pairing import ConnectionHub, RelayCoordinator
from .pairing.messages import CONNECTED, Envelope

logger = logging.getLogger(__name__)


def _cors_kwargs(raw_origins: str) -> dict[str, Any]:
    origin_tokens = [token.strip() for token in raw_origins.split(",") if token.strip() and token.strip() != "*"]
    cors_kwargs: dict[str, Any] = {
        "allow_methods": ["*"],
        "allow_headers": ["*"],
        "allow_credentials": True,
    }
    if origin_tokens:
        cors_kwargs["allow_origins"] = origin_tokens
    else:
        cors_kwargs["allow_origins"] = []
        cors_kwargs["allow_origin_regex"] = r"https?://.*"
    return cors_kwargs


async def _pump(websocket: WebSocket, queue: asyncio.Queue, connection_id: str) -> None:
    try:
        while True:
            message = await queue.get()
            await websocket.send_json(message)
    except (WebSocketDisconnect, RuntimeError) as exc:
        logger.debug("Stopped sending to %s: %s", connection_id, exc)
    except Exception as exc:
        logger.warning("Failed to send to %s: %s", connection_id, exc)


def _parse_frame(raw: Optional[str], connection_id: str) -> Optional[Envelope]:
    if raw is None:
        logger.warning("Ignoring non-text frame from %s", connection_id)
        return None
    try:
        return Envelope.model_validate(json.loads(raw))
    except json.JSONDecodeError as exc:
        logger.warning("Invalid JSON from %s: %s", connection_id, exc)
    except ValidationError as exc:
        logger.warning("Malformed frame from %s: %s", connection_id, exc)
    return None


def create_app(settings: Optional[RelaySettings] = None) -> FastAPI:
    settings = settings or RelaySettings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(title="Pairing Relay")
    app.add_middleware(CORSMiddleware, **_cors_kwargs(settings.cors_origin))

    coordinator = RelayCoordinator()
    hub = ConnectionHub(queue_size=settings.outbound_queue_size)
    app.state.settings = settings
    app.state.coordinator = coordinator
    app.state.hub = hub

    @app.get("/health")
    async def health():
        return {"ok": True, "sessions": coordinator.session_count(), "connections": len(hub)}

    @app.get("/api/get-turn-credentials")
    async def get_turn_credentials():
        return {"iceServers": build_ice_servers(settings)}

    @app.websocket("/ws")
    async def signaling_socket(websocket: WebSocket):
        await websocket.accept()

        connection_id = uuid.uuid4().hex
        queue = await hub.register(connection_id)
        await hub.emit(connection_id, CONNECTED, {"id": connection_id})
        sender = asyncio.create_task(_pump(websocket, queue, connection_id))
        logger.info("User connected: %s", connection_id)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                frame = _parse_frame(message.get("text"), connection_id)
                if frame is None:
                    continue
                await hub.deliver(coordinator.handle(connection_id, frame.event, frame.payload))
        except WebSocketDisconnect:
            pass
        finally:
            logger.info("User disconnected: %s", connection_id)
            await hub.unregister(connection_id)
            await hub.deliver(coordinator.disconnect(connection_id))
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass

    return app


app = create_app()


def run() -> None:
    settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)
