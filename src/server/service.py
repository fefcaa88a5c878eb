from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from websockets.asyncio.server import ServerConnection, broadcast, serve
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

from contracts.ui_protocol import EVENT_ERROR, EVENT_HELLO, EVENT_STATE_UPDATE, STATE_IDLE

from .config import HEALTHZ_PATH, INDEX_PATH, ROOT_PATH, UIServerConfig
from .events import ClientMessageError, StickyEventStore, make_event, parse_client_message
from .static_files import guess_content_type, resolve_static_file

MessageHandler = Callable[[dict[str, Any]], None]

_HTML = "text/html; charset=utf-8"
_TEXT = "text/plain; charset=utf-8"


class UIServer:
    """Serves the focus page over HTTP and streams timer events over one websocket path.

    The asyncio loop lives on a private daemon thread. ``publish`` is safe to
    call from any thread; inbound client frames are decoded and handed to the
    registered message handler on the server thread, so the handler should
    only enqueue work.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        on_message: Optional[MessageHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._on_message = on_message
        self._index_html = Path(config.index_file).read_bytes()
        self._sticky_events = StickyEventStore()
        self._clients: set[ServerConnection] = set()

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._startup_error: Optional[BaseException] = None

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and self._startup_error is None

    def set_message_handler(self, handler: Optional[MessageHandler]) -> None:
        self._on_message = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._ready.clear()
        self._startup_error = None
        self._thread = threading.Thread(target=self._thread_main, name="ui-server", daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._startup_error is not None:
            raise RuntimeError(f"UI server startup failed: {self._startup_error}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None and not loop.is_closed():
            loop.call_soon_threadsafe(shutdown.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)
        self._thread = None

    def publish_state(self, state: str, *, message: Optional[str] = None, **payload) -> None:
        if message:
            payload["message"] = message
        self.publish(EVENT_STATE_UPDATE, state=state, **payload)

    def publish(self, event_type: str, **payload) -> None:
        frame = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, frame)

        loop = self._loop
        if loop is None or not self.is_running:
            return
        try:
            loop.call_soon_threadsafe(self._broadcast, frame)
        except RuntimeError:
            # Loop closed between the check and the call.
            return

    def _thread_main(self) -> None:
        try:
            asyncio.run(self._serve())
        except Exception as error:
            self._startup_error = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
        finally:
            self._loop = None
            self._shutdown = None
            self._ready.set()

    async def _serve(self) -> None:
        self._loop = asyncio.get_running_loop()
        self._shutdown = asyncio.Event()
        async with serve(
            self._handle_connection,
            host=self._config.host,
            port=self._config.port,
            process_request=self._route_http,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server running at http://%s:%d (websocket: %s)",
                self._config.host,
                self._config.port,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._shutdown.wait()
            await asyncio.gather(
                *(
                    client.close(code=1001, reason="Server shutting down")
                    for client in tuple(self._clients)
                ),
                return_exceptions=True,
            )

    def _broadcast(self, frame: str) -> None:
        if self._clients:
            broadcast(self._clients, frame)

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        request = websocket.request
        if request is None or urlsplit(request.path).path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._clients.add(websocket)
        self._logger.info(
            "Client connected: %s (%d open)",
            websocket.remote_address,
            len(self._clients),
        )
        try:
            await websocket.send(
                make_event(EVENT_HELLO, state=STATE_IDLE, message="Focus timer connected")
            )
            for frame in self._sticky_events.snapshot():
                await websocket.send(frame)
            async for raw in websocket:
                await self._receive(websocket, raw)
        except ConnectionClosed:
            pass
        finally:
            self._clients.discard(websocket)
            self._logger.info("Client disconnected: %s", websocket.remote_address)

    async def _receive(self, websocket: ServerConnection, raw: str | bytes) -> None:
        self._logger.debug("Received from UI: %s", raw)
        try:
            message = parse_client_message(raw)
        except ClientMessageError as error:
            await websocket.send(make_event(EVENT_ERROR, message=str(error)))
            return

        handler = self._on_message
        if handler is None:
            self._logger.debug("No UI message handler registered; dropping %s", message["type"])
            return
        try:
            handler(message)
        except Exception as error:
            self._logger.error("UI message handler failed: %s", error, exc_info=True)
            await websocket.send(
                make_event(EVENT_ERROR, message=f"Failed to handle message: {error}")
            )

    def _route_http(self, connection: ServerConnection, request: Request) -> Optional[Response]:
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path in (ROOT_PATH, INDEX_PATH):
            return _http_response(200, self._index_html, _HTML)
        if path == HEALTHZ_PATH:
            return _http_response(200, b"ok\n", _TEXT)

        static_file = resolve_static_file(self._config.ui_root, path)
        if static_file is None:
            return _http_response(404, b"not found\n", _TEXT)
        return _http_response(200, static_file.read_bytes(), guess_content_type(static_file))


def _http_response(status_code: int, body: bytes, content_type: str) -> Response:
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-store"
    reason = "OK" if status_code == 200 else "Not Found"
    return Response(status_code, reason, headers, body)
