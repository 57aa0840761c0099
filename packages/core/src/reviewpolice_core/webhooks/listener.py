"""Direct webhook transport: an aiohttp server GitHub posts deliveries to."""

from __future__ import annotations

import logging

from aiohttp import web

from reviewpolice_core.webhooks.dispatcher import WebhookDispatcher, WebhookEnvelope

logger = logging.getLogger(__name__)

DEFAULT_PATH = "/api/github/webhooks"

DISPATCHER_KEY = web.AppKey("dispatcher", WebhookDispatcher)


async def handle_webhook(request: web.Request) -> web.Response:
    dispatcher = request.app[DISPATCHER_KEY]

    event_name = request.headers.get("X-GitHub-Event")
    if not event_name:
        logger.error("Webhook request without an X-GitHub-Event header")
        return web.json_response({"error": "No event type"}, status=400)

    signature = request.headers.get("X-Hub-Signature-256") or request.headers.get("X-Hub-Signature") or ""
    envelope = WebhookEnvelope(
        id=request.headers.get("X-GitHub-Delivery", ""),
        name=event_name,
        signature=signature,
        payload=await request.read(),
    )
    if not await dispatcher.receive(envelope):
        return web.json_response({"error": "Invalid signature"}, status=401)
    return web.json_response({"status": "accepted"}, status=202)


def build_app(dispatcher: WebhookDispatcher, path: str = DEFAULT_PATH) -> web.Application:
    app = web.Application()
    app[DISPATCHER_KEY] = dispatcher
    app.router.add_post(path, handle_webhook)
    return app


class WebhookListener:
    """Runs the webhook app on the current event loop until stopped."""

    def __init__(self, dispatcher: WebhookDispatcher, host: str = "0.0.0.0", port: int = 3000, path: str = DEFAULT_PATH):
        self.host = host
        self.port = port
        self.path = path
        self._app = build_app(dispatcher, path)
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Listening for GitHub webhooks on http://%s:%d%s", self.host, self.port, self.path)

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
