# =============================================================================
# backends/nats_dispatch.py  —  Dispatcher that publishes to NATS
# =============================================================================
#
# Each command becomes one JSON message on a subject:
#
#   deploy  →  {"user_id": ..., "template_id": ..., "creds": ...}
#   delete  →  {"server_id": ...}
#
# Publishing is fire-and-forget.  We flush after each publish so that a
# dead connection surfaces as an error on THIS tool call instead of
# silently buffering.
# =============================================================================

import json
import logging
from typing import Any, Optional

import nats

from core.models import DeleteCommand, DeployCommand

logger = logging.getLogger(__name__)


class NatsDispatcher:
    def __init__(
        self,
        url: str,
        deploy_subject: str = "deploy",
        delete_subject: str = "delete",
        connection: Optional[Any] = None,
    ):
        self._url = url
        self.deploy_subject = deploy_subject
        self.delete_subject = delete_subject
        self._nc = connection

    async def connect(self) -> None:
        if self._nc is None:
            self._nc = await nats.connect(servers=[self._url])
        logger.info("[NATS Connected] %s", self._url)

    async def close(self) -> None:
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None

    async def __aenter__(self) -> "NatsDispatcher":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        try:
            await self.close()
        except Exception:
            logger.warning("Error while draining NATS connection", exc_info=True)

    async def _publish(self, subject: str, payload: dict) -> None:
        if self._nc is None:
            raise RuntimeError("NATS connection not established")
        await self._nc.publish(subject, json.dumps(payload).encode("utf-8"))
        await self._nc.flush()

    async def deploy(self, command: DeployCommand) -> None:
        await self._publish(self.deploy_subject, command.to_payload())

    async def delete(self, command: DeleteCommand) -> None:
        await self._publish(self.delete_subject, command.to_payload())
