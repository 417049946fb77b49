# =============================================================================
# core/dispatch.py  —  Dispatch Sink contract
# =============================================================================
# The downstream system that actually deploys and deletes servers.  It is
# fire-and-forget from our side: a call either hands the command over or
# raises.  Implementations live in backends/ (NATS publish, REST call).
# =============================================================================

from typing import Protocol

from core.models import DeleteCommand, DeployCommand


class Dispatcher(Protocol):
    async def deploy(self, command: DeployCommand) -> None: ...

    async def delete(self, command: DeleteCommand) -> None: ...
