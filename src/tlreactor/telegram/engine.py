from __future__ import annotations

import enum
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..logging import get_logger
from .actions import ActionQueue, OutgoingAction
from .api_models import Update, User
from .client import BotTransport
from .codec import decode_update_batch, decode_user, unwrap_result
from .errors import TelegramError

if TYPE_CHECKING:
    from anyio.abc import TaskGroup

logger = get_logger(__name__)

UPDATES_LIMIT = 256
POLL_TIMEOUT_S = 15

UpdatesCallback = Callable[[list[Update]], None]


class EngineState(enum.Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class PollEngine:
    """Long-polls ``getUpdates`` and flushes queued actions after each batch.

    One iteration is fetch, advance the cursor, hand the batch to the
    callback, then flush the action queue. All of it runs sequentially in the
    single task driving :meth:`start`; :meth:`stop` is only observed between
    iterations.
    """

    def __init__(
        self,
        transport: BotTransport,
        *,
        updates_limit: int = UPDATES_LIMIT,
        poll_timeout_s: int = POLL_TIMEOUT_S,
    ) -> None:
        self._transport = transport
        self._updates_limit = updates_limit
        self._poll_timeout_s = poll_timeout_s
        self._queue = ActionQueue()
        self._callback: UpdatesCallback | None = None
        self._state = EngineState.STOPPED
        self._stop_requested = False
        self._cursor = 0
        self.me: User | None = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def pending_actions(self) -> int:
        return len(self._queue)

    def push_action(self, action: OutgoingAction) -> None:
        self._queue.push(action)

    async def check_token(self) -> User:
        logger.info("engine.check_token")
        try:
            me = decode_user(unwrap_result(await self._transport.call("getMe")))
        except TelegramError as exc:
            logger.critical(
                "engine.check_token.failed",
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise
        logger.info("engine.check_token.ok", bot_id=me.id, name=me.first_name)
        return me

    async def start(
        self, callback: UpdatesCallback, *, task_group: TaskGroup | None = None
    ) -> None:
        """Verify the token, then run the loop.

        Without ``task_group`` the loop runs in the calling task until it
        stops; with one it is spawned there and this returns immediately.
        """
        if self._state is EngineState.RUNNING:
            raise RuntimeError("poll engine is already running")
        self._callback = callback
        self._stop_requested = False
        self.me = await self.check_token()
        self._state = EngineState.RUNNING
        logger.info("engine.started", detached=task_group is not None)
        if task_group is None:
            await self._run()
        else:
            task_group.start_soon(self._run)

    def stop(self) -> None:
        logger.info("engine.stop_requested", cursor=self._cursor)
        self._stop_requested = True

    async def aclose(self) -> None:
        self._queue.close()
        await self._transport.close()

    async def fetch_updates(self) -> list[Update]:
        envelope = await self._transport.call(
            "getUpdates",
            {
                "offset": self._cursor,
                "limit": self._updates_limit,
                "timeout": self._poll_timeout_s,
            },
        )
        return decode_update_batch(envelope)

    def _advance_cursor(self, updates: list[Update]) -> None:
        top = max(
            (update.update_id for update in updates), default=self._cursor - 1
        )
        new_cursor = max(top, self._cursor - 1) + 1
        if new_cursor != self._cursor:
            logger.info(
                "engine.cursor.advanced", previous=self._cursor, cursor=new_cursor
            )
        self._cursor = new_cursor

    async def poll_once(self) -> int:
        """Run one fetch/dispatch/flush iteration and return the batch size."""
        if self._callback is None:
            raise RuntimeError("poll engine was not started")
        updates = await self.fetch_updates()
        if not updates:
            return 0
        logger.info("engine.poll.batch", count=len(updates))
        self._advance_cursor(updates)
        self._callback(updates)
        await self._queue.flush(self._transport)
        return len(updates)

    async def _run(self) -> None:
        try:
            while not self._stop_requested:
                await self.poll_once()
        except Exception as exc:
            logger.error(
                "engine.poll.failed",
                cursor=self._cursor,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            raise
        finally:
            self._state = EngineState.STOPPED
            logger.info("engine.stopped", cursor=self._cursor)
