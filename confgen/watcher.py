"""Change-driven regeneration.

:class:`RegenerationCoordinator` watches the input TOML file and re-runs the
generation pipeline when it changes.  It is a small state machine driven by
messages on an :class:`asyncio.Queue`:

* a watch task turns filesystem events into ``CHANGED``, ``REPLACED`` or
  ``REMOVED`` messages.  A file swapped in by rename (atomic save) is
  ``REPLACED`` and the watch moves to the new file;
* a debounce timer task posts ``TIMER_FIRED`` once the file has been quiet
  for the debounce window;
* a retry task posts ``REATTACHED`` or ``RETRY_EXHAUSTED`` after the file
  was removed (editors that save by delete-then-recreate).

Only the scheduler loop in :meth:`RegenerationCoordinator.run` reads
messages and changes state, so at most one timer, one retry task and one
regeneration exist at any time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from confgen.config import GenerateOptions, WatchOptions
from confgen.errors import ConfgenError, WatchAttachError

logger = logging.getLogger(__name__)

ChangeSet = set[tuple[Change, str]]
WatchFactory = Callable[[Path, asyncio.Event], AsyncIterator[ChangeSet]]


def default_watch_factory(path: Path, stop_event: asyncio.Event) -> AsyncIterator[ChangeSet]:
    """Watch a single file with :func:`watchfiles.awatch`."""
    # The coordinator debounces itself; keep the watcher's own window short.
    return awatch(path, stop_event=stop_event, debounce=50, step=10, watch_filter=None)


class CoordinatorState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    UNAVAILABLE = "unavailable"


class MessageKind(str, Enum):
    CHANGED = "changed"
    REMOVED = "removed"
    REPLACED = "replaced"
    TIMER_FIRED = "timer_fired"
    REATTACHED = "reattached"
    RETRY_EXHAUSTED = "retry_exhausted"
    WATCH_ERROR = "watch_error"


@dataclass(frozen=True)
class WatchMessage:
    kind: MessageKind
    token: int = 0
    detail: str = ""


class RegenerationCoordinator:
    """Debounced, crash-tolerant watch loop around a regeneration callback.

    Args:
        input_file: The file to watch.
        regenerate: Synchronous callable that runs the whole pipeline.  It is
            executed in a worker thread; exceptions are logged, never raised.
        options: Debounce and retry tuning.
        watch_factory: Creates the async stream of filesystem change sets for
            a path.  Defaults to :func:`default_watch_factory`.
    """

    def __init__(
        self,
        input_file: str | Path,
        regenerate: Callable[[], Any],
        options: WatchOptions | None = None,
        watch_factory: WatchFactory | None = None,
    ) -> None:
        self.input_file = Path(input_file).absolute()
        self.regenerate = regenerate
        self.options = options or WatchOptions()
        self.watch_factory = watch_factory or default_watch_factory

        self.state = CoordinatorState.IDLE
        self.runs = 0
        self.failures = 0
        self.retries_started = 0

        self._queue: asyncio.Queue[WatchMessage] = asyncio.Queue()
        self._timer: asyncio.Task[None] | None = None
        self._timer_token = 0
        self._retry: asyncio.Task[None] | None = None
        self._watch: asyncio.Task[None] | None = None
        self._watch_stop: asyncio.Event | None = None
        self._watched_inode: int | None = None

    # -- Public API --------------------------------------------------------

    async def run(self, stop_event: asyncio.Event) -> None:
        """Watch until *stop_event* is set.

        Raises:
            WatchAttachError: The input file cannot be watched at startup.
        """
        if not self.input_file.exists():
            raise WatchAttachError(self.input_file, "file does not exist")

        self._queue = asyncio.Queue()
        self._attach()
        logger.info("Watching %s", self.input_file)

        stop_waiter = asyncio.create_task(stop_event.wait())
        try:
            while True:
                getter = asyncio.create_task(self._queue.get())
                done, _ = await asyncio.wait(
                    {getter, stop_waiter}, return_when=asyncio.FIRST_COMPLETED
                )
                if stop_waiter in done:
                    getter.cancel()
                    break
                await self._handle(getter.result())
        finally:
            stop_waiter.cancel()
            await self._shutdown()
        logger.info("Stopped watching %s", self.input_file)

    # -- Scheduler ---------------------------------------------------------

    async def _handle(self, message: WatchMessage) -> None:
        kind = message.kind
        if kind is MessageKind.CHANGED:
            self._arm_timer()
        elif kind is MessageKind.TIMER_FIRED:
            if message.token != self._timer_token or self._timer is None:
                return  # superseded by a later event
            self._timer = None
            self.state = CoordinatorState.IDLE
            await self._run_regeneration()
        elif kind is MessageKind.REPLACED:
            # The old watch follows the unlinked inode; watch the new file.
            logger.info("%s replaced, re-attaching watch", self.input_file)
            self._detach()
            if self._reattach():
                self._arm_timer()
        elif kind in (MessageKind.REMOVED, MessageKind.WATCH_ERROR):
            if kind is MessageKind.WATCH_ERROR:
                logger.error("Watch error on %s: %s", self.input_file, message.detail)
            else:
                logger.warning("%s removed, waiting for recreation...", self.input_file)
            self._detach()
            self._start_retry()
        elif kind is MessageKind.REATTACHED:
            self._retry = None
            if self._reattach():
                logger.info("%s recreated, watching again", self.input_file)
                self.state = CoordinatorState.IDLE
                self._arm_timer()
        elif kind is MessageKind.RETRY_EXHAUSTED:
            self._retry = None
            logger.warning(
                "Could not re-watch %s after removal (%d attempts)",
                self.input_file, self.options.retry_attempts,
            )

    def _start_retry(self) -> None:
        self._cancel_timer()
        self.state = CoordinatorState.UNAVAILABLE
        if self._retry is None:
            self.retries_started += 1
            self._retry = asyncio.create_task(self._retry_attach(), name="confgen-retry")

    def _reattach(self) -> bool:
        """Attach to the current file; fall back to the retry loop on failure."""
        try:
            self._attach()
        except WatchAttachError as exc:
            logger.warning("Could not watch %s: %s", self.input_file, exc)
            self._start_retry()
            return False
        return True

    def _arm_timer(self) -> None:
        self._cancel_timer()
        self._timer_token += 1
        self._timer = asyncio.create_task(self._fire_after(self._timer_token), name="confgen-debounce")
        self.state = CoordinatorState.PENDING

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self.state is CoordinatorState.PENDING:
            self.state = CoordinatorState.IDLE

    async def _run_regeneration(self) -> None:
        self.runs += 1
        logger.info("Change detected, regenerating...")
        try:
            await asyncio.to_thread(self.regenerate)
        except ConfgenError as exc:
            self.failures += 1
            logger.error("Regeneration failed: %s", exc)
        except Exception:
            self.failures += 1
            logger.exception("Unexpected error during regeneration")
        else:
            logger.info("Regeneration complete")

    # -- Background tasks --------------------------------------------------

    async def _fire_after(self, token: int) -> None:
        await asyncio.sleep(self.options.debounce)
        self._queue.put_nowait(WatchMessage(MessageKind.TIMER_FIRED, token=token))

    async def _retry_attach(self) -> None:
        for _ in range(self.options.retry_attempts):
            await asyncio.sleep(self.options.retry_interval)
            if self.input_file.exists():
                self._queue.put_nowait(WatchMessage(MessageKind.REATTACHED))
                return
        self._queue.put_nowait(WatchMessage(MessageKind.RETRY_EXHAUSTED))

    async def _consume(self, changes: AsyncIterator[ChangeSet]) -> None:
        try:
            async for batch in changes:
                kinds = {change for change, _ in batch}
                if not kinds:
                    continue
                inode = self._current_inode()
                if inode is None:
                    self._queue.put_nowait(WatchMessage(MessageKind.REMOVED))
                elif Change.deleted in kinds or inode != self._watched_inode:
                    self._queue.put_nowait(WatchMessage(MessageKind.REPLACED))
                else:
                    self._queue.put_nowait(WatchMessage(MessageKind.CHANGED))
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._queue.put_nowait(WatchMessage(MessageKind.WATCH_ERROR, detail=str(exc)))

    # -- Watch attachment --------------------------------------------------

    def _current_inode(self) -> int | None:
        try:
            return self.input_file.stat().st_ino
        except OSError:
            return None

    def _attach(self) -> None:
        self._watched_inode = self._current_inode()
        self._watch_stop = asyncio.Event()
        try:
            changes = self.watch_factory(self.input_file, self._watch_stop)
        except OSError as exc:
            raise WatchAttachError(self.input_file, str(exc)) from exc
        self._watch = asyncio.create_task(self._consume(changes), name="confgen-watch")

    def _detach(self) -> None:
        if self._watch_stop is not None:
            self._watch_stop.set()
            self._watch_stop = None
        if self._watch is not None:
            self._watch.cancel()
            self._watch = None

    async def _shutdown(self) -> None:
        pending = [t for t in (self._timer, self._retry, self._watch) if t is not None]
        self._timer = None
        self._retry = None
        self._detach()
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self.state = CoordinatorState.IDLE


# ---------------------------------------------------------------------------
# File-level entry point
# ---------------------------------------------------------------------------


async def watch(
    options: GenerateOptions,
    stop_event: asyncio.Event,
    watch_options: WatchOptions | None = None,
    watch_factory: WatchFactory | None = None,
) -> RegenerationCoordinator:
    """Generate once, then regenerate on every change until *stop_event*.

    A failing initial generation is logged and watching continues, so the
    user can fix the file in place.
    """
    from confgen.pipeline import generate_from_file

    def regenerate() -> None:
        generate_from_file(options)

    try:
        await asyncio.to_thread(regenerate)
    except ConfgenError as exc:
        logger.error("Initial generation failed: %s", exc)
        logger.info("Continuing to watch for changes...")

    coordinator = RegenerationCoordinator(
        options.input_file, regenerate, watch_options, watch_factory
    )
    await coordinator.run(stop_event)
    return coordinator
