"""
Collection Updater
==================

A Readable of streaming updates to one StreamHub collection.

STATE MACHINE:
==============
    IDLE -> BOOTSTRAPPING_INIT -> STREAMING -> ERRORED
                                            -> CLOSED

ERRORED and CLOSED are terminal. Nothing is retried automatically; an owner
that wants to resume must build a new updater.

CURSOR INVARIANT:
=================
The ``commentId`` sent with stream request N is the ``maxEventId`` returned
by request N-1, or the bootstrap ``collectionSettings.event`` for N=1.
Streaming steps are strictly sequential, so the cursor is never advanced
out of order.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol
import asyncio
import logging

from ..contracts.base import (
    BootstrapError, CollectionIdentity, ErrorCode, StreamError, StreamHubError
)
from ..content.state_to_content import StateToContent
from ..content.types import Entity
from .readable import DEFAULT_HIGH_WATER_MARK, Readable

LOG = logging.getLogger(__name__)


class ContentClient(Protocol):
    """Call/response contract shared by the bootstrap and stream clients."""

    async def get_content(self, options: Dict[str, Any]) -> Dict[str, Any]:
        ...


class UpdaterState(Enum):
    IDLE = "idle"
    BOOTSTRAPPING_INIT = "bootstrapping_init"
    STREAMING = "streaming"
    ERRORED = "errored"
    CLOSED = "closed"


class StepOutcome(Enum):
    """How one streaming step resolved."""
    PUSHED = "pushed"
    EMPTY = "empty"
    TIMEOUT = "timeout"
    FAILED = "failed"


TranslatorFactory = Callable[..., StateToContent]


class CollectionUpdater(Readable):
    """
    Bootstrap once, then long-poll the Stream service indefinitely.

    Must be read from inside a running asyncio event loop: refills run as
    tasks on that loop.
    """

    def __init__(
        self,
        identity: CollectionIdentity,
        bootstrap_client: ContentClient,
        stream_client: ContentClient,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        translator_factory: TranslatorFactory = StateToContent
    ):
        super().__init__(high_water_mark=high_water_mark)
        self._identity = identity
        self._bootstrap_client = bootstrap_client
        self._stream_client = stream_client
        self._translator_factory = translator_factory

        self._state = UpdaterState.IDLE
        self._collection_id: Optional[str] = None
        self._cursor: Any = None
        self._task: Optional[asyncio.Task] = None
        self._read_requested = False

    @property
    def state(self) -> UpdaterState:
        return self._state

    @property
    def identity(self) -> CollectionIdentity:
        return self._identity

    @property
    def collection_id(self) -> Optional[str]:
        return self._collection_id

    @property
    def cursor(self) -> Any:
        """Latest event id this updater has seen."""
        return self._cursor

    # -------------------------------------------------------------------------
    # Readable hooks
    # -------------------------------------------------------------------------

    def _read(self) -> None:
        """Called by ``Readable.read()``. Do not call directly."""
        LOG.debug("_read: buffer length is %d", len(self))

        if self._state is UpdaterState.IDLE:
            LOG.debug("requesting bootstrap init")
            self._state = UpdaterState.BOOTSTRAPPING_INIT
            self._spawn(self._bootstrap_then_stream)
        elif self._state is UpdaterState.BOOTSTRAPPING_INIT:
            LOG.warning(
                "_read called while bootstrap init is still outstanding for %s; ignoring",
                self._identity.article_id
            )
        elif self._state is UpdaterState.STREAMING:
            if self._task is not None and not self._task.done():
                # Re-entered from a push inside the running step
                self._read_requested = True
                return
            self._spawn(self._stream)

    def _on_close(self) -> None:
        self._state = UpdaterState.CLOSED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    # -------------------------------------------------------------------------
    # Bootstrap
    # -------------------------------------------------------------------------

    async def _bootstrap_then_stream(self) -> None:
        if not await self._get_bootstrap_init():
            return
        await self._stream()

    async def _get_bootstrap_init(self) -> bool:
        """Learn the collection id and latest event. Returns success."""
        options = self._collection_options()
        try:
            response = await self._bootstrap_client.get_content(options)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOG.error("Error requesting Bootstrap init for %s: %s", self._identity, exc)
            error = BootstrapError("Bootstrap init request failed")
            error.__cause__ = exc
            self._enter_error(error.with_context('articleId', str(self._identity.article_id)))
            return False

        settings = response.get('collectionSettings') if isinstance(response, Mapping) else None
        if (not isinstance(settings, Mapping)
                or settings.get('collectionId') is None
                or 'event' not in settings):
            LOG.error("Bootstrap init response has no usable collectionSettings: %r", response)
            self._enter_error(BootstrapError(
                "Bootstrap init response has no collectionSettings",
                code=ErrorCode.MALFORMED_RESPONSE
            ))
            return False

        self._collection_id = settings['collectionId']
        self._cursor = settings['event']
        self._state = UpdaterState.STREAMING
        LOG.debug(
            "bootstrap init done: collectionId=%s event=%s",
            self._collection_id, self._cursor
        )
        return True

    # -------------------------------------------------------------------------
    # Streaming
    # -------------------------------------------------------------------------

    async def _stream(self) -> None:
        """Run streaming steps until one pushes data or fails."""
        while self._state is UpdaterState.STREAMING:
            self._read_requested = False
            outcome = await self._stream_step()
            if outcome is StepOutcome.FAILED:
                return
            if outcome is StepOutcome.PUSHED:
                if not self._read_requested:
                    return
                continue
            if outcome is StepOutcome.TIMEOUT:
                # Long poll timed out with no data; continue on the next loop turn
                LOG.debug("long poll timeout, requesting again on next tick")
                await asyncio.sleep(0)

    async def _stream_step(self) -> StepOutcome:
        """Make the next stream request from the last event id we know about."""
        options = self._collection_options()
        options['commentId'] = self._cursor
        try:
            data = await self._stream_client.get_content(options)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOG.error("Error requesting Stream for %s: %s", self._collection_id, exc)
            error = StreamError("Stream request failed")
            error.__cause__ = exc
            self._enter_error(error.with_context('commentId', str(self._cursor)))
            return StepOutcome.FAILED

        if not isinstance(data, Mapping):
            self._enter_error(StreamError(
                f"Stream response is {type(data).__name__}, not a mapping",
                code=ErrorCode.MALFORMED_RESPONSE
            ))
            return StepOutcome.FAILED

        if data.get('timeout'):
            return StepOutcome.TIMEOUT

        if 'maxEventId' not in data:
            self._enter_error(StreamError(
                "Stream response has neither timeout nor maxEventId",
                code=ErrorCode.MALFORMED_RESPONSE
            ).with_context('commentId', str(self._cursor)))
            return StepOutcome.FAILED

        contents = self._contents_from_stream_data(data)
        # The response's maximum is authoritative, even if it looks "behind"
        self._cursor = data['maxEventId']

        if not contents:
            LOG.debug("stream response had no content, streaming again")
            return StepOutcome.EMPTY

        LOG.debug("pushing %d contents, next event id %s", len(contents), self._cursor)
        self.push(*contents)
        return StepOutcome.PUSHED

    def _contents_from_stream_data(self, stream_data: Mapping[str, Any]) -> List[Entity]:
        """Convert a Stream response into entities."""
        contents: List[Entity] = []
        translator = self._translator_factory(stream_data, on_content=contents.append)
        states = stream_data.get('states') or {}
        for state in states.values():
            translator.write(state)
        return contents

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _collection_options(self) -> Dict[str, Any]:
        """Options identifying the collection for either client."""
        options = self._identity.to_options()
        if self._collection_id is not None:
            options['collectionId'] = self._collection_id
        return options

    def _enter_error(self, error: StreamHubError) -> None:
        if self._state is UpdaterState.CLOSED:
            return
        self._state = UpdaterState.ERRORED
        self._fail(error)

    def _spawn(self, run: Callable[[], Awaitable[None]]) -> None:
        self._task = asyncio.get_running_loop().create_task(self._guarded(run))

    async def _guarded(self, run: Callable[[], Awaitable[None]]) -> None:
        """Run a bootstrap or streaming task; unexpected failures end the updater."""
        try:
            await run()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            LOG.error(
                "Unexpected error while updating %s: %r", self._identity.article_id, exc
            )
            if self._state is UpdaterState.BOOTSTRAPPING_INIT:
                error: StreamHubError = BootstrapError("Bootstrap init failed unexpectedly")
                error.with_context('articleId', str(self._identity.article_id))
            else:
                error = StreamError("Streaming failed unexpectedly")
                error.with_context('commentId', str(self._cursor))
            error.__cause__ = exc
            self._enter_error(error)
