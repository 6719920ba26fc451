"""Event queue and delivery pipeline.

Buffers classified telemetry events and ships them to the collector in
batches.

Delivery triggers (in priority order):
    1. Size: the queue reaches ``batch_size`` -> flush now, cancelling any
       pending timer.
    2. Timer: the first unflushed event schedules one flush after
       ``flush_interval_ms``. At most one timer is outstanding.
    3. Unload: ``drain`` takes whatever is queued and ``send_beacon`` hands
       it to the transport's beacon mode (no response, no retry).
       ``flush_on_unload`` does both synchronously.

Flush algorithm:
    - Snapshot and clear the queue before the network call, so events
      enqueued while the request is in flight form the next batch.
    - On failure, a batch smaller than ``requeue_ceiling`` is put back at
      the FRONT of the queue (backlog drains first); larger batches are
      dropped.
    - No backoff: the next size or timer trigger retries.

Concurrency:
    Single event loop, no locks. The only suspension point is
    ``transport.send_batch``.
"""

import asyncio

from docguard.core.result import Failure, Success
from docguard.domain.protocols import LoggerProtocol, TelemetryTransportProtocol
from docguard.telemetry.identifiers import generate_batch_id
from docguard.telemetry.models import Batch, TelemetryEvent


class DeliveryPipeline:
    """Batched, requeueing delivery of telemetry events.

    Attributes:
        batch_size: Size trigger.
        flush_interval_ms: Timer trigger delay.
        requeue_ceiling: Failed batches at or above this size are dropped.
        enabled: When False, enqueue is a no-op.
    """

    def __init__(
        self,
        transport: TelemetryTransportProtocol,
        logger: LoggerProtocol,
        *,
        batch_size: int = 10,
        flush_interval_ms: int = 30_000,
        requeue_ceiling: int = 100,
        enabled: bool = True,
    ) -> None:
        self._transport = transport
        self._logger = logger
        self.batch_size = batch_size
        self.flush_interval_ms = flush_interval_ms
        self.requeue_ceiling = requeue_ceiling
        self.enabled = enabled

        self._queue: list[TelemetryEvent] = []
        self._timer: asyncio.TimerHandle | None = None
        self._timer_tasks: set[asyncio.Task[bool]] = set()

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def queued_events(self) -> tuple[TelemetryEvent, ...]:
        return tuple(self._queue)

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    async def enqueue(self, event: TelemetryEvent) -> None:
        """Queue an event and trigger delivery as required.

        Awaits the flush when the size trigger fires; otherwise makes sure a
        timer flush is scheduled.
        """
        if not self.enabled:
            return

        self._queue.append(event)

        if len(self._queue) >= self.batch_size:
            await self.flush()
        else:
            self.schedule_flush()

    def schedule_flush(self) -> None:
        """Schedule a timer flush unless one is already outstanding."""
        if self._timer is not None:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.flush_interval_ms / 1000, self._on_timer)

    def _on_timer(self) -> None:
        self._timer = None
        task = asyncio.ensure_future(self.flush())
        self._timer_tasks.add(task)
        task.add_done_callback(self._timer_tasks.discard)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def flush(self) -> bool:
        """Send everything queued as one batch.

        Returns:
            True if the batch was delivered (or the queue was empty),
            False if delivery failed.
        """
        if not self._queue:
            return True

        events = self._queue
        self._queue = []
        self._cancel_timer()

        batch = Batch(events=tuple(events), batch_id=generate_batch_id())
        result = await self._transport.send_batch(batch.to_wire())

        match result:
            case Success():
                self._logger.info(
                    "telemetry_batch_sent",
                    batch_id=batch.batch_id,
                    event_count=len(events),
                )
                return True
            case Failure(error=err):
                self._logger.warning(
                    "telemetry_batch_failed",
                    batch_id=batch.batch_id,
                    event_count=len(events),
                    status_code=err.status_code,
                    is_transient=err.is_transient,
                    error=err.message,
                )
                self._requeue(events, batch.batch_id)
                return False

    def _requeue(self, events: list[TelemetryEvent], batch_id: str) -> None:
        if len(events) < self.requeue_ceiling:
            self._queue[0:0] = events
            self._logger.debug(
                "telemetry_batch_requeued",
                batch_id=batch_id,
                event_count=len(events),
                queue_length=len(self._queue),
            )
        else:
            self._logger.warning(
                "telemetry_batch_dropped",
                batch_id=batch_id,
                event_count=len(events),
                requeue_ceiling=self.requeue_ceiling,
            )

    def drain(self) -> Batch | None:
        """Stop the timer and take everything queued as one batch.

        Returns:
            The batch, or None when the queue was empty.
        """
        self._cancel_timer()
        if not self._queue:
            return None

        events = self._queue
        self._queue = []
        return Batch(events=tuple(events), batch_id=generate_batch_id())

    def send_beacon(self, batch: Batch) -> bool:
        """Hand ``batch`` to the transport's beacon mode.

        Blocking; callers on the event loop run it in an executor.
        """
        sent = self._transport.send_beacon(batch.to_wire())
        self._logger.debug(
            "telemetry_beacon_sent",
            batch_id=batch.batch_id,
            event_count=len(batch.events),
            transmitted=sent,
        )
        return sent

    def flush_on_unload(self) -> bool:
        """Best-effort delivery of the remaining queue at teardown.

        The response is never inspected and nothing is requeued.

        Returns:
            True if a beacon was handed to the transport.
        """
        batch = self.drain()
        if batch is None:
            return False
        return self.send_beacon(batch)

    async def wait_for_timer_flushes(self) -> None:
        """Await timer-triggered flushes that are currently running."""
        if self._timer_tasks:
            await asyncio.gather(*self._timer_tasks)
