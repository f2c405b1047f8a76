"""Active objects driven by an event queue, with a hierarchical state machine.

A small sensor -> processor -> logger pipeline shows the pattern. Each active
object owns an event queue and a worker thread that drains it. The processor's
behaviour is governed by ``ProcessorHSM``. Its composite Running state holds
the Normal and Degraded sub-states. Entry and exit actions run on each
transition, and a guard limits how often recovery from Error may be retried.
"""

from __future__ import annotations

import argparse
import enum
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from .eventqueue import EventQueue

_IDLE_SLEEP = 0.0001
_FRAME_PERIOD = 0.010
_MAX_POINTS = 256
_LOG_EVERY = 50
_U32 = 0xFFFFFFFF


class EventId(enum.IntEnum):
    """Identifiers of the events exchanged in the pipeline."""

    START = 1
    STOP = 2
    PAUSE = 3
    RESUME = 4
    DEGRADE = 5
    RECOVER = 6
    RESET = 7
    DATA_READY = 100
    PROCESS_RESULT = 101
    ERROR = 300


@dataclass(frozen=True)
class EventPayload:
    """An event id with optional data shared by every consumer."""

    event_id: int
    data: Any = None

    @property
    def has_data(self) -> bool:
        return self.data is not None


class _Counter:
    """Thread-safe counter."""

    __slots__ = ("_value", "_lock")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def add(self, amount: int = 1) -> int:
        """Add ``amount`` and return the value before the addition."""
        with self._lock:
            previous = self._value
            self._value += amount
            return previous

    @property
    def value(self) -> int:
        return self._value


class ActiveObject:
    """Owns an event queue and a thread that dispatches its events."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.queue = EventQueue()
        self._running = threading.Event()
        self._thread: threading.Thread | None = None

    def subscribe(self, event_id: int, callback: Callable[[EventPayload], Any]) -> None:
        """Call ``callback(payload)`` for each event ``event_id`` processed."""
        self.queue.append_listener(event_id, callback)

    def post(self, event: EventPayload | int) -> None:
        """Queue a payload, or a bare event id without data."""
        payload = event if isinstance(event, EventPayload) else EventPayload(event)
        self.queue.enqueue(payload.event_id, payload)

    def start(self) -> None:
        """Start the worker thread."""
        self._running.set()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the worker thread after it has drained the queue."""
        self._running.clear()
        thread, self._thread = self._thread, None
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join()

    def is_running(self) -> bool:
        return self._running.is_set()

    def _run(self) -> None:
        while self._running.is_set():
            if not self.queue.process_one():
                time.sleep(_IDLE_SLEEP)
        self.queue.process()


class State(enum.Enum):
    """States of the processor; the value is the display name."""

    IDLE = "Idle"
    RUNNING_NORMAL = "Running::Normal"
    RUNNING_DEGRADED = "Running::Degraded"
    PAUSED = "Paused"
    ERROR = "Error"


_RUNNING = (State.RUNNING_NORMAL, State.RUNNING_DEGRADED)


class ProcessorHSM:
    """Hierarchical state machine controlling the processor."""

    MAX_RETRIES = 3

    def __init__(self) -> None:
        self.state = State.IDLE
        self.retry_count = 0

    def dispatch(self, event_id: int) -> bool:
        """Handle an event; return whether a transition took place."""
        state = self.state
        if state is State.IDLE:
            if event_id == EventId.START:
                return self._transition(State.RUNNING_NORMAL)
        elif state in _RUNNING:
            if event_id == EventId.PAUSE:
                return self._transition(State.PAUSED)
            if event_id == EventId.STOP:
                return self._transition(State.IDLE)
            if event_id == EventId.ERROR:
                return self._transition(State.ERROR)
            if state is State.RUNNING_NORMAL and event_id == EventId.DEGRADE:
                return self._transition(State.RUNNING_DEGRADED)
            if state is State.RUNNING_DEGRADED and event_id == EventId.RECOVER:
                return self._transition(State.RUNNING_NORMAL)
        elif state is State.PAUSED:
            if event_id == EventId.RESUME:
                return self._transition(State.RUNNING_NORMAL)
            if event_id == EventId.STOP:
                return self._transition(State.IDLE)
        elif state is State.ERROR:
            if event_id == EventId.RESET:
                if self.retry_count <= self.MAX_RETRIES:
                    return self._transition(State.RUNNING_NORMAL)
                print(
                    f"  [HSM] Reset REJECTED: retry limit reached "
                    f"({self.retry_count}/{self.MAX_RETRIES})"
                )
                return False
            if event_id == EventId.STOP:
                return self._transition(State.IDLE)
        return False

    def is_running(self) -> bool:
        """Whether the machine is in either sub-state of Running."""
        return self.state in _RUNNING

    def is_degraded(self) -> bool:
        return self.state is State.RUNNING_DEGRADED

    def state_name(self) -> str:
        return self.state.value

    def _on_enter(self, state: State) -> None:
        if state is State.IDLE:
            self.retry_count = 0
            print("  [HSM]   entry: retry counter reset")
        elif state is State.RUNNING_NORMAL:
            print("  [HSM]   entry: processing normally")
        elif state is State.RUNNING_DEGRADED:
            print("  [HSM]   entry: WARNING \u2014 degraded mode, reduced quality")
        elif state is State.PAUSED:
            print("  [HSM]   entry: data processing suspended")
        elif state is State.ERROR:
            self.retry_count += 1
            print(f"  [HSM]   entry: error #{self.retry_count} (max retries: {self.MAX_RETRIES})")

    def _on_exit(self, state: State) -> None:
        if state is State.RUNNING_DEGRADED:
            print("  [HSM]   exit: leaving degraded mode")
        elif state is State.ERROR:
            print("  [HSM]   exit: attempting recovery")

    def _transition(self, new_state: State) -> bool:
        print(f"  [HSM] {self.state.value} -> {new_state.value}")
        self._on_exit(self.state)
        self.state = new_state
        self._on_enter(new_state)
        return True


@dataclass
class SensorFrame:
    """One frame of simulated sensor readings."""

    frame_id: int
    timestamp_us: int
    point_count: int
    data: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class ProcessResult:
    """Statistics computed from one frame."""

    frame_id: int
    valid_count: int
    total_count: int
    mean_value: float
    max_value: float
    degraded: bool


def make_frame(frame_id: int) -> SensorFrame:
    """Build the simulated frame with the given id."""
    point_count = 128 + frame_id % 128
    data = [
        ((frame_id * 7 + i * 13) & _U32) % 1000 / 10.0 for i in range(point_count)
    ]
    return SensorFrame(
        frame_id=frame_id,
        timestamp_us=time.monotonic_ns() // 1000,
        point_count=point_count,
        data=data,
    )


def process_frame(frame: SensorFrame, degraded: bool) -> ProcessResult:
    """Compute count, mean and maximum of the readings strictly between 1 and 90."""
    limit = min(frame.point_count, _MAX_POINTS)
    valid = [v for v in frame.data[:limit] if 1.0 < v < 90.0]
    return ProcessResult(
        frame_id=frame.frame_id,
        valid_count=len(valid),
        total_count=frame.point_count,
        mean_value=sum(valid) / len(valid) if valid else 0.0,
        max_value=max(valid, default=0.0),
        degraded=degraded,
    )


class SensorAO(ActiveObject):
    """Generates frames on its own thread between Start and Stop events."""

    def __init__(self, downstream: ActiveObject) -> None:
        super().__init__("Sensor")
        self.downstream = downstream
        self._frames = _Counter()
        self._generating = threading.Event()
        self._generator: threading.Thread | None = None
        self.subscribe(EventId.START, lambda _event: self._on_start())
        self.subscribe(EventId.STOP, lambda _event: self._on_stop())

    def frame_count(self) -> int:
        return self._frames.value

    def stop(self) -> None:
        super().stop()
        self._halt_generation()

    def _on_start(self) -> None:
        print("  [Sensor] Start generating")
        if self._generator is not None and self._generator.is_alive():
            return
        self._generating.set()
        self._generator = threading.Thread(
            target=self._generate, name="SensorGenerator", daemon=True
        )
        self._generator.start()

    def _on_stop(self) -> None:
        print("  [Sensor] Stop generating")
        self._halt_generation()

    def _halt_generation(self) -> None:
        self._generating.clear()
        generator, self._generator = self._generator, None
        if generator is not None and generator.is_alive():
            generator.join()

    def _generate(self) -> None:
        while self._generating.is_set():
            frame = make_frame(self._frames.add())
            self.downstream.post(EventPayload(EventId.DATA_READY, frame))
            time.sleep(_FRAME_PERIOD)


class ProcessorAO(ActiveObject):
    """Turns frames into results while its state machine is running."""

    def __init__(self, downstream: ActiveObject) -> None:
        super().__init__("Processor")
        self.downstream = downstream
        self.hsm = ProcessorHSM()
        self._processed = _Counter()
        self._dropped = _Counter()
        self.subscribe(EventId.DATA_READY, self._on_data_ready)

    def send_command(self, cmd: int) -> bool:
        """Feed a command to the state machine; return whether it changed state."""
        return self.hsm.dispatch(cmd)

    def state_name(self) -> str:
        return self.hsm.state_name()

    def retry_count(self) -> int:
        return self.hsm.retry_count

    def processed_count(self) -> int:
        return self._processed.value

    def dropped_count(self) -> int:
        return self._dropped.value

    def _on_data_ready(self, event: EventPayload) -> None:
        if not self.hsm.is_running():
            self._dropped.add()
            return
        frame = event.data
        if frame is None:
            return
        result = process_frame(frame, self.hsm.is_degraded())
        self.downstream.post(EventPayload(EventId.PROCESS_RESULT, result))
        self._processed.add()


class LoggerAO(ActiveObject):
    """Counts results and prints every fiftieth one."""

    def __init__(self) -> None:
        super().__init__("Logger")
        self._logged = _Counter()
        self._degraded = _Counter()
        self.subscribe(EventId.PROCESS_RESULT, self._on_result)

    def logged_count(self) -> int:
        return self._logged.value

    def degraded_count(self) -> int:
        return self._degraded.value

    def _on_result(self, event: EventPayload) -> None:
        result: ProcessResult = event.data
        count = self._logged.add()
        if result.degraded:
            self._degraded.add()
        if count % _LOG_EVERY == 0:
            suffix = " [DEGRADED]" if result.degraded else ""
            print(
                f"  [Logger] Frame {result.frame_id}: "
                f"{result.valid_count}/{result.total_count} valid, "
                f"mean={result.mean_value:.1f}, max={result.max_value:.1f}{suffix}"
            )


def _sleep_ms(ms: int) -> None:
    time.sleep(ms / 1000.0)


def _error_cycle(processor: ProcessorAO, title: str) -> None:
    print(f"\n  --- {title} ---")
    processor.send_command(EventId.ERROR)
    _sleep_ms(100)
    processor.send_command(EventId.RESET)


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline demonstration and print its statistics."""
    parser = argparse.ArgumentParser(description="Active object and state machine pipeline demo.")
    parser.parse_args(argv)

    print("========================================")
    print("  Active Object + HSM Pipeline Demo")
    print("========================================\n")

    logger = LoggerAO()
    processor = ProcessorAO(logger)
    sensor = SensorAO(processor)

    logger.start()
    processor.start()
    sensor.start()
    print("--- Pipeline started ---\n")

    print("[Phase 1] Start \u2014 Idle -> Running::Normal")
    processor.send_command(EventId.START)
    sensor.post(EventId.START)
    print("[Run] Normal processing for 2 seconds...\n")
    _sleep_ms(2000)

    print("\n[Phase 2] Degrade \u2014 Running::Normal -> Running::Degraded")
    processor.send_command(EventId.DEGRADE)
    print("[Run] Degraded processing for 1 second...")
    _sleep_ms(1000)

    print("\n[Phase 3] Recover \u2014 Running::Degraded -> Running::Normal")
    processor.send_command(EventId.RECOVER)
    print("[Run] Normal processing for 1 second...")
    _sleep_ms(1000)

    print("\n[Phase 4] Pause / Resume")
    processor.send_command(EventId.PAUSE)
    before_pause = processor.processed_count()
    _sleep_ms(500)
    after_pause = processor.processed_count()
    print(f"[Info] Processed during pause: {after_pause - before_pause} (should be 0)")
    processor.send_command(EventId.RESUME)
    print("[Run] Resumed for 1 second...")
    _sleep_ms(1000)

    print(f"\n[Phase 5] Error recovery with retry limit (max {ProcessorHSM.MAX_RETRIES})")
    for number in range(1, 4):
        _error_cycle(processor, f"Error #{number}")
        _sleep_ms(500)
    _error_cycle(processor, "Error #4 (Guard rejects Reset)")
    print("[Info] Processor stuck in Error, must Stop to reset")

    print("\n[Phase 6] Stop \u2014 cleanup")
    processor.send_command(EventId.STOP)
    sensor.post(EventId.STOP)
    _sleep_ms(200)

    sensor.stop()
    processor.stop()
    logger.stop()

    print("\n========================================")
    print("  Statistics")
    print("========================================")
    print(f"  Sensor frames generated:  {sensor.frame_count()}")
    print(f"  Processor frames handled: {processor.processed_count()}")
    print(f"  Processor frames dropped: {processor.dropped_count()}")
    print(f"  Logger entries written:   {logger.logged_count()}")
    print(f"  Logger degraded entries:  {logger.degraded_count()}")
    print(f"  Processor retry count:    {processor.retry_count()}")
    print(f"  Processor final state:    {processor.state_name()}")
    print("\nDone.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())