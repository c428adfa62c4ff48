"""
Real-time pacing - Tick the race against the wall clock.

Used by interactive mode: each tick of ``dt`` simulated seconds takes
``dt / realtime_factor`` wall-clock seconds.
"""

from typing import Callable, Iterator, Optional
import logging
import time

from gridsim.errors import ConfigurationError
from gridsim.simulation.race import RaceController
from gridsim.simulation.snapshot import RaceSnapshot

logger = logging.getLogger(__name__)


def iter_realtime(
    controller: RaceController,
    dt: float,
    realtime_factor: float = 1.0,
    should_stop: Optional[Callable[[], bool]] = None,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
) -> Iterator[RaceSnapshot]:
    """Yield one snapshot per tick, paced to the wall clock.

    Cancellation is checked between ticks only; the last yielded snapshot
    stays the final state of a cancelled race.

    Args:
        controller: Race to advance
        dt: Step size in seconds
        realtime_factor: Simulated seconds per wall-clock second
        should_stop: Cancellation check
        clock: Wall clock in seconds
        sleep: Sleep function in seconds

    Yields:
        Race snapshot after each tick
    """
    if not realtime_factor > 0.0:
        raise ConfigurationError(f"Realtime factor must be positive, got {realtime_factor}")

    period = dt / realtime_factor
    lagging = False

    while not controller.is_finished():
        if should_stop is not None and should_stop():
            logger.info(f"Race cancelled at t={controller.elapsed_s:.2f}s")
            return

        started = clock()
        snapshot = controller.tick(dt)
        yield snapshot

        remaining = period - (clock() - started)
        if remaining > 0.0:
            lagging = False
            sleep(remaining)
        elif not lagging:
            # Warn once per lagging streak
            lagging = True
            logger.warning(
                f"Simulation cannot keep up with realtime factor {realtime_factor:g} "
                f"at t={snapshot.elapsed_s:.2f}s, consider lowering it"
            )
