"""
Paced driver for interactive use.

The controller itself never sleeps or spawns work. For animated front ends
this coroutine calls ``step()`` and yields back to the host event loop
between interactions. Stopping is cooperative: the coroutine simply stops
calling ``step()`` when ``should_stop`` returns True or the task is
cancelled.
"""

import asyncio
from typing import Callable, Optional

from .controller import SimulationController, Statistics


async def run_paced(
    controller: SimulationController,
    delay: float = 0.01,
    should_stop: Optional[Callable[[], bool]] = None,
) -> Statistics:
    """
    Step the controller with a pause between interactions.

    Args:
        controller: Initialized controller, owned by the caller
        delay: Seconds to wait between steps
        should_stop: Polled before every step; True stops the run early

    Returns:
        Statistics at the point the loop ended
    """
    while not controller.is_complete:
        if should_stop is not None and should_stop():
            break
        controller.step()
        await asyncio.sleep(delay)

    return controller.get_statistics()
