"""
Overflow Stash
==============

Holds entities displaced from a capacity-bounded visible set and releases
them back at a throttled rate.

GUARANTEES:
===========
1. Last in, first out: the most recently stacked entity is released first
2. Every release consumes one unit of goal; ``set_goal(0)`` blocks releases
3. Releases since the last ``set_goal(0)`` never exceed the sum of the
   positive goals set since then
4. Releasing from an empty stash is a no-op and does not consume goal

Released entities are pushed to this stash's own readable output.

By default the cadence only spends goal granted through ``set_goal`` (for
example by ``ContentList.show_more``). With ``auto_goal`` every interval
grants one unit of goal itself, so stashed entities trickle back without
being asked for.
"""

from __future__ import annotations
from typing import Any, List, Optional
import logging

from .readable import Readable

LOG = logging.getLogger(__name__)

DEFAULT_RELEASE_INTERVAL = 5


class OverflowStash(Readable):
    """
    LIFO stash with a release goal and an insertion cadence.

    The owning list calls ``note_insertion()`` for every entity it inserts;
    every ``interval`` insertions one release is attempted.
    """

    def __init__(
        self,
        interval: int = DEFAULT_RELEASE_INTERVAL,
        goal: int = 0,
        auto_goal: bool = False
    ):
        super().__init__(high_water_mark=0)
        if interval < 1:
            raise ValueError("interval must be >= 1")
        if goal < 0:
            raise ValueError("goal must be >= 0")
        self._interval = interval
        self._goal = goal
        self._auto_goal = auto_goal
        self._releasing = False
        self._count = 0
        self._stack: List[Any] = []

        # Accounting since the last set_goal(0)
        self._goal_granted = goal
        self._released = 0

    def stack(self, content: Any) -> None:
        """Save a displaced entity to be released later."""
        self._stack.append(content)

    def set_goal(self, goal: int) -> None:
        """Set how many entities may be released in the current window."""
        if goal < 0:
            raise ValueError("goal must be >= 0")
        self._goal = goal
        if goal == 0:
            self._goal_granted = 0
            self._released = 0
        else:
            self._goal_granted += goal

    def note_insertion(self) -> Optional[Any]:
        """Advance the cadence counter; release one entity at the interval."""
        self._count += 1
        if self._count < self._interval:
            return None
        self._count = 0
        # No automatic grant while a release is re-entering the owner
        if self._auto_goal and self._goal == 0 and self._stack and not self._releasing:
            self.set_goal(1)
        return self.release()

    def release(self) -> Optional[Any]:
        """Release the most recently stacked entity if the goal allows."""
        if self._goal <= 0 or not self._stack:
            return None
        content = self._stack.pop()
        self._goal -= 1
        self._released += 1
        LOG.debug("releasing stashed content, %d left, goal %d", len(self._stack), self._goal)
        releasing, self._releasing = self._releasing, True
        try:
            self.push(content)
        finally:
            self._releasing = releasing
        return content

    @property
    def goal(self) -> int:
        return self._goal

    @property
    def auto_goal(self) -> bool:
        return self._auto_goal

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def released_since_reset(self) -> int:
        return self._released

    @property
    def goal_since_reset(self) -> int:
        return self._goal_granted

    @property
    def stashed(self) -> int:
        return len(self._stack)
