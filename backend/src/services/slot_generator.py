"""
Slot generation from working windows.

Turns a working window (start/end with an optional break) into the list of
candidate slot start times. Explicit per-center schedules list their slots
directly and do not go through this module.
"""

import logging
from typing import List

from core.constants import DEFAULT_SLOT_DURATION_MINUTES
from core.exceptions import InvalidConfigError
from shared_types import WorkingWindow
from utils.datetime_utils import intervals_overlap, minutes_to_time_str, time_to_minutes

logger = logging.getLogger(__name__)


class SlotGenerator:
    """Pure slot generation; no database access."""

    @staticmethod
    def generate(window: WorkingWindow, duration: int = DEFAULT_SLOT_DURATION_MINUTES) -> List[str]:
        """
        Generate candidate slot start times for a working window.

        Steps by `duration` from the window start while the whole slot fits
        before the window end. Slots that intersect the break are skipped.

        Args:
            window: Working window with "HH:MM" times
            duration: Slot length in minutes

        Returns:
            Ascending list of "HH:MM" start times; empty if start >= end

        Raises:
            InvalidConfigError: If duration is not positive
        """
        if duration <= 0:
            raise InvalidConfigError(f"Slot duration must be positive, got {duration}")

        start = time_to_minutes(window.start)
        end = time_to_minutes(window.end)
        if start >= end:
            return []

        break_start = break_end = None
        if window.has_break:
            break_start = time_to_minutes(window.break_start)  # type: ignore[arg-type]
            break_end = time_to_minutes(window.break_end)  # type: ignore[arg-type]

        slots: List[str] = []
        current = start
        while current + duration <= end:
            slot_end = current + duration
            in_break = (
                break_start is not None
                and break_end is not None
                and intervals_overlap(current, slot_end, break_start, break_end)
            )
            if not in_break:
                slots.append(minutes_to_time_str(current))
            current += duration

        return slots

    @staticmethod
    def generate_many(windows: List[WorkingWindow], duration: int = DEFAULT_SLOT_DURATION_MINUTES) -> List[str]:
        """Generate slots for several windows, sorted and de-duplicated."""
        seen = set()
        for window in windows:
            seen.update(SlotGenerator.generate(window, duration))
        return sorted(seen)
