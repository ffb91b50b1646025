"""Row-position bookkeeping for the disbursement roll-up.

The tracker hands out absolute row positions and remembers which total rows
each higher-level total must reference. It is a small state machine:

=================  ==============================  ===============
State              Transition                      Next state
=================  ==============================  ===============
any but FINISHED   ``add_data_row``                COLLECTING_DAY
COLLECTING_DAY     ``close_day``                   DAY_CLOSED
DAY_CLOSED         ``close_week``                  WEEK_CLOSED
DAY_CLOSED,        ``close_month``                 MONTH_CLOSED
WEEK_CLOSED
MONTH_CLOSED       ``finish``                      FINISHED
=================  ==============================  ===============

A month may close while its last week stays open; that week is then filed
under the month in which it does close.
"""

from __future__ import annotations

from enum import Enum

from loan_engine.exceptions import RollupStateError
from loan_engine.models import RangeSum


class RollupState(str, Enum):
    COLLECTING_DAY = "COLLECTING_DAY"
    DAY_CLOSED = "DAY_CLOSED"
    WEEK_CLOSED = "WEEK_CLOSED"
    MONTH_CLOSED = "MONTH_CLOSED"
    FINISHED = "FINISHED"


class RollupTracker:
    """Assign row positions and collect total-row references.

    Parameters
    ----------
    first_position : int
        Absolute position of the first emitted row.
    """

    def __init__(self, first_position: int = 1) -> None:
        if first_position < 1:
            raise RollupStateError(f"first_position must be >= 1, got {first_position}")
        self.first_position = first_position
        self.state = RollupState.MONTH_CLOSED
        self._next_position = first_position
        self._next_serial = 1
        self._day_rows: list[int] = []
        self._daily_by_week: dict[str, list[int]] = {}
        self._weekly_by_month: dict[str, list[int]] = {}
        self._monthly: list[int] = []
        self._started = False

    @property
    def next_position(self) -> int:
        return self._next_position

    @property
    def rows_emitted(self) -> int:
        return self._next_position - self.first_position

    def open_weeks(self) -> list[str]:
        """Week keys holding daily totals not yet consumed by a weekly total."""
        return list(self._daily_by_week)

    def open_months(self) -> list[str]:
        """Month keys holding weekly totals not yet consumed by a monthly total."""
        return list(self._weekly_by_month)

    def add_data_row(self) -> tuple[int, int]:
        """Reserve a data row; returns ``(position, serial)``."""
        if self.state is RollupState.FINISHED:
            raise RollupStateError("Cannot add rows to a finished report")
        if self.state is not RollupState.COLLECTING_DAY:
            self._day_rows = []
            self.state = RollupState.COLLECTING_DAY

        position = self._take_position()
        serial = self._next_serial
        self._next_serial += 1
        self._day_rows.append(position)
        self._started = True
        return position, serial

    def close_day(self, week: str) -> tuple[int, RangeSum]:
        """Reserve the daily total of the day being collected."""
        self._require(RollupState.COLLECTING_DAY, "close a day")
        refs = RangeSum(tuple(self._day_rows))
        position = self._take_position()
        self._daily_by_week.setdefault(week, []).append(position)
        self._day_rows = []
        self.state = RollupState.DAY_CLOSED
        return position, refs

    def close_week(self, week: str, month: str) -> tuple[int, RangeSum]:
        """Reserve the weekly total of ``week``, filed under ``month``."""
        self._require(RollupState.DAY_CLOSED, "close a week")
        refs = RangeSum(tuple(self._daily_by_week.pop(week, [])))
        position = self._take_position()
        self._weekly_by_month.setdefault(month, []).append(position)
        self.state = RollupState.WEEK_CLOSED
        return position, refs

    def close_month(self, month: str) -> tuple[int, RangeSum]:
        """Reserve the monthly total of ``month``."""
        if self.state not in (RollupState.DAY_CLOSED, RollupState.WEEK_CLOSED):
            raise RollupStateError(f"Cannot close a month in state {self.state.value}")
        refs = RangeSum(tuple(self._weekly_by_month.pop(month, [])))
        position = self._take_position()
        self._monthly.append(position)
        self.state = RollupState.MONTH_CLOSED
        return position, refs

    def finish(self) -> tuple[int, RangeSum]:
        """Reserve the grand total over every monthly total."""
        if not self._started:
            raise RollupStateError("Cannot finish a report without rows")
        self._require(RollupState.MONTH_CLOSED, "finish")
        if self._daily_by_week or self._weekly_by_month:
            raise RollupStateError(
                f"Unconsumed totals at finish: weeks={self.open_weeks()} months={self.open_months()}"
            )
        refs = RangeSum(tuple(self._monthly))
        position = self._take_position()
        self.state = RollupState.FINISHED
        return position, refs

    def _take_position(self) -> int:
        position = self._next_position
        self._next_position += 1
        return position

    def _require(self, state: RollupState, action: str) -> None:
        if self.state is not state:
            raise RollupStateError(f"Cannot {action} in state {self.state.value}")
