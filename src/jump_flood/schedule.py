# src/jump_flood/schedule.py
from __future__ import annotations

from typing import Iterator, Tuple


def initial_step(width: int, height: int) -> int:
    """Largest power of two not exceeding max(width, height) / 2, at least 1."""
    half = max(int(width), int(height), 0) // 2
    if half < 1:
        return 1
    return 1 << (half.bit_length() - 1)


class StepSchedule:
    """
    Jump distances for one run: ``initial_step``, halved each pass, down to 1.

    Iteration is lazy and restartable; every ``iter()`` starts again from the
    top of the schedule.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.first = initial_step(width, height)

    def __iter__(self) -> Iterator[int]:
        step = self.first
        while step >= 1:
            yield step
            step >>= 1

    def __len__(self) -> int:
        return self.first.bit_length()

    def __repr__(self) -> str:
        return f"StepSchedule({self.width}x{self.height}: {tuple(self)})"


def step_sizes(width: int, height: int) -> Tuple[int, ...]:
    return tuple(StepSchedule(width, height))
