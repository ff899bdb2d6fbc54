"""Test doubles shared across test modules."""

from typing import List


class RecordingSleep:  # pylint: disable=too-few-public-methods
    """Async sleep stand-in that records requested delays."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
