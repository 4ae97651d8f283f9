"""
Deterministic id generation for the OS Concepts Simulator.

Ids are handed out by an injected generator so that engine output is
reproducible across runs.
"""

import itertools


class SequentialIdGenerator:
    """
    Monotonic counter producing ids like "block-1", "block-2", ...

    Attributes:
        prefix: Text placed before the counter value
    """

    def __init__(self, prefix: str, start: int = 1):
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._counter)}"
