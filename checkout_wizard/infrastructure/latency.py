"""Simulated network latency.

Every step call waits a little before answering, to make the demo feel
like it talks to a remote service. The delay is a policy object so
tests can run with none at all.
"""

import asyncio
import random
from typing import Protocol

from checkout_wizard.infrastructure.config import Settings, settings


class LatencyPolicy(Protocol):
    """Delay applied before a step call is answered."""

    async def wait(self) -> None: ...


class UniformLatency:
    """Sleeps a uniformly distributed time between two bounds."""

    def __init__(
        self,
        min_ms: int = 400,
        max_ms: int = 800,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize latency policy.

        Args:
            min_ms: Shortest delay in milliseconds.
            max_ms: Longest delay in milliseconds.
            rng: Random source, seeded in tests.

        Raises:
            ValueError: If the bounds are negative or reversed.
        """
        if min_ms < 0 or max_ms < min_ms:
            raise ValueError(f"Invalid latency bounds: {min_ms}..{max_ms} ms")
        self.min_ms = min_ms
        self.max_ms = max_ms
        self._rng = rng or random.Random()

    def next_delay(self) -> float:
        """Draw the next delay, in seconds."""
        return self._rng.uniform(self.min_ms, self.max_ms) / 1000

    async def wait(self) -> None:
        await asyncio.sleep(self.next_delay())


class NoLatency:
    """Answers immediately."""

    async def wait(self) -> None:
        return None


def latency_from_settings(config: Settings | None = None) -> LatencyPolicy:
    """Build the latency policy described by the settings."""
    config = config or settings
    if not config.simulated_latency_enabled:
        return NoLatency()
    return UniformLatency(min_ms=config.latency_min_ms, max_ms=config.latency_max_ms)
