"""Circuit breaker for live price/rate sources.

Tracks success/failure of provider calls and opens the circuit (skips the
live call entirely) after consecutive failures, so a dead endpoint costs one
timeout per cooldown window rather than one per conversion. The circuit
auto-resets after ``open_duration`` seconds.
"""

import time
from collections import deque
from dataclasses import dataclass, field


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker behavior."""

    failure_threshold: int = 3
    """Consecutive failures required to open the circuit."""

    open_duration: float = 300.0
    """Seconds to keep the circuit open before allowing retries."""

    history_size: int = 20
    """Rolling window of call outcomes to retain."""


@dataclass
class _SourceState:
    outcomes: deque
    consecutive_failures: int = 0
    open_until: float = 0.0
    durations: deque = field(default_factory=lambda: deque(maxlen=20))


class CircuitBreaker:
    """Per-source failure tracking for rate and price endpoints.

    Usage::

        breaker = CircuitBreaker()
        if breaker.is_available("live"):
            try:
                rates = fetch_rates("USD")
                breaker.record("live", success=True, duration=0.2)
            except ProviderError:
                breaker.record("live", success=False)
        else:
            # Circuit is open, use the static table
            ...
    """

    def __init__(self, config: CircuitBreakerConfig | None = None, clock=time.monotonic):
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._sources: dict[str, _SourceState] = {}

    def _state(self, source: str) -> _SourceState:
        if source not in self._sources:
            self._sources[source] = _SourceState(outcomes=deque(maxlen=self.config.history_size))
        return self._sources[source]

    def record(self, source: str, *, success: bool, duration: float = 0.0) -> None:
        """Record a call outcome for *source*."""
        state = self._state(source)
        state.outcomes.append(success)
        if success:
            state.consecutive_failures = 0
            state.durations.append(duration)
            return
        state.consecutive_failures += 1
        if state.consecutive_failures >= self.config.failure_threshold:
            state.open_until = self._clock() + self.config.open_duration

    def is_available(self, source: str) -> bool:
        """True unless *source* failed too often within the cooldown window."""
        state = self._sources.get(source)
        return state is None or self._clock() >= state.open_until

    def reset(self, source: str) -> None:
        """Manually close the circuit for *source*."""
        state = self._sources.get(source)
        if state is not None:
            state.open_until = 0.0
            state.consecutive_failures = 0

    def get_status(self) -> dict[str, dict]:
        """Return debug info about all tracked sources."""
        now = self._clock()
        status: dict[str, dict] = {}
        for source, state in self._sources.items():
            successes = sum(1 for ok in state.outcomes if ok)
            status[source] = {
                "total_calls": len(state.outcomes),
                "successes": successes,
                "failures": len(state.outcomes) - successes,
                "consecutive_failures": state.consecutive_failures,
                "circuit_open": now < state.open_until,
                "reopens_in": max(0.0, state.open_until - now),
                "avg_duration": sum(state.durations) / len(state.durations) if state.durations else None,
            }
        return status
