from __future__ import annotations

"""
backend/resilience.py

Circuit breaker simple por key (p.ej. endpoint TMDb "movie" / "collection").

- CLOSED    (normal)
- OPEN      (bloquea temporalmente; el caller falla rápido)
- HALF_OPEN (deja pasar N probes; si ok => CLOSED, si falla => OPEN)

Los reintentos con backoff los hace urllib3.Retry en la Session; aquí solo
decidimos si merece la pena llamar. Thread-safe: varias requests concurrentes
comparten el breaker del cliente TMDb.
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Literal, TypeVar

T = TypeVar("T")

BreakerState = Literal["CLOSED", "OPEN", "HALF_OPEN"]


class CircuitOpenError(RuntimeError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"circuit open for {key!r} ({reason})")
        self.key = key
        self.reason = reason


@dataclass
class CircuitState:
    failures: int = 0
    opened_at: float = 0.0
    state: BreakerState = "CLOSED"
    last_error: str = ""
    probes_inflight: int = 0


class CircuitBreaker:
    def __init__(
        self,
        *,
        failure_threshold: int = 5,
        open_seconds: float = 20.0,
        half_open_max_calls: int = 1,
    ) -> None:
        self._lock = threading.Lock()
        self._states: dict[str, CircuitState] = {}
        self._failure_threshold = max(1, int(failure_threshold))
        self._open_seconds = max(0.1, float(open_seconds))
        self._half_open_max_calls = max(1, int(half_open_max_calls))

    def _state_for(self, key: str) -> CircuitState:
        st = self._states.get(key)
        if st is None:
            st = CircuitState()
            self._states[key] = st
        return st

    def allow(self, key: str) -> tuple[bool, str]:
        """Returns: (allowed, reason)"""
        now = time.monotonic()
        with self._lock:
            st = self._state_for(key)

            if st.state == "CLOSED":
                return True, "closed"

            if st.state == "OPEN":
                if (now - st.opened_at) < self._open_seconds:
                    return False, "open"
                st.state = "HALF_OPEN"
                st.probes_inflight = 0

            if st.probes_inflight >= self._half_open_max_calls:
                return False, "half_open:quota_reached"
            st.probes_inflight += 1
            return True, "half_open:probe"

    def on_success(self, key: str) -> None:
        with self._lock:
            self._states[key] = CircuitState()

    def on_failure(self, key: str, *, error: str) -> None:
        now = time.monotonic()
        with self._lock:
            st = self._state_for(key)
            st.failures += 1
            st.last_error = str(error)[:500]

            # fallo en probe => OPEN directamente
            if st.state == "HALF_OPEN" or st.failures >= self._failure_threshold:
                st.state = "OPEN"
                st.opened_at = now
                st.probes_inflight = 0

    def on_neutral(self, key: str) -> None:
        """La llamada terminó sin veredicto (p.ej. cancelada): libera el probe."""
        with self._lock:
            st = self._states.get(key)
            if st is not None and st.state == "HALF_OPEN" and st.probes_inflight > 0:
                st.probes_inflight -= 1

    def debug_state(self, key: str) -> CircuitState | None:
        with self._lock:
            st = self._states.get(key)
            return None if st is None else replace(st)


def call_guarded(
    *,
    breaker: CircuitBreaker,
    key: str,
    fn: Callable[[], T],
    is_failure: Callable[[BaseException], bool],
) -> T:
    """
    Ejecuta fn() bajo el breaker.

    - circuito abierto -> CircuitOpenError sin llamar a fn
    - excepción con is_failure(exc)=True -> cuenta como fallo y se relanza
    - excepción con is_failure(exc)=False (p.ej. cancelación) -> se relanza sin
      penalizar al endpoint
    """
    allowed, reason = breaker.allow(key)
    if not allowed:
        raise CircuitOpenError(key, reason)

    try:
        out = fn()
    except BaseException as exc:
        if is_failure(exc):
            breaker.on_failure(key, error=repr(exc))
        else:
            breaker.on_neutral(key)
        raise

    breaker.on_success(key)
    return out
