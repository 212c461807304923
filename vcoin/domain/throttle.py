"""In-memory login throttling with exponential backoff"""

import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Dict, Optional

from vcoin.config import Settings
from vcoin.domain.models import FailedAttempt, ThrottleStats
from vcoin.infrastructure.observability.logging import log_throttle_event
from vcoin.infrastructure.observability.metrics import (
    throttle_delay_histogram,
    throttle_evictions_counter,
    throttle_max_attempts_counter,
    throttle_memory_protection_counter,
    throttle_tracked_gauge,
)


class LoginThrottle:
    """
    Delays repeated failed logins per identifier.

    Delay after the n-th consecutive failure is min(min_delay * 2^(n-1), max_delay).
    Failure counts reset after reset_time of quiet, on success, or on eviction.

    Memory protection:
    - At 80% of max_tracked_identifiers, expired then oldest entries are evicted
    - At max_tracked_identifiers, max_delay is applied without tracking

    State lives in this process only; separate instances do not share counts.
    All times are milliseconds except the clock, which returns seconds.
    """

    MAX_ATTEMPTS = 5  # Attempts before the delay reaches its 2^4 plateau

    def __init__(
        self,
        min_delay: int = 1000,
        max_delay: int = 30000,
        max_tracked_identifiers: int = 10000,
        reset_time: int = 300000,
        cleanup_interval: int = 60000,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.max_tracked_identifiers = max_tracked_identifiers
        self.reset_time = reset_time
        self.cleanup_interval = cleanup_interval
        self.emergency_cleanup_threshold = int(max_tracked_identifiers * 0.8)

        self._clock = clock
        self._sleep = sleep
        self._failed_attempts: Dict[str, FailedAttempt] = {}
        self._lock = threading.Lock()
        self._sweep_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "LoginThrottle":
        """Build a throttle from application settings"""
        return cls(
            min_delay=settings.login_throttle_min_delay,
            max_delay=settings.login_throttle_max_delay,
            max_tracked_identifiers=settings.login_throttle_max_tracked,
            reset_time=settings.login_throttle_reset_time,
            cleanup_interval=settings.login_throttle_cleanup_interval,
            **kwargs,
        )

    def _delay_for(self, attempts: int) -> int:
        return min(self.min_delay * 2 ** (attempts - 1), self.max_delay)

    def _is_expired(self, attempt: FailedAttempt, now: float) -> bool:
        return (now - attempt.timestamp) * 1000 > self.reset_time

    def _remove_expired(self, now: float) -> int:
        expired = [key for key, attempt in self._failed_attempts.items() if self._is_expired(attempt, now)]
        for key in expired:
            del self._failed_attempts[key]
        return len(expired)

    def _emergency_cleanup(self, now: float) -> None:
        """Drop expired entries, then the oldest ones, down to the threshold"""
        cleaned = self._remove_expired(now)

        excess = len(self._failed_attempts) - self.emergency_cleanup_threshold
        if excess > 0:
            oldest = sorted(self._failed_attempts.items(), key=lambda item: item[1].timestamp)
            for key, _ in oldest[:excess]:
                del self._failed_attempts[key]
            cleaned += excess

        throttle_evictions_counter.inc(cleaned)
        logging.warning(
            "Throttle emergency cleanup",
            extra={"removed": cleaned, "tracked": len(self._failed_attempts)},
        )

    async def record_failed_attempt(self, identifier: str) -> int:
        """
        Record a failed login and suspend the caller for the resulting delay.

        Returns:
            The delay applied, in milliseconds
        """
        now = self._clock()

        with self._lock:
            if len(self._failed_attempts) >= self.emergency_cleanup_threshold:
                self._emergency_cleanup(now)

            if len(self._failed_attempts) >= self.max_tracked_identifiers:
                delay = self.max_delay
                attempts = None
            else:
                existing = self._failed_attempts.get(identifier)
                if existing is None or self._is_expired(existing, now):
                    attempts = 1
                else:
                    attempts = existing.attempts + 1

                delay = self._delay_for(attempts)
                self._failed_attempts[identifier] = FailedAttempt(timestamp=now, attempts=attempts)

            throttle_tracked_gauge.set(len(self._failed_attempts))

        if attempts is None:
            throttle_memory_protection_counter.inc()
            logging.warning(
                "Throttle at capacity, applying max delay without tracking",
                extra={"identifier": identifier, "delay_ms": delay},
            )
        else:
            if attempts >= self.MAX_ATTEMPTS:
                throttle_max_attempts_counter.inc()
            log_throttle_event(identifier, attempts, delay)

        throttle_delay_histogram.observe(delay / 1000)
        await self._sleep(delay / 1000)
        return delay

    def record_successful_attempt(self, identifier: str) -> None:
        """Forget failures for an identifier"""
        with self._lock:
            removed = self._failed_attempts.pop(identifier, None)
            throttle_tracked_gauge.set(len(self._failed_attempts))

        if removed is not None:
            logging.info("Cleared failed login attempts", extra={"identifier": identifier})

    def get_current_delay(self, identifier: str) -> int:
        """Delay for the identifier's current attempt count, without recording an attempt"""
        now = self._clock()
        with self._lock:
            existing = self._failed_attempts.get(identifier)
            if existing is None:
                return 0

            if self._is_expired(existing, now):
                del self._failed_attempts[identifier]
                return 0

            return self._delay_for(existing.attempts)

    def cleanup(self) -> int:
        """Remove entries past the reset window; returns how many were removed"""
        with self._lock:
            cleaned = self._remove_expired(self._clock())
            throttle_tracked_gauge.set(len(self._failed_attempts))

        if cleaned:
            logging.info("Cleaned up expired failed attempts", extra={"removed": cleaned})
        return cleaned

    def get_stats(self) -> ThrottleStats:
        with self._lock:
            timestamps = [attempt.timestamp for attempt in self._failed_attempts.values()]
            now = self._clock()

        if self.max_tracked_identifiers:
            usage = len(timestamps) / self.max_tracked_identifiers * 100
        else:
            usage = 100.0
        return ThrottleStats(
            total_tracked=len(timestamps),
            oldest_age_ms=int((now - min(timestamps)) * 1000) if timestamps else None,
            memory_usage_percent=round(usage, 2),
            is_near_capacity=len(timestamps) >= self.emergency_cleanup_threshold,
        )

    def start(self) -> None:
        """Start the periodic sweep on the running event loop"""
        if self._sweep_task is not None and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep())
        logging.info(
            "Login throttling started",
            extra={
                "min_delay_ms": self.min_delay,
                "max_delay_ms": self.max_delay,
                "max_tracked": self.max_tracked_identifiers,
                "reset_time_ms": self.reset_time,
                "cleanup_interval_ms": self.cleanup_interval,
            },
        )

    async def stop(self) -> None:
        """Cancel the periodic sweep and wait for it to finish"""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweep(self) -> None:
        while True:
            await asyncio.sleep(self.cleanup_interval / 1000)
            self.cleanup()
