"""
Reliability utilities for calls to third-party services.

Includes a Circuit Breaker guarding the payment gateway and identity provider.
"""

import time
import logging
from typing import Callable, Any

logger = logging.getLogger(__name__)


class CircuitOpenError(Exception):
    pass


class CircuitBreaker:
    """
    Simple Circuit Breaker implementation.
    If 'failure_threshold' consecutive failures occur, the circuit opens
    and rejects calls for 'reset_timeout' seconds.
    
    Exceptions listed in 'ignored_exceptions' pass through without counting
    as failures (e.g. an invalid token is the caller's fault, not the provider's).
    """
    def __init__(self, name: str, failure_threshold: int = 5, reset_timeout: int = 60,
                 ignored_exceptions: tuple = ()):
        self.name = name
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.ignored_exceptions = ignored_exceptions
        self.failures = 0
        self.last_failure_time = 0
        self.state = "CLOSED" # CLOSED, OPEN, HALF_OPEN

    async def call(self, func: Callable, *args, **kwargs) -> Any:
        if self.state == "OPEN":
            if time.time() - self.last_failure_time > self.reset_timeout:
                self.state = "HALF_OPEN"
            else:
                raise CircuitOpenError(f"Circuit '{self.name}' is OPEN")

        try:
            result = await func(*args, **kwargs)
        except self.ignored_exceptions:
            raise
        except Exception:
            self.record_failure()
            raise

        if self.state == "HALF_OPEN" or self.failures:
            self.reset_state()
        return result

    def record_failure(self):
        self.failures += 1
        self.last_failure_time = time.time()
        if self.failures >= self.failure_threshold and self.state != "OPEN":
            self.state = "OPEN"
            logger.error("Circuit '%s' opened after %d failures", self.name, self.failures)

    def reset_state(self):
        self.failures = 0
        self.state = "CLOSED"
