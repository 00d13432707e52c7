"""Async tool executor with timeouts, circuit breaker, and caching.

Wraps calls to external providers (routing, venue lookup) with:
- Hard timeout per call, no retries: a failure is returned to the caller at once
- Per-tool circuit breaker (shared state via registry)
- Response cache with TTL
- Metrics and structured logging
"""

import asyncio
import hashlib
import json
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from dayplanner.config import Settings
from dayplanner.models.common import Provenance

T = TypeVar("T")


# Exception types
class ToolTimeoutError(Exception):
    """Tool execution exceeded timeout."""

    pass


class ToolCircuitOpenError(Exception):
    """Circuit breaker is open for this tool."""

    pass


class ToolExecutionError(Exception):
    """Tool execution failed."""

    pass


@dataclass
class ToolResult(Generic[T]):
    """Wrapper for tool results with provenance metadata."""

    value: T
    provenance: Provenance


@dataclass(frozen=True)
class ToolContext:
    """Context for tool execution with tracing."""

    trace_id: str
    tool_name: str
    source: str = "tool"


@dataclass
class ToolConfig:
    """Configuration for tool execution."""

    hard_timeout_ms: int
    breaker_failure_threshold: int = 5
    breaker_window_seconds: int = 60
    breaker_half_open_seconds: int = 30
    cache_ttl_seconds: int = 0


def routing_tool_config(settings: Settings) -> ToolConfig:
    """Build the executor config for routing calls from settings."""
    return ToolConfig(
        hard_timeout_ms=settings.routing_hard_timeout_ms,
        breaker_failure_threshold=settings.circuit_breaker_failures,
        breaker_window_seconds=settings.circuit_breaker_window_sec,
        breaker_half_open_seconds=settings.circuit_breaker_half_open_sec,
        cache_ttl_seconds=settings.routing_cache_ttl_seconds,
    )


class BreakerState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreaker:
    """Per-tool circuit breaker.

    Tracks failures within a time window and opens after threshold.
    """

    tool_name: str
    failure_threshold: int
    window_seconds: int
    half_open_seconds: int
    state: BreakerState = BreakerState.CLOSED
    failure_times: list[datetime] = field(default_factory=list)
    opened_at: datetime | None = None

    def record_success(self) -> None:
        """Record successful execution."""
        if self.state == BreakerState.HALF_OPEN:
            self.state = BreakerState.CLOSED
            self.failure_times.clear()
            self.opened_at = None

    def record_failure(self, now: datetime) -> None:
        """Record failed execution."""
        cutoff = now - timedelta(seconds=self.window_seconds)
        self.failure_times = [t for t in self.failure_times if t > cutoff]
        self.failure_times.append(now)

        if self.state == BreakerState.HALF_OPEN or len(self.failure_times) >= self.failure_threshold:
            self.state = BreakerState.OPEN
            self.opened_at = now

    def check_and_update_state(self, now: datetime) -> BreakerState:
        """Check if breaker should transition states."""
        if self.state == BreakerState.OPEN:
            if self.opened_at and (now - self.opened_at).total_seconds() >= self.half_open_seconds:
                self.state = BreakerState.HALF_OPEN

        return self.state

    def is_open(self, now: datetime) -> bool:
        """Check if breaker is currently open (rejecting calls)."""
        return self.check_and_update_state(now) == BreakerState.OPEN


class BreakerRegistry:
    """Registry of per-tool circuit breakers with shared state."""

    def __init__(self) -> None:
        self._by_tool: dict[str, CircuitBreaker] = {}

    def get_or_create(
        self,
        tool_name: str,
        failure_threshold: int,
        window_seconds: int,
        half_open_seconds: int,
    ) -> CircuitBreaker:
        """Get existing breaker for tool or create new one with given config."""
        if tool_name not in self._by_tool:
            self._by_tool[tool_name] = CircuitBreaker(
                tool_name=tool_name,
                failure_threshold=failure_threshold,
                window_seconds=window_seconds,
                half_open_seconds=half_open_seconds,
            )
        return self._by_tool[tool_name]

    def clear(self) -> None:
        """Clear all breakers (useful for testing)."""
        self._by_tool.clear()


_global_breaker_registry = BreakerRegistry()


def get_breaker_registry() -> BreakerRegistry:
    """Get the global breaker registry instance."""
    return _global_breaker_registry


@dataclass
class CacheEntry(Generic[T]):
    """Cached tool result with its original fetch time."""

    value: T
    fetched_at: datetime
    cached_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        """Check if cache entry is still valid."""
        return (now - self.cached_at).total_seconds() < self.ttl_seconds


class ToolCache:
    """In-memory cache for tool results."""

    def __init__(self) -> None:
        self._cache: dict[str, CacheEntry[Any]] = {}

    def make_key(self, tool_name: str, payload: BaseModel) -> str:
        """Generate deterministic cache key from payload."""
        data = payload.model_dump(mode="json")
        sorted_json = json.dumps(data, sort_keys=True)
        hash_digest = hashlib.sha256(sorted_json.encode()).hexdigest()
        return f"{tool_name}:{hash_digest}"

    def get(self, key: str, now: datetime) -> CacheEntry[Any] | None:
        """Get cached entry if fresh, None otherwise."""
        entry = self._cache.get(key)
        if entry and entry.is_fresh(now):
            return entry
        elif entry:
            del self._cache[key]
        return None

    def set(
        self, key: str, value: Any, fetched_at: datetime, ttl_seconds: int, now: datetime
    ) -> None:
        """Store value in cache with TTL."""
        self._cache[key] = CacheEntry(
            value=value, fetched_at=fetched_at, cached_at=now, ttl_seconds=ttl_seconds
        )

    def clear(self) -> None:
        """Drop every cached entry."""
        self._cache.clear()


class ToolMetrics:
    """Interface for tool execution metrics (no-op by default)."""

    def record_latency(self, tool: str, outcome: str, latency_ms: float) -> None:
        """Record tool execution latency."""
        pass

    def inc_error(self, tool: str, reason: str) -> None:
        """Increment error counter."""
        pass

    def inc_cache_hit(self, tool: str) -> None:
        """Increment cache hit counter."""
        pass


class ToolLogger:
    """Interface for structured logging (no-op by default)."""

    def log_attempt(
        self,
        ctx: ToolContext,
        attempt: int,
        outcome: str,
        latency_ms: float,
        cache_hit: bool = False,
        error_reason: str | None = None,
    ) -> None:
        """Log tool execution attempt."""
        pass


class ToolExecutor:
    """Generic async tool executor with full error handling."""

    def __init__(
        self,
        metrics: ToolMetrics | None = None,
        logger: ToolLogger | None = None,
        cache: ToolCache | None = None,
    ) -> None:
        """Initialize executor.

        Args:
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
            cache: Cache shared by every call through this executor
        """
        self._metrics = metrics or ToolMetrics()
        self._logger = logger or ToolLogger()
        self._cache = cache or ToolCache()

    async def execute(
        self,
        ctx: ToolContext,
        config: ToolConfig,
        fn: Callable[[Any], Awaitable[T]],
        payload: BaseModel,
        *,
        breaker: CircuitBreaker | None = None,
    ) -> ToolResult[T]:
        """Execute tool with full error handling pipeline.

        A single attempt is made; failures are not retried.

        Args:
            ctx: Tool context with trace_id and tool name
            config: Execution configuration
            fn: Async function to execute
            payload: Tool input payload (also the cache key)
            breaker: Circuit breaker (optional, uses shared registry by default)

        Returns:
            ToolResult[T] wrapping the tool result with Provenance metadata

        Raises:
            ToolTimeoutError: Execution exceeded hard timeout
            ToolCircuitOpenError: Circuit breaker is open
            ToolExecutionError: Other execution failures
        """
        start_time = time.monotonic()

        if breaker is None:
            breaker = get_breaker_registry().get_or_create(
                tool_name=ctx.tool_name,
                failure_threshold=config.breaker_failure_threshold,
                window_seconds=config.breaker_window_seconds,
                half_open_seconds=config.breaker_half_open_seconds,
            )

        # Cached results are served even while the breaker is open
        now = datetime.now(UTC)
        cache_key = self._cache.make_key(ctx.tool_name, payload)
        if config.cache_ttl_seconds > 0:
            cached = self._cache.get(cache_key, now)
            if cached is not None:
                elapsed_ms = (time.monotonic() - start_time) * 1000
                self._metrics.record_latency(ctx.tool_name, "cache_hit", elapsed_ms)
                self._metrics.inc_cache_hit(ctx.tool_name)
                self._logger.log_attempt(ctx, 0, "cache_hit", elapsed_ms, cache_hit=True)
                return ToolResult(
                    value=cached.value,
                    provenance=Provenance(
                        source=ctx.source, fetched_at=cached.fetched_at, cache_hit=True
                    ),
                )

        if breaker.is_open(now):
            elapsed_ms = (time.monotonic() - start_time) * 1000
            self._metrics.record_latency(ctx.tool_name, "breaker_open", elapsed_ms)
            self._metrics.inc_error(ctx.tool_name, "breaker_open")
            self._logger.log_attempt(
                ctx, 0, "breaker_open", elapsed_ms, error_reason="breaker_open"
            )
            raise ToolCircuitOpenError(f"Circuit breaker open for {ctx.tool_name}")

        attempt_start = time.monotonic()
        try:
            result = await asyncio.wait_for(fn(payload), timeout=config.hard_timeout_ms / 1000)
        except TimeoutError as e:
            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            self._metrics.inc_error(ctx.tool_name, "timeout")
            self._logger.log_attempt(ctx, 1, "timeout", elapsed_ms, error_reason="timeout")
            breaker.record_failure(datetime.now(UTC))
            raise ToolTimeoutError(
                f"Tool {ctx.tool_name} timed out after {config.hard_timeout_ms}ms"
            ) from e
        except Exception as e:
            elapsed_ms = (time.monotonic() - attempt_start) * 1000
            self._metrics.inc_error(ctx.tool_name, "execution_error")
            self._logger.log_attempt(
                ctx, 1, "error", elapsed_ms, error_reason=type(e).__name__
            )
            breaker.record_failure(datetime.now(UTC))
            raise ToolExecutionError(f"Tool {ctx.tool_name} failed: {e}") from e

        elapsed_ms = (time.monotonic() - attempt_start) * 1000
        fetched_at = datetime.now(UTC)
        breaker.record_success()
        self._metrics.record_latency(ctx.tool_name, "success", elapsed_ms)
        self._logger.log_attempt(ctx, 1, "success", elapsed_ms)

        if config.cache_ttl_seconds > 0:
            self._cache.set(cache_key, result, fetched_at, config.cache_ttl_seconds, fetched_at)

        return ToolResult(
            value=result,
            provenance=Provenance(source=ctx.source, fetched_at=fetched_at, cache_hit=False),
        )
