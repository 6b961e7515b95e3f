"""Window counter rate limiter implementing RateLimitProtocol.

One integer counter per (policy, identity) at ``ratelimit:{policy}:{identity}``:

    count = INCRBY key 1
    if count == 1: EXPIRE key window        # first hit opens the window
    elif TTL key is missing: EXPIRE key window   # crash between INCR and EXPIRE
    allowed = count <= max_requests

The atomic increment is the only cross-process coordination needed, so any
number of workers can share the store without locks.

Fail-Open Design:
    Limiter disabled, unknown policy, or store failure: the request is
    allowed with an unenforced decision (no headers). Availability wins over
    strict quota enforcement.

Architecture:
    Domain Protocol <- WindowCounterRateLimiter -> KeyValueStore -> adapter
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import TYPE_CHECKING

from src.domain.value_objects.rate_limit_policy import (
    RateLimitDecision,
    RateLimitPolicy,
)
from src.infrastructure.rate_limit.policies import RATE_LIMIT_POLICIES

if TYPE_CHECKING:
    from src.domain.protocols.logger_protocol import LoggerProtocol
    from src.infrastructure.cache.key_value_store import KeyValueStore


class WindowCounterRateLimiter:
    """Rate limiter over the fail-soft key-value store.

    Args:
        store: Shared key-value store.
        logger: Structured logger.
        policies: Policy registry (defaults to RATE_LIMIT_POLICIES).
        enabled: False turns every check into an unenforced allow.
    """

    def __init__(
        self,
        *,
        store: KeyValueStore,
        logger: LoggerProtocol,
        policies: Mapping[str, RateLimitPolicy] = RATE_LIMIT_POLICIES,
        enabled: bool = True,
    ) -> None:
        self._store = store
        self._logger = logger
        self._policies = policies
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_policy(self, name: str) -> RateLimitPolicy | None:
        return self._policies.get(name)

    @staticmethod
    def build_key(policy_name: str, identity: str) -> str:
        """Counter key: ratelimit:{policy}:{identity}"""
        return f"ratelimit:{policy_name}:{identity}"

    # -------------------------------------------------------------------------
    # RateLimitProtocol implementation
    # -------------------------------------------------------------------------
    async def check(self, policy_name: str, identity: str) -> RateLimitDecision:
        """Count one request for (policy, identity) and decide.

        Args:
            policy_name: Registered policy name.
            identity: Resolved client identity.

        Returns:
            RateLimitDecision. Never raises.
        """
        if not self._enabled:
            return RateLimitDecision.unenforced()

        policy = self._policies.get(policy_name)
        if policy is None:
            self._logger.warning(
                "Unknown rate limit policy - allowing request",
                policy=policy_name,
            )
            return RateLimitDecision.unenforced()

        key = self.build_key(policy.name, identity)
        count = await self._store.incr_by(key, 1)
        if count <= 0:
            # Store failure, already logged by the store
            self._logger.debug(
                "Rate limit store unavailable - allowing request",
                policy=policy.name,
            )
            return RateLimitDecision.unenforced()

        now_ms = int(time.time() * 1000)
        if count == 1:
            await self._store.expire(key, policy.window_seconds)
            ttl_seconds = policy.window_seconds
        else:
            ttl = await self._store.ttl(key)
            if ttl is None:
                await self._store.expire(key, policy.window_seconds)
                ttl_seconds = policy.window_seconds
            else:
                ttl_seconds = ttl

        decision = RateLimitDecision(
            allowed=count <= policy.max_requests,
            limit=policy.max_requests,
            remaining=max(0, policy.max_requests - count),
            reset_at=now_ms + ttl_seconds * 1000,
        )

        if not decision.allowed:
            self._logger.info(
                "Rate limit exceeded",
                policy=policy.name,
                identity=identity,
                count=count,
                limit=policy.max_requests,
            )
        return decision

    async def reset(self, policy_name: str, identity: str) -> bool:
        """Delete the counter for (policy, identity) (manual reset).

        Returns:
            bool: True if a counter existed and was removed.
        """
        deleted = await self._store.delete(self.build_key(policy_name, identity))
        self._logger.info(
            "Rate limit reset",
            policy=policy_name,
            identity=identity,
            deleted=deleted > 0,
        )
        return deleted > 0
