"""
Sliding-window rate limiter.

State lives in process memory: one bucket per (caller identity, action class)
holding recent request timestamps and an optional block expiry. Buckets sit in
a cachetools TTLCache so idle callers are evicted once nothing they hold can
still matter.
"""

import hashlib
import math
import re
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, Iterable, Optional, Tuple

import logfire
from cachetools import TTLCache

from pipeline.models.core import ActionClass, RateDecision, RateLimitPolicy, RateLimitReason


Clock = Callable[[], float]

_IPV4_WITH_PORT = re.compile(r"^(\d{1,3}(?:\.\d{1,3}){3}):\d+$")
_BRACKETED_IPV6 = re.compile(r"^\[([^\]]+)\](?::\d+)?$")


@dataclass
class _Bucket:
    timestamps: Deque[float] = field(default_factory=deque)
    blocked_until: Optional[float] = None
    lock: threading.Lock = field(default_factory=threading.Lock)


class RateLimiter:
    """
    Per-caller, per-action admission control.

    Each bucket has its own lock; the registry lock is only held while a
    bucket is looked up or created, so unrelated callers never contend.
    """

    def __init__(
        self,
        policies: Dict[ActionClass, RateLimitPolicy],
        clock: Clock = time.time,
        max_buckets: int = 10_000,
    ):
        """
        Args:
            policies: Policy per action class. Must include GENERAL, used as fallback.
            clock: Returns the current time in epoch seconds
            max_buckets: Upper bound on tracked buckets
        """
        if ActionClass.GENERAL not in policies:
            raise ValueError("A policy for the 'general' action class is required")

        self.policies = dict(policies)
        self.clock = clock

        # An idle bucket is irrelevant once its longest window or block has passed
        ttl = max(max(p.window, p.block_duration) for p in self.policies.values())
        self._buckets: TTLCache = TTLCache(maxsize=max_buckets, ttl=ttl, timer=clock)
        self._registry_lock = threading.Lock()

    def _resolve_action(self, action) -> ActionClass:
        try:
            action = ActionClass(action)
        except ValueError:
            return ActionClass.GENERAL
        return action if action in self.policies else ActionClass.GENERAL

    def _bucket(self, identity: str, action: ActionClass) -> _Bucket:
        key = (identity, action)
        with self._registry_lock:
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = _Bucket()
            # Re-assigning refreshes the entry's TTL
            self._buckets[key] = bucket
            return bucket

    def _existing_buckets(self, identity: str, action=None) -> Iterable[Tuple[ActionClass, _Bucket]]:
        actions = [self._resolve_action(action)] if action is not None else list(self.policies)
        with self._registry_lock:
            found = [(a, self._buckets.get((identity, a))) for a in actions]
        return [(a, b) for a, b in found if b is not None]

    @staticmethod
    def _prune(bucket: _Bucket, now: float, window: int) -> None:
        window_start = now - window
        while bucket.timestamps and bucket.timestamps[0] <= window_start:
            bucket.timestamps.popleft()

    def check(self, identity: str, action=ActionClass.GENERAL) -> RateDecision:
        """
        Admit or deny one request, recording it when admitted.

        Args:
            identity: Caller identity (see caller_identity)
            action: Action class; unknown values use the general policy

        Returns:
            RateDecision
        """
        action = self._resolve_action(action)
        policy = self.policies[action]
        bucket = self._bucket(identity, action)

        with bucket.lock:
            now = self.clock()

            if bucket.blocked_until is not None:
                if bucket.blocked_until > now:
                    return RateDecision(
                        allowed=False,
                        reason=RateLimitReason.BLOCKED,
                        retry_after=max(1, math.ceil(bucket.blocked_until - now)),
                        remaining=0,
                        limit=policy.requests,
                        reset_at=math.ceil(bucket.blocked_until),
                    )
                bucket.blocked_until = None

            self._prune(bucket, now, policy.window)
            count = len(bucket.timestamps)

            if count >= policy.requests:
                bucket.blocked_until = now + policy.block_duration
                logfire.warning(
                    "Rate limit exceeded, caller blocked",
                    caller=identity,
                    action=action.value,
                    limit=policy.requests,
                    block_duration=policy.block_duration
                )
                return RateDecision(
                    allowed=False,
                    reason=RateLimitReason.LIMIT_EXCEEDED,
                    retry_after=policy.block_duration,
                    remaining=0,
                    limit=policy.requests,
                    reset_at=int(now + policy.window),
                )

            bucket.timestamps.append(now)
            return RateDecision(
                allowed=True,
                reason=RateLimitReason.OK,
                retry_after=0,
                remaining=policy.requests - count - 1,
                limit=policy.requests,
                reset_at=int(bucket.timestamps[0] + policy.window),
            )

    def record(self, identity: str, action=ActionClass.GENERAL) -> None:
        """Record an attempt without an admission decision."""
        action = self._resolve_action(action)
        policy = self.policies[action]
        bucket = self._bucket(identity, action)

        with bucket.lock:
            now = self.clock()
            bucket.timestamps.append(now)
            self._prune(bucket, now, policy.window)

    def block(self, identity: str, duration: int = 300, action=None) -> None:
        """Block a caller for duration seconds, for one action class or all of them."""
        actions = [self._resolve_action(action)] if action is not None else list(self.policies)
        for target in actions:
            bucket = self._bucket(identity, target)
            with bucket.lock:
                bucket.blocked_until = self.clock() + duration

        logfire.info("Caller blocked manually", caller=identity, duration=duration)

    def unblock(self, identity: str, action=None) -> None:
        for _, bucket in self._existing_buckets(identity, action):
            with bucket.lock:
                bucket.blocked_until = None

    def is_blocked(self, identity: str, action=None) -> bool:
        blocked = False
        for _, bucket in self._existing_buckets(identity, action):
            with bucket.lock:
                if bucket.blocked_until is None:
                    continue
                if bucket.blocked_until <= self.clock():
                    bucket.blocked_until = None
                    continue
                blocked = True
        return blocked

    def stats(self, identity: str, action=ActionClass.GENERAL) -> Dict[str, object]:
        """
        Usage snapshot for one bucket.

        Returns:
            Dict with recent_attempts, limit, is_blocked, block_expires,
            first_attempt and last_attempt (epoch seconds or None)
        """
        action = self._resolve_action(action)
        policy = self.policies[action]
        buckets = dict(self._existing_buckets(identity, action))
        bucket = buckets.get(action)

        if bucket is None:
            return {
                "recent_attempts": 0,
                "limit": policy.requests,
                "is_blocked": False,
                "block_expires": None,
                "first_attempt": None,
                "last_attempt": None,
            }

        with bucket.lock:
            now = self.clock()
            self._prune(bucket, now, policy.window)
            blocked_until = bucket.blocked_until if bucket.blocked_until and bucket.blocked_until > now else None
            return {
                "recent_attempts": len(bucket.timestamps),
                "limit": policy.requests,
                "is_blocked": blocked_until is not None,
                "block_expires": math.ceil(blocked_until) if blocked_until else None,
                "first_attempt": bucket.timestamps[0] if bucket.timestamps else None,
                "last_attempt": bucket.timestamps[-1] if bucket.timestamps else None,
            }

    def clear(self) -> None:
        """Drop every bucket and block."""
        with self._registry_lock:
            self._buckets.clear()

    def __len__(self) -> int:
        with self._registry_lock:
            self._buckets.expire()
            return len(self._buckets)


def strip_port(address: str) -> str:
    """Remove a trailing port from an IPv4 or bracketed IPv6 address."""
    address = address.strip()
    match = _IPV4_WITH_PORT.match(address) or _BRACKETED_IPV6.match(address)
    return match.group(1) if match else address


def caller_identity(
    remote_addr: Optional[str],
    user_agent: Optional[str],
    forwarded_for: Optional[str] = None,
    real_ip: Optional[str] = None,
    trust_forwarded: bool = False,
) -> str:
    """
    Derive the rate-limit key for a caller.

    sha256 of the network origin plus an 8-character md5 fingerprint of the
    user agent. Forwarding headers are only honored when
    trust_forwarded is set.
    """
    origin = None
    if trust_forwarded:
        if forwarded_for:
            origin = forwarded_for.split(",")[0].strip() or None
        if not origin and real_ip:
            origin = real_ip.strip() or None
    origin = strip_port(origin or remote_addr or "unknown")

    agent_fingerprint = hashlib.md5((user_agent or "").encode("utf-8")).hexdigest()[:8]
    return hashlib.sha256((origin + agent_fingerprint).encode("utf-8")).hexdigest()


def rate_limit_headers(decision: RateDecision) -> Dict[str, str]:
    """HTTP headers describing a rate-limit decision."""
    headers = {
        "X-RateLimit-Limit": str(decision.limit),
        "X-RateLimit-Remaining": str(decision.remaining),
        "X-RateLimit-Reset": str(decision.reset_at),
    }
    if decision.retry_after > 0:
        headers["Retry-After"] = str(decision.retry_after)
    return headers
