"""Convex deployment client wrapper (named queries, live subscriptions, mutations)."""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections.abc import Iterator
from typing import Any

from convex import ConvexClient, ConvexError

from .config import SNAPSHOT_CACHE_TTL

logger = logging.getLogger(__name__)


class BackendAPI:
    def __init__(self, deployment_url: str, auth_token: str | None = None):
        self.deployment_url = deployment_url.rstrip("/")
        self.client = ConvexClient(self.deployment_url)
        if auth_token:
            self.client.set_auth(auth_token)
        # Simple in-memory cache: {(hash): (timestamp, data)}
        self._cache: dict[str, tuple[float, Any]] = {}
        self._cache_ttl = SNAPSHOT_CACHE_TTL

    def clear_cache(self) -> None:
        """Reset the in-memory snapshot cache."""
        cache = getattr(self, "_cache", None)
        if isinstance(cache, dict):
            cache.clear()

    def _cache_key(self, function_name: str, args: dict[str, Any] | None) -> str:
        payload = {"function": function_name, "args": args or {}}
        return hashlib.sha256(json.dumps(payload, sort_keys=True, default=str).encode()).hexdigest()

    def subscribe(self, function_name: str, args: dict[str, Any] | None = None) -> Any:
        """Return the current snapshot of a named query.

        Streamlit reruns the page on every interaction, so re-reading the
        snapshot here is what keeps views live. Results are reused for the
        cache TTL to avoid hammering the deployment on widget changes.
        """
        key = self._cache_key(function_name, args)
        now = time.time()
        cached = self._cache.get(key)
        if cached and (now - cached[0]) < self._cache_ttl:
            return cached[1]
        try:
            data = self.client.query(function_name, args or {})
        except ConvexError as exc:
            raise RuntimeError(f"Query {function_name} failed: {exc}") from exc
        logger.debug("Snapshot %s refreshed", function_name)
        self._cache[key] = (now, data)
        return data

    def watch(self, function_name: str, args: dict[str, Any] | None = None) -> Iterator[Any]:
        """Yield every snapshot the deployment pushes for a named query.

        Each snapshot also replaces the cached one, so ``subscribe`` serves it
        on the next rerun. Closing the iterator ends the subscription.
        """
        key = self._cache_key(function_name, args)
        subscription = self.client.subscribe(function_name, args or {})
        try:
            for snapshot in subscription:
                self._cache[key] = (time.time(), snapshot)
                logger.debug("Snapshot %s pushed", function_name)
                yield snapshot
        finally:
            subscription.unsubscribe()

    def submit(self, function_name: str, args: dict[str, Any] | None = None) -> Any:
        """Run a named mutation and drop cached snapshots so the next read is fresh."""
        try:
            result = self.client.mutation(function_name, args or {})
        except ConvexError as exc:
            raise RuntimeError(f"Mutation {function_name} failed: {exc}") from exc
        finally:
            self.clear_cache()
        logger.debug("Mutation %s submitted", function_name)
        return result
