# Copyright (c) 2026 Firefly Software Solutions Inc.
# Licensed under the Apache License, Version 2.0

"""
Function result caching.

FunctionCacher wraps functions so that repeated calls with the same
cache-relevant arguments return the stored result instead of calling again.
It is meant for process-lifetime memoization of small key spaces (schema ids,
subject names). There is no expiry and no size bound.

Example:
    >>> cacher = FunctionCacher()
    >>> cached_get = cacher.wrap(client.get_schema_by_id, [True])
    >>> cached_get(1)  # calls the registry
    >>> cached_get(1)  # served from the cache
"""

from __future__ import annotations

import enum
import functools
import hashlib
import inspect
import json
import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

KEY_SEPARATOR = "__"


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise TypeError(f"Cannot build a cache key from {type(value).__name__}")


def key_segment(value: Any) -> str:
    """
    Turn one argument into a cache key segment.

    Strings and numbers are used as they are. Everything else is reduced to
    a SHA-1 digest of its canonical JSON form.
    """
    if isinstance(value, enum.Enum):
        value = value.value
    if isinstance(value, (str, int, float)) and not isinstance(value, bool):
        return f"{value}"
    serialized = json.dumps(value, sort_keys=True, default=_to_jsonable)
    return hashlib.sha1(serialized.encode("utf-8")).hexdigest()


class FunctionCacher:
    """
    Caching wrapper factory for functions.

    All functions wrapped by one cacher share a single store, which can be
    evicted entry by entry or as a whole with clear().

    Only successful results are stored. A call that raises evicts its key
    so the next call goes to the wrapped function again, and a result of
    None is never stored. Concurrent misses for the same key are not merged;
    each one calls the wrapped function.
    """

    def __init__(self) -> None:
        self._cache: dict[str, Any] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def clear(self, key: str | None = None) -> None:
        """
        Clear all cached values or a single cached value.

        Args:
            key: Key to remove. If omitted the complete cache is evicted.
        """
        with self._lock:
            if key is None:
                self._cache.clear()
            else:
                self._cache.pop(key, None)

    def wrap(self, fn: F, use_arguments: Sequence[bool]) -> F:
        """
        Create a caching proxy for a function.

        Arguments are bound against the signature of ``fn`` (defaults
        applied), so positional and keyword calls produce the same key. Bound
        methods keep their instance, there is no separate context argument.

        Args:
            fn: The function to wrap. Coroutine functions are supported.
            use_arguments: One flag per parameter of ``fn``; parameters whose
                flag is True become part of the cache key.

        Returns:
            Function with the same signature as ``fn``. Its ``cache_key``
            attribute computes the key a call would use.
        """
        signature = inspect.signature(fn)
        mask = list(use_arguments)

        def select(*args: Any, **kwargs: Any) -> list[Any]:
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            return [value for value, use in zip(bound.arguments.values(), mask) if use]

        return self._wrap(fn, select)

    def cached(self, key: Callable[..., Any]) -> Callable[[F], F]:
        """
        Decorator form of wrap() with an explicit key selector.

        ``key`` is called with the same arguments as the decorated function
        and returns the value (or tuple of values) identifying the call.

        Example:
            >>> @cacher.cached(key=lambda subject, schema, *rest: (subject, schema))
            ... def check(subject, schema, schema_type=None):
            ...     ...
        """

        def select(*args: Any, **kwargs: Any) -> list[Any]:
            selected = key(*args, **kwargs)
            return list(selected) if isinstance(selected, tuple) else [selected]

        def decorator(fn: F) -> F:
            return self._wrap(fn, select)

        return decorator

    def _wrap(self, fn: F, select: Callable[..., list[Any]]) -> F:
        name = getattr(fn, "__name__", type(fn).__name__)

        def cache_key(*args: Any, **kwargs: Any) -> str:
            segments = [key_segment(value) for value in select(*args, **kwargs)]
            return f"{name}{KEY_SEPARATOR}{KEY_SEPARATOR.join(segments)}"

        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                key = cache_key(*args, **kwargs)
                hit, value = self._lookup(key)
                if hit:
                    return value
                try:
                    result = await fn(*args, **kwargs)
                except BaseException:
                    self._evict(key)
                    raise
                self._store(key, result)
                return result

            async_wrapper.cache_key = cache_key  # type: ignore[attr-defined]
            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = cache_key(*args, **kwargs)
            hit, value = self._lookup(key)
            if hit:
                return value
            try:
                result = fn(*args, **kwargs)
            except BaseException:
                self._evict(key)
                raise
            self._store(key, result)
            return result

        wrapper.cache_key = cache_key  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    def _lookup(self, key: str) -> tuple[bool, Any]:
        with self._lock:
            if key in self._cache:
                logger.debug("cache hit for %s", key)
                return True, self._cache[key]
        logger.debug("cache miss for %s", key)
        return False, None

    def _store(self, key: str, result: Any) -> None:
        if result is None:
            return
        with self._lock:
            self._cache[key] = result

    def _evict(self, key: str) -> None:
        with self._lock:
            if self._cache.pop(key, None) is not None:
                logger.debug("evicted %s after failed call", key)
