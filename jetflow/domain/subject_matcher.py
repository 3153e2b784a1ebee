"""Subject matcher: a trie of subscription patterns.

Holds (pattern, subscriber) registrations and resolves a literal subject
to every subscriber whose pattern matches it. Two wildcards are supported:

- ``*`` matches exactly one token at its position.
- ``>`` matches one or more trailing tokens and must be the last token.

Match results are memoized in a front-end cache keyed by subject. The
cache is dropped wholesale whenever a registration changes, or when it
grows past ``CACHE_SIZE`` entries, and naturally refills with hot subjects.
"""

from __future__ import annotations

import threading
from typing import Any

from .exceptions import InvalidSubjectError
from .patterns import FULL_WILDCARD, PARTIAL_WILDCARD, TOKEN_SEPARATOR, SubjectPatterns

CACHE_SIZE = 4096


class _Node:
    """One position in the trie."""

    __slots__ = ("children", "pwc", "fwc_subscribers", "subscribers")

    def __init__(self) -> None:
        self.children: dict[str, _Node] = {}
        self.pwc: _Node | None = None
        # Registered for '>' following this node's token.
        self.fwc_subscribers: list[Any] = []
        # Registered for a pattern ending exactly at this node.
        self.subscribers: list[Any] = []

    def is_empty(self) -> bool:
        return not (self.children or self.pwc or self.fwc_subscribers or self.subscribers)


def _discard(subscribers: list[Any], subscriber: Any) -> bool:
    for i, candidate in enumerate(subscribers):
        if candidate is subscriber:
            del subscribers[i]
            return True
    for i, candidate in enumerate(subscribers):
        if candidate == subscriber:
            del subscribers[i]
            return True
    return False


class SubjectMatcher:
    """Thread-safe subscription trie with a match cache.

    Each instance owns its own trie, cache and lock; there is no shared
    module-level matcher.

    Example:
        >>> matcher = SubjectMatcher()
        >>> matcher.insert("orders.*.created", "audit")
        >>> matcher.match("orders.eu.created")
        ('audit',)
    """

    def __init__(self, cache_enabled: bool = True):
        """Initialize an empty matcher.

        Args:
            cache_enabled: Whether match results are memoized.
        """
        self._root = _Node()
        self._count = 0
        self._lock = threading.RLock()
        self._cache: dict[str, tuple[Any, ...]] | None = {} if cache_enabled else None

    # Cache control
    def enable_cache(self) -> None:
        """Turn on the match cache (no-op when already on)."""
        with self._lock:
            if self._cache is None:
                self._cache = {}

    def disable_cache(self) -> None:
        """Turn off the match cache; every match walks the trie."""
        with self._lock:
            self._cache = None

    def clear_cache(self) -> None:
        """Forget every memoized result."""
        with self._lock:
            if self._cache is not None:
                self._cache.clear()

    @property
    def cache_enabled(self) -> bool:
        """Whether match results are being memoized."""
        return self._cache is not None

    def cache_size(self) -> int:
        """Number of memoized subjects."""
        with self._lock:
            return len(self._cache) if self._cache is not None else 0

    # Registration
    def insert(self, pattern: str, subscriber: Any) -> None:
        """Register a subscriber for a pattern.

        Inserting the same pair twice registers it twice; it must then be
        removed twice.

        Raises:
            InvalidSubjectError: If the pattern is empty, has an empty token,
                or has '>' anywhere but the last token.
        """
        reason = SubjectPatterns.pattern_error(pattern)
        if reason is not None:
            raise InvalidSubjectError(pattern, reason)

        tokens = pattern.split(TOKEN_SEPARATOR)
        with self._lock:
            node = self._root
            for token in tokens:
                if token == FULL_WILDCARD:
                    node.fwc_subscribers.append(subscriber)
                    break
                if token == PARTIAL_WILDCARD:
                    if node.pwc is None:
                        node.pwc = _Node()
                    node = node.pwc
                else:
                    child = node.children.get(token)
                    if child is None:
                        child = node.children[token] = _Node()
                    node = child
            else:
                node.subscribers.append(subscriber)

            self._count += 1
            self.clear_cache()

    def remove(self, pattern: str, subscriber: Any) -> None:
        """Remove one registration of a subscriber for a pattern.

        Removing a pattern or subscriber that is not registered is a no-op.
        Nodes left without subscribers or children are pruned back toward
        the root.
        """
        if not pattern:
            return
        tokens = pattern.split(TOKEN_SEPARATOR)

        with self._lock:
            # (parent, token, child) for every step taken
            path: list[tuple[_Node, str, _Node]] = []
            node = self._root
            removed = False
            for i, token in enumerate(tokens):
                if token == FULL_WILDCARD:
                    if i == len(tokens) - 1:
                        removed = _discard(node.fwc_subscribers, subscriber)
                    break
                child = node.pwc if token == PARTIAL_WILDCARD else node.children.get(token)
                if child is None:
                    break
                path.append((node, token, child))
                node = child
            else:
                removed = _discard(node.subscribers, subscriber)

            if not removed:
                return

            self._count -= 1
            self._prune(path)
            self.clear_cache()

    def _prune(self, path: list[tuple[_Node, str, _Node]]) -> None:
        for parent, token, child in reversed(path):
            if not child.is_empty():
                return
            if token == PARTIAL_WILDCARD and parent.pwc is child:
                parent.pwc = None
            else:
                parent.children.pop(token, None)

    # Matching
    def match(self, subject: str) -> tuple[Any, ...]:
        """Return every subscriber whose pattern matches a literal subject.

        Each subscriber appears once even when several of its patterns
        match. The order of the result is unspecified.
        """
        with self._lock:
            if self._cache is not None:
                cached = self._cache.get(subject)
                if cached is not None:
                    return cached

            tokens = subject.split(TOKEN_SEPARATOR)
            found: dict[int, Any] = {}
            self._match_level(self._root, tokens, 0, found)
            result = tuple(found.values())

            if self._cache is not None:
                if len(self._cache) >= CACHE_SIZE:
                    self._cache.clear()
                self._cache[subject] = result
            return result

    def _match_level(self, node: _Node, tokens: list[str], depth: int, found: dict[int, Any]) -> None:
        if depth == len(tokens):
            for subscriber in node.subscribers:
                found.setdefault(id(subscriber), subscriber)
            return

        # '>' needs at least one remaining token, which holds here.
        for subscriber in node.fwc_subscribers:
            found.setdefault(id(subscriber), subscriber)

        if node.pwc is not None:
            self._match_level(node.pwc, tokens, depth + 1, found)
        child = node.children.get(tokens[depth])
        if child is not None:
            self._match_level(child, tokens, depth + 1, found)

    # Introspection
    def count(self) -> int:
        """Number of live (pattern, subscriber) registrations."""
        with self._lock:
            return self._count

    def __len__(self) -> int:
        return self.count()

    def node_count(self) -> int:
        """Number of live trie nodes below the root (diagnostics)."""
        with self._lock:
            return self._count_nodes(self._root)

    def _count_nodes(self, node: _Node) -> int:
        total = 0
        for child in node.children.values():
            total += 1 + self._count_nodes(child)
        if node.pwc is not None:
            total += 1 + self._count_nodes(node.pwc)
        return total
