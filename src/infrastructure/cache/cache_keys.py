"""Cache key construction utilities.

Every cache key is built here so the code that writes an entry and the code
that invalidates it can never drift apart. Keys are colon-separated with the
namespace first: ``{namespace}:{resource}:{id}``.

Usage:
    from src.infrastructure.cache.cache_keys import CacheKeys, CacheTTL

    key = CacheKeys.node_comments(node_id)  # "node:comments:{node_id}"
    await response_cache.set(key, comments, CacheTTL.MEDIUM)
"""

import hashlib
import json
from collections.abc import Iterable, Mapping
from enum import IntEnum
from typing import Any
from urllib.parse import urlencode

_GLOB_SPECIAL = frozenset("\\*?[]")


class CacheTTL(IntEnum):
    """Named TTL tiers in seconds.

    Pick a tier by how volatile the data is, never an ad-hoc number.
    """

    SHORT = 60
    MEDIUM = 300
    LONG = 3600
    DAY = 86400
    WEEK = 604800


def escape_glob(value: str) -> str:
    r"""Backslash-escape glob metacharacters (Redis MATCH syntax).

    Example:
        >>> escape_glob("a*b")
        'a\\*b'
    """
    return "".join("\\" + char if char in _GLOB_SPECIAL else char for char in value)


class CacheKeys:
    """Centralized cache key construction.

    All methods are pure: equal inputs always give the identical string.

    Example:
        >>> CacheKeys.user_path("u1", "p9")
        'user:u1:path:p9'
    """

    # User
    @staticmethod
    def user(user_id: str) -> str:
        """Pattern: user:{user_id}"""
        return f"user:{user_id}"

    @staticmethod
    def user_profile(user_id: str) -> str:
        """Pattern: user:profile:{user_id}"""
        return f"user:profile:{user_id}"

    @staticmethod
    def user_stats(user_id: str) -> str:
        """Pattern: user:stats:{user_id}"""
        return f"user:stats:{user_id}"

    @staticmethod
    def user_progress(user_id: str) -> str:
        """Pattern: user:progress:{user_id}"""
        return f"user:progress:{user_id}"

    # Node
    @staticmethod
    def node(node_id: str) -> str:
        """Pattern: node:{node_id}"""
        return f"node:{node_id}"

    @staticmethod
    def node_comments(node_id: str) -> str:
        """Pattern: node:comments:{node_id}"""
        return f"node:comments:{node_id}"

    @staticmethod
    def node_quiz(node_id: str) -> str:
        """Pattern: node:quiz:{node_id}"""
        return f"node:quiz:{node_id}"

    @staticmethod
    def node_stats(node_id: str) -> str:
        """Pattern: node:stats:{node_id}"""
        return f"node:stats:{node_id}"

    # Learning path
    @staticmethod
    def path(path_id: str) -> str:
        """Pattern: path:{path_id}"""
        return f"path:{path_id}"

    @staticmethod
    def user_path(user_id: str, path_id: str) -> str:
        """Pattern: user:{user_id}:path:{path_id}"""
        return f"user:{user_id}:path:{path_id}"

    # Social
    @staticmethod
    def friends(user_id: str) -> str:
        """Pattern: friends:{user_id}"""
        return f"friends:{user_id}"

    @staticmethod
    def friend_suggestions(user_id: str) -> str:
        """Pattern: friends:suggestions:{user_id}"""
        return f"friends:suggestions:{user_id}"

    @staticmethod
    def activity_feed(user_id: str, page: int = 1) -> str:
        """Pattern: activity-feed:{user_id}:{page}"""
        return f"activity-feed:{user_id}:{page}"

    @staticmethod
    def discussions(page: int) -> str:
        """Pattern: discussions:page:{page}"""
        return f"discussions:page:{page}"

    # Sessions, leaderboards, search
    @staticmethod
    def session(session_id: str) -> str:
        """Pattern: session:{session_id}"""
        return f"session:{session_id}"

    @staticmethod
    def session_data(session_id: str) -> str:
        """Pattern: session-data:{sha256(session_id)}

        Cached view of a session's data. The id is hashed because the key is
        echoed in X-Cache-Key and the cookie is HttpOnly. Kept out of the
        ``session:`` namespace, which holds only records.
        """
        digest = hashlib.sha256(session_id.encode()).hexdigest()
        return f"session-data:{digest}"

    @staticmethod
    def leaderboard(board_type: str) -> str:
        """Pattern: leaderboard:{board_type} (e.g. "weekly")"""
        return f"leaderboard:{board_type}"

    @staticmethod
    def search(query: str) -> str:
        """Pattern: search:{query}"""
        return f"search:{query}"

    @staticmethod
    def request(
        path: str,
        query_params: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> str:
        """Response cache key for an HTTP GET.

        Query parameters are sorted by name so parameter order never splits
        the cache, then percent-encoded so a value containing ``&`` or ``=``
        cannot pass for extra parameters.

        Args:
            path: URL path (no query string).
            query_params: Query parameters as a mapping or (name, value) pairs.

        Returns:
            Key like "api:/api/v1/nodes:limit=10&page=2".
        """
        items = (
            query_params.items() if isinstance(query_params, Mapping) else query_params
        )
        query = urlencode(sorted(items, key=lambda kv: kv[0]))
        return f"api:{path}:{query}"

    @staticmethod
    def method(
        owner: str,
        name: str,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any] | None = None,
    ) -> str:
        """Memoization key for a cached coroutine function.

        Pattern: method:{owner}:{name}:{json arguments}
        """
        payload: list[Any] = list(args)
        if kwargs:
            payload.append(dict(sorted(kwargs.items())))
        encoded = json.dumps(payload, default=str, separators=(",", ":"))
        return f"method:{owner}:{name}:{encoded}"

    # Glob patterns used for bulk invalidation. Ids are escaped so an id
    # containing glob syntax only ever matches itself.
    @staticmethod
    def user_scope_pattern(user_id: str) -> str:
        """Pattern: user:{user_id}:* (per-user nested keys)"""
        return f"user:{escape_glob(user_id)}:*"

    @staticmethod
    def node_scope_pattern(node_id: str) -> str:
        """Pattern: node:{node_id}:*"""
        return f"node:{escape_glob(node_id)}:*"

    @staticmethod
    def path_scope_pattern(path_id: str) -> str:
        """Pattern: path:{path_id}:*"""
        return f"path:{escape_glob(path_id)}:*"

    @staticmethod
    def friends_scope_pattern(user_id: str) -> str:
        """Pattern: friends:{user_id}:*"""
        return f"friends:{escape_glob(user_id)}:*"

    @staticmethod
    def activity_feed_pattern(user_id: str) -> str:
        """Pattern: activity-feed:{user_id}:*"""
        return f"activity-feed:{escape_glob(user_id)}:*"

    @staticmethod
    def tag_pattern(tag: str) -> str:
        """Pattern: *:{tag}:* (any key with the tag as an inner segment)"""
        return f"*:{escape_glob(tag)}:*"

    ALL_DISCUSSIONS = "discussions:page:*"
    ALL_LEADERBOARDS = "leaderboard:*"
    ALL_SEARCHES = "search:*"
    ALL_SESSIONS = "session:*"
    EVERYTHING = "*"


def namespace_from_key(key: str) -> str:
    """First segment of a key, used as low-cardinality log context.

    Example:
        >>> namespace_from_key("node:comments:n1")
        'node'
    """
    return key.split(":", 1)[0] if key else "unknown"
