"""Cache invalidation service.

Single place that knows which cached views depend on which entity. Mutation
handlers call one method here instead of scattering cache deletes, so adding
a cached view means updating one fan-out, not every write path.

Fan-out (keys from CacheKeys):
    user      user, user:profile, user:stats, user:progress, friends,
              friends:suggestions, user:{id}:*
    node      node, node:comments, node:quiz, node:stats, node:{id}:*
    path      path, path:{id}:*, user:{uid}:path:{id} (when user given)
    social    friends, friends:suggestions, friends:{id}:*
    discussion  one page, or discussions:page:*
    leaderboard one type, or leaderboard:*
    search      one query, or search:*

Failure semantics:
    Everything runs through the fail-soft store. A failed delete is logged
    and the entry is left to expire by TTL; the mutation response is never
    blocked or failed by invalidation.

Usage:
    from src.core.container import get_cache_invalidation_service

    service = get_cache_invalidation_service()
    await service.on_comment_action(node_id)
"""

import asyncio
from collections.abc import Awaitable, Callable, Iterable

from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.cache.cache_keys import CacheKeys
from src.infrastructure.cache.response_cache import ResponseCache


class CacheInvalidationService:
    """Maps entity mutation events to the cache keys they make stale.

    Dependencies (injected via constructor):
        - ResponseCache: delete and pattern invalidation
        - LoggerProtocol: failure reporting
    """

    def __init__(self, cache: ResponseCache, logger: LoggerProtocol) -> None:
        self._cache = cache
        self._logger = logger
        self._entity_handlers: dict[str, Callable[[str], Awaitable[None]]] = {
            "user": self.on_user_profile_update,
            "node": self.invalidate_node_caches,
            "path": self.invalidate_path_caches,
            "comment": self.on_comment_action,
            "friend": self.invalidate_social_caches,
            "discussion": lambda _id: self.invalidate_discussion_caches(),
            "leaderboard": lambda board: self.invalidate_leaderboard_caches(
                board or None
            ),
            "search": lambda query: self.invalidate_search_caches(query or None),
        }

    async def _run(self, operation: str, *tasks: Awaitable[object]) -> None:
        """Run invalidations concurrently; log failures instead of raising."""
        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            if isinstance(result, Exception):
                self._logger.error(
                    "Cache invalidation step failed",
                    error=result,
                    operation=operation,
                )

    def _delete(self, *keys: str) -> list[Awaitable[None]]:
        return [self._cache.delete(key) for key in keys]

    # -------------------------------------------------------------------------
    # Per-entity invalidation
    # -------------------------------------------------------------------------

    async def invalidate_user_caches(self, user_id: str) -> None:
        await self._run(
            "invalidate_user_caches",
            *self._delete(
                CacheKeys.user(user_id),
                CacheKeys.user_profile(user_id),
                CacheKeys.user_stats(user_id),
                CacheKeys.user_progress(user_id),
                CacheKeys.friends(user_id),
                CacheKeys.friend_suggestions(user_id),
            ),
            self._cache.invalidate_pattern(CacheKeys.user_scope_pattern(user_id)),
        )

    async def invalidate_node_caches(self, node_id: str) -> None:
        await self._run(
            "invalidate_node_caches",
            *self._delete(
                CacheKeys.node(node_id),
                CacheKeys.node_comments(node_id),
                CacheKeys.node_quiz(node_id),
                CacheKeys.node_stats(node_id),
            ),
            self._cache.invalidate_pattern(CacheKeys.node_scope_pattern(node_id)),
        )

    async def invalidate_path_caches(
        self, path_id: str, user_id: str | None = None
    ) -> None:
        """Learning path caches, plus the user's view of it when given."""
        tasks: list[Awaitable[object]] = [
            self._cache.delete(CacheKeys.path(path_id)),
            self._cache.invalidate_pattern(CacheKeys.path_scope_pattern(path_id)),
        ]
        if user_id:
            tasks.append(self._cache.delete(CacheKeys.user_path(user_id, path_id)))
        await self._run("invalidate_path_caches", *tasks)

    async def invalidate_social_caches(self, user_id: str) -> None:
        await self._run(
            "invalidate_social_caches",
            *self._delete(
                CacheKeys.friends(user_id),
                CacheKeys.friend_suggestions(user_id),
            ),
            self._cache.invalidate_pattern(CacheKeys.friends_scope_pattern(user_id)),
        )

    async def invalidate_discussion_caches(self, page: int | None = None) -> None:
        """One discussion page, or every page when ``page`` is None."""
        if page is not None:
            await self._run(
                "invalidate_discussion_caches",
                self._cache.delete(CacheKeys.discussions(page)),
            )
        else:
            await self._run(
                "invalidate_discussion_caches",
                self._cache.invalidate_pattern(CacheKeys.ALL_DISCUSSIONS),
            )

    async def invalidate_leaderboard_caches(
        self, board_type: str | None = None
    ) -> None:
        """One leaderboard type, or all of them when ``board_type`` is None."""
        if board_type:
            await self._run(
                "invalidate_leaderboard_caches",
                self._cache.delete(CacheKeys.leaderboard(board_type)),
            )
        else:
            await self._run(
                "invalidate_leaderboard_caches",
                self._cache.invalidate_pattern(CacheKeys.ALL_LEADERBOARDS),
            )

    async def invalidate_search_caches(self, query: str | None = None) -> None:
        if query:
            await self._run(
                "invalidate_search_caches",
                self._cache.delete(CacheKeys.search(query)),
            )
        else:
            await self._run(
                "invalidate_search_caches",
                self._cache.invalidate_pattern(CacheKeys.ALL_SEARCHES),
            )

    # -------------------------------------------------------------------------
    # Composite event handlers
    # -------------------------------------------------------------------------

    async def on_user_profile_update(self, user_id: str) -> None:
        await self._run(
            "on_user_profile_update",
            self.invalidate_user_caches(user_id),
            self.invalidate_leaderboard_caches(),
            self.invalidate_social_caches(user_id),
        )

    async def on_progress_update(self, user_id: str, node_id: str) -> None:
        """Progress changes user stats, node stats and every leaderboard."""
        await self._run(
            "on_progress_update",
            *self._delete(
                CacheKeys.user_progress(user_id),
                CacheKeys.user_stats(user_id),
                CacheKeys.node_stats(node_id),
            ),
            self.invalidate_leaderboard_caches(),
        )

    async def on_comment_action(self, node_id: str) -> None:
        await self._run(
            "on_comment_action",
            *self._delete(
                CacheKeys.node_comments(node_id),
                CacheKeys.node_stats(node_id),
            ),
        )

    async def on_friend_action(self, user_id_1: str, user_id_2: str) -> None:
        """Friendship changes touch both users' social views and feeds."""
        await self._run(
            "on_friend_action",
            self.invalidate_social_caches(user_id_1),
            self.invalidate_social_caches(user_id_2),
            *(
                self._cache.invalidate_pattern(CacheKeys.activity_feed_pattern(uid))
                for uid in (user_id_1, user_id_2)
            ),
        )

    # -------------------------------------------------------------------------
    # Bulk invalidation
    # -------------------------------------------------------------------------

    async def invalidate_all(self) -> None:
        """Purge every key in the store. Reserved for system-wide migrations."""
        self._logger.warning("Invalidating entire cache")
        await self._run(
            "invalidate_all", self._cache.invalidate_pattern(CacheKeys.EVERYTHING)
        )

    async def invalidate_by_tags(self, tags: Iterable[str]) -> None:
        """Purge keys containing any of the tags as an inner segment."""
        await self._run(
            "invalidate_by_tags",
            *(
                self._cache.invalidate_pattern(CacheKeys.tag_pattern(tag))
                for tag in tags
            ),
        )

    async def invalidate_stale_data(self) -> None:
        """Purge the volatile aggregate views (search, discussions, leaderboards).

        Run periodically by the maintenance endpoint.
        """
        await self._run(
            "invalidate_stale_data",
            self._cache.invalidate_pattern(CacheKeys.ALL_SEARCHES),
            self._cache.invalidate_pattern(CacheKeys.ALL_DISCUSSIONS),
            self._cache.invalidate_pattern(CacheKeys.ALL_LEADERBOARDS),
        )

    async def smart_invalidate(self, entity_type: str, entity_id: str) -> None:
        """Dispatch by entity tag so call sites need not know the fan-out.

        Tags: user, node, path, comment, friend, discussion, leaderboard,
        search. For discussion every page is purged; for leaderboard and
        search an empty ``entity_id`` purges all entries. Unknown tags are
        logged and ignored.
        """
        handler = self._entity_handlers.get(entity_type)
        if handler is None:
            self._logger.warning(
                "Unknown entity type for cache invalidation",
                entity_type=entity_type,
            )
            return
        await handler(entity_id)
