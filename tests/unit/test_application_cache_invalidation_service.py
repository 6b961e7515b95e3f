"""Unit tests for CacheInvalidationService.

Tests verify the fan-out from entity mutations to cache keys against a real
in-memory cache, plus failure isolation with a mocked cache.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.application.services.cache_invalidation_service import (
    CacheInvalidationService,
)
from src.infrastructure.cache.cache_keys import CacheKeys


@pytest.fixture
def service(response_cache, mock_logger):
    return CacheInvalidationService(response_cache, mock_logger)


async def _seed(cache, *keys):
    for key in keys:
        await cache.set(key, {"cached": key})


async def _alive(cache, *keys):
    return {key for key in keys if await cache.get(key) is not None}


@pytest.mark.unit
class TestEntityInvalidation:
    """Test per-entity fan-out."""

    @pytest.mark.asyncio
    async def test_user_caches(self, service, response_cache):
        stale = [
            CacheKeys.user("1"),
            CacheKeys.user_profile("1"),
            CacheKeys.user_stats("1"),
            CacheKeys.user_progress("1"),
            CacheKeys.friends("1"),
            CacheKeys.friend_suggestions("1"),
            CacheKeys.user_path("1", "p1"),
        ]
        untouched = [CacheKeys.user_profile("2"), CacheKeys.user_path("2", "p1")]
        await _seed(response_cache, *stale, *untouched)

        await service.invalidate_user_caches("1")

        assert await _alive(response_cache, *stale) == set()
        assert await _alive(response_cache, *untouched) == set(untouched)

    @pytest.mark.asyncio
    async def test_node_caches(self, service, response_cache):
        stale = [
            CacheKeys.node("n1"),
            CacheKeys.node_comments("n1"),
            CacheKeys.node_quiz("n1"),
            CacheKeys.node_stats("n1"),
            "node:n1:attachments",
        ]
        await _seed(response_cache, *stale, CacheKeys.node("n2"))

        await service.invalidate_node_caches("n1")

        assert await _alive(response_cache, *stale) == set()
        assert await response_cache.get(CacheKeys.node("n2")) is not None

    @pytest.mark.asyncio
    async def test_path_caches_with_user(self, service, response_cache):
        stale = [
            CacheKeys.path("p1"),
            "path:p1:nodes",
            CacheKeys.user_path("u1", "p1"),
        ]
        await _seed(response_cache, *stale, CacheKeys.user_path("u2", "p1"))

        await service.invalidate_path_caches("p1", user_id="u1")

        assert await _alive(response_cache, *stale) == set()
        assert await response_cache.get(CacheKeys.user_path("u2", "p1")) is not None

    @pytest.mark.asyncio
    async def test_path_caches_without_user_keeps_user_views(
        self, service, response_cache
    ):
        await _seed(
            response_cache, CacheKeys.path("p1"), CacheKeys.user_path("u1", "p1")
        )

        await service.invalidate_path_caches("p1")

        assert await response_cache.get(CacheKeys.path("p1")) is None
        assert await response_cache.get(CacheKeys.user_path("u1", "p1")) is not None

    @pytest.mark.asyncio
    async def test_discussion_single_page_and_all(self, service, response_cache):
        await _seed(
            response_cache,
            CacheKeys.discussions(1),
            CacheKeys.discussions(2),
            CacheKeys.discussions(3),
        )

        await service.invalidate_discussion_caches(page=2)
        assert await _alive(
            response_cache, CacheKeys.discussions(1), CacheKeys.discussions(3)
        ) == {CacheKeys.discussions(1), CacheKeys.discussions(3)}
        assert await response_cache.get(CacheKeys.discussions(2)) is None

        await service.invalidate_discussion_caches()
        assert await _alive(
            response_cache, CacheKeys.discussions(1), CacheKeys.discussions(3)
        ) == set()

    @pytest.mark.asyncio
    async def test_leaderboard_and_search(self, service, response_cache):
        await _seed(
            response_cache,
            CacheKeys.leaderboard("weekly"),
            CacheKeys.leaderboard("all-time"),
            CacheKeys.search("graphs"),
            CacheKeys.search("trees"),
        )

        await service.invalidate_leaderboard_caches("weekly")
        await service.invalidate_search_caches()

        assert await _alive(
            response_cache,
            CacheKeys.leaderboard("weekly"),
            CacheKeys.leaderboard("all-time"),
            CacheKeys.search("graphs"),
            CacheKeys.search("trees"),
        ) == {CacheKeys.leaderboard("all-time")}


@pytest.mark.unit
class TestCompositeEvents:
    """Test event handlers combining several fan-outs."""

    @pytest.mark.asyncio
    async def test_comment_action_clears_comments_and_stats(
        self, service, response_cache
    ):
        """A new comment must never be hidden by a cached comment list."""
        await _seed(
            response_cache,
            CacheKeys.node_comments("n1"),
            CacheKeys.node_stats("n1"),
            CacheKeys.node_quiz("n1"),
        )

        await service.on_comment_action("n1")

        assert await response_cache.get(CacheKeys.node_comments("n1")) is None
        assert await response_cache.get(CacheKeys.node_stats("n1")) is None
        assert await response_cache.get(CacheKeys.node_quiz("n1")) is not None

    @pytest.mark.asyncio
    async def test_progress_update(self, service, response_cache):
        stale = [
            CacheKeys.user_progress("u1"),
            CacheKeys.user_stats("u1"),
            CacheKeys.node_stats("n1"),
            CacheKeys.leaderboard("weekly"),
        ]
        await _seed(response_cache, *stale, CacheKeys.user_profile("u1"))

        await service.on_progress_update("u1", "n1")

        assert await _alive(response_cache, *stale) == set()
        assert await response_cache.get(CacheKeys.user_profile("u1")) is not None

    @pytest.mark.asyncio
    async def test_profile_update_clears_leaderboards(self, service, response_cache):
        await _seed(
            response_cache,
            CacheKeys.user_profile("u1"),
            CacheKeys.leaderboard("weekly"),
        )

        await service.on_user_profile_update("u1")

        assert await _alive(
            response_cache,
            CacheKeys.user_profile("u1"),
            CacheKeys.leaderboard("weekly"),
        ) == set()

    @pytest.mark.asyncio
    async def test_friend_action_touches_both_users(self, service, response_cache):
        stale = [
            CacheKeys.friends("a"),
            CacheKeys.friends("b"),
            CacheKeys.friend_suggestions("a"),
            CacheKeys.friend_suggestions("b"),
            CacheKeys.activity_feed("a", 1),
            CacheKeys.activity_feed("b", 2),
        ]
        await _seed(response_cache, *stale, CacheKeys.friends("c"))

        await service.on_friend_action("a", "b")

        assert await _alive(response_cache, *stale) == set()
        assert await response_cache.get(CacheKeys.friends("c")) is not None


@pytest.mark.unit
class TestBulkInvalidation:
    """Test bulk and tag invalidation."""

    @pytest.mark.asyncio
    async def test_invalidate_all(self, service, response_cache, mock_logger):
        await _seed(response_cache, "user:1", "node:n", "search:x")

        await service.invalidate_all()

        assert await _alive(response_cache, "user:1", "node:n", "search:x") == set()
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_invalidate_by_tags(self, service, response_cache):
        await _seed(response_cache, "user:1:path:p", "node:comments:n", "path:p")

        await service.invalidate_by_tags(["path", "comments"])

        assert await _alive(
            response_cache, "user:1:path:p", "node:comments:n", "path:p"
        ) == {"path:p"}

    @pytest.mark.asyncio
    async def test_stale_data_clears_volatile_views(self, service, response_cache):
        volatile = [
            CacheKeys.search("q"),
            CacheKeys.discussions(1),
            CacheKeys.leaderboard("weekly"),
        ]
        await _seed(response_cache, *volatile, CacheKeys.user_profile("1"))

        await service.invalidate_stale_data()

        assert await _alive(response_cache, *volatile) == set()
        assert await response_cache.get(CacheKeys.user_profile("1")) is not None


@pytest.mark.unit
class TestSmartInvalidate:
    """Test dispatch by entity tag."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("entity_type", "handler"),
        [
            ("user", "on_user_profile_update"),
            ("node", "invalidate_node_caches"),
            ("path", "invalidate_path_caches"),
            ("comment", "on_comment_action"),
            ("friend", "invalidate_social_caches"),
        ],
    )
    async def test_dispatches_by_tag(self, mock_logger, entity_type, handler):
        with patch.object(CacheInvalidationService, handler, new=AsyncMock()) as mocked:
            service = CacheInvalidationService(MagicMock(), mock_logger)

            await service.smart_invalidate(entity_type, "id-1")

        mocked.assert_awaited_once_with("id-1")

    @pytest.mark.asyncio
    async def test_discussion_tag_purges_every_page(self, service, response_cache):
        await _seed(response_cache, CacheKeys.discussions(1), CacheKeys.discussions(9))

        await service.smart_invalidate("discussion", "ignored")

        assert await _alive(
            response_cache, CacheKeys.discussions(1), CacheKeys.discussions(9)
        ) == set()

    @pytest.mark.asyncio
    async def test_empty_leaderboard_id_purges_all(self, service, response_cache):
        await _seed(
            response_cache,
            CacheKeys.leaderboard("weekly"),
            CacheKeys.leaderboard("monthly"),
        )

        await service.smart_invalidate("leaderboard", "")

        assert await response_cache.invalidate_pattern("leaderboard:*") == []

    @pytest.mark.asyncio
    async def test_unknown_tag_is_logged_and_ignored(self, service, mock_logger):
        await service.smart_invalidate("spaceship", "1")

        mock_logger.warning.assert_called_once()
        _, kwargs = mock_logger.warning.call_args
        assert kwargs["entity_type"] == "spaceship"


@pytest.mark.unit
class TestInvalidationFailureIsolation:
    """Test that failures never escape the service."""

    @pytest.mark.asyncio
    async def test_failed_step_is_logged_and_others_still_run(self, mock_logger):
        cache = MagicMock()
        cache.delete = AsyncMock(side_effect=[RuntimeError("boom"), None])
        cache.invalidate_pattern = AsyncMock(return_value=[])
        service = CacheInvalidationService(cache, mock_logger)

        await service.on_comment_action("n1")

        assert cache.delete.await_count == 2
        mock_logger.error.assert_called_once()
        _, kwargs = mock_logger.error.call_args
        assert isinstance(kwargs["error"], RuntimeError)
        assert kwargs["operation"] == "on_comment_action"
