"""Tests for room snapshot persistence."""
import pytest
from unittest.mock import AsyncMock, patch

from racko.config import config
from racko.state.game_store import GameStore
from tests.conftest import make_game


class TestGameStore:
    """Test GameStore operations."""

    @pytest.fixture
    def store(self):
        """Create game store."""
        return GameStore()

    def test_room_key_is_case_insensitive(self, store):
        """Test room codes are normalised in keys."""
        assert store._room_key("room01") == "room:ROOM01"

    @pytest.mark.asyncio
    async def test_save_game(self, store):
        """Test saving a snapshot with expiry."""
        snapshot = make_game(2)

        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.set_json = AsyncMock()

            await store.save_game(snapshot)

            key, data = mock_redis.set_json.call_args.args
            assert key == "room:ROOM01"
            assert data["players"] == snapshot.to_dict()["players"]
            assert "_saved_at" in data
            assert mock_redis.set_json.call_args.kwargs["ex"] == config.room_ttl_seconds

    @pytest.mark.asyncio
    async def test_get_game(self, store):
        """Test loading a saved snapshot."""
        snapshot = make_game(3)
        stored = snapshot.to_dict()
        stored["_saved_at"] = "2024-01-01T00:00:00+00:00"

        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.get_json = AsyncMock(return_value=stored)

            loaded = await store.get_game("room01")

            assert loaded == snapshot
            mock_redis.get_json.assert_called_once_with("room:ROOM01")

    @pytest.mark.asyncio
    async def test_get_missing_game(self, store):
        """Test loading a room that does not exist."""
        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.get_json = AsyncMock(return_value=None)

            assert await store.get_game("NOPE00") is None

    @pytest.mark.asyncio
    async def test_last_write_wins(self, store):
        """Test a later save simply replaces the earlier one."""
        saved = {}

        async def set_json(key, value, ex=None):
            saved[key] = value

        first = make_game(2)
        second = first.clone()
        second.move_number = 1

        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.set_json = AsyncMock(side_effect=set_json)
            mock_redis.get_json = AsyncMock(side_effect=lambda key: dict(saved[key]))

            await store.save_game(first)
            await store.save_game(second)

            assert (await store.get_game("ROOM01")).move_number == 1

    @pytest.mark.asyncio
    async def test_list_rooms(self, store):
        """Test listing room codes."""
        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.scan_keys = AsyncMock(return_value=["room:ZZZ111", "room:AAA222"])

            assert await store.list_rooms() == ["AAA222", "ZZZ111"]

    @pytest.mark.asyncio
    async def test_delete_game(self, store):
        """Test deleting a room."""
        with patch("racko.state.game_store.redis_client") as mock_redis:
            mock_redis.delete = AsyncMock()

            await store.delete_game("room01")

            mock_redis.delete.assert_called_once_with("room:ROOM01")
