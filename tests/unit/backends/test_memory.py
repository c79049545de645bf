import pytest

from cloudflare_exporter.backends.memory import MemoryStateStore


class TestMemoryStateStore:
    @pytest.fixture
    def store(self):
        return MemoryStateStore(namespace="test")

    @pytest.mark.asyncio
    async def test_init(self):
        store = MemoryStateStore(namespace="test_ns")
        assert store.namespace == "test_ns"
        assert store._states == {}

    @pytest.mark.asyncio
    async def test_get_set_state(self, store):
        await store.set_state("default:metrics", {"cycles_completed": 2})
        assert await store.get_state("default:metrics") == {"cycles_completed": 2}

    @pytest.mark.asyncio
    async def test_get_state_missing(self, store):
        assert await store.get_state("nonexistent") is None

    @pytest.mark.asyncio
    async def test_returns_copies(self, store):
        state = {"counters": {"a": {"accumulated_total": 1}}}
        await store.set_state("k", state)
        state["counters"]["a"]["accumulated_total"] = 99

        retrieved = await store.get_state("k")
        assert retrieved["counters"]["a"]["accumulated_total"] == 1
        retrieved["counters"].clear()
        assert (await store.get_state("k"))["counters"] != {}

    @pytest.mark.asyncio
    async def test_namespaces_are_isolated(self):
        first = MemoryStateStore(namespace="one")
        await first.set_state("k", {"v": 1})
        assert first._states == {"one:k": {"v": 1}}

    @pytest.mark.asyncio
    async def test_delete_state(self, store):
        await store.set_state("k", {"v": 1})
        await store.delete_state("k")
        await store.delete_state("k")
        assert await store.get_state("k") is None

    @pytest.mark.asyncio
    async def test_health_check(self, store):
        await store.set_state("k", {})
        result = await store.health_check()
        assert result.healthy is True
        assert result.backend_type == "memory"
        assert result.namespace == "test"
        assert result.metadata == {"stored_documents": 1}

    @pytest.mark.asyncio
    async def test_close_is_a_no_op(self, store):
        await store.close()
