"""Unit tests for SessionRegistry: per-session providers and eviction."""

import pytest

from smart_tutor.api.deps import SessionRegistry
from smart_tutor.config import Settings
from smart_tutor.orchestration.session_coordinator import SessionPreferences
from smart_tutor.orchestration.state_machine import SessionState


def _registry(bank, clock, **overrides) -> SessionRegistry:
    settings = Settings(_env_file=None, openai_api_key="", **overrides)
    return SessionRegistry(bank, settings, clock=clock)


async def _complete(coordinator):
    await coordinator.request_question()
    coordinator.skip()
    assert coordinator.state == SessionState.COMPLETED


class TestEviction:

    @pytest.mark.asyncio
    async def test_completed_sessions_left_behind_are_evicted(self, small_bank, clock):
        registry = _registry(small_bank, clock, session_completion_threshold=1, session_idle_ttl_seconds=60)
        for _ in range(50):
            await _complete(registry.create(SessionPreferences(subject="cpp")))
        assert len(registry) == 50

        clock.advance(61)
        latest = registry.create(SessionPreferences(subject="cpp"))

        assert len(registry) == 1
        assert registry.get(latest.session_id) is latest
        assert registry.progress.events_for(latest.session_id) == []

    @pytest.mark.asyncio
    async def test_evicted_session_is_abandoned_and_its_events_dropped(self, small_bank, clock):
        registry = _registry(small_bank, clock, session_completion_threshold=1, session_idle_ttl_seconds=60)
        old = registry.create(SessionPreferences(subject="cpp"))
        await _complete(old)
        assert len(registry.progress.events_for(old.session_id)) == 1

        clock.advance(60)
        assert registry.sweep() == 1

        assert old.state == SessionState.ABANDONED
        assert registry.get(old.session_id) is None
        assert registry.progress.events_for(old.session_id) == []

    def test_access_keeps_session_alive(self, small_bank, clock):
        registry = _registry(small_bank, clock, session_idle_ttl_seconds=60)
        session = registry.create(SessionPreferences(subject="cpp"))

        clock.advance(45)
        assert registry.get(session.session_id) is session
        clock.advance(45)

        assert registry.get(session.session_id) is session

    def test_live_session_limit_drops_least_recently_used(self, small_bank, clock):
        registry = _registry(small_bank, clock, max_live_sessions=3)
        first, second, third = (registry.create(SessionPreferences(subject="cpp")) for _ in range(3))
        registry.get(first.session_id)

        fourth = registry.create(SessionPreferences(subject="cpp"))

        assert len(registry) == 3
        assert registry.get(second.session_id) is None
        for kept in (first, third, fourth):
            assert registry.get(kept.session_id) is kept


def test_each_session_gets_its_own_provider(small_bank, clock):
    registry = _registry(small_bank, clock)
    a = registry.create(SessionPreferences(subject="cpp"))
    b = registry.create(SessionPreferences(subject="cpp"))
    a._provider.draw_from_bank("cpp", "basic")
    assert len(b._provider.used_questions) == 0
