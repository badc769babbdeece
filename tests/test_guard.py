"""Tests for the per-input quota guard."""

import pytest

from session_guard.constants import STATUS_KEY
from session_guard.quota.engine import build_quota_summary
from session_guard.quota.guard import InputGuard, is_allowed_critical_input
from session_guard.sessions.types import UsageTotals
from tests.conftest import write_quota


class TestAllowedCriticalInput:
    @pytest.mark.parametrize(
        "text",
        [
            "/help",
            "/session-guard",
            "  /session-guard   scan --sort lru ",
            "/session-guard clean",
            "/session-guard quota set 20GB",
            "/session-guard\nclean",
        ],
    )
    def test_allowed(self, text):
        assert is_allowed_critical_input(text)

    @pytest.mark.parametrize(
        "text",
        [
            "please summarize this file",
            "/session-guard quota show",
            "/session-guardx",
            "/help me",
            "",
        ],
    )
    def test_blocked(self, text):
        assert not is_allowed_critical_input(text)


@pytest.fixture
def guard(store) -> InputGuard:
    return InputGuard(store=store)


class TestInputGuardCheck:
    """Tests for InputGuard.check."""

    @pytest.mark.asyncio
    async def test_no_quota_allows_and_sets_status(self, guard, host, session_root):
        assert await guard.check("hello", host, session_root, now=0.0)
        assert host.status[STATUS_KEY] == "Session quota: not set"
        assert host.notifications == []

    @pytest.mark.asyncio
    async def test_critical_blocks_ordinary_input(
        self, guard, host, session_root, write_session, quota_path
    ):
        write_session("a.jsonl", size=1000)
        write_quota(quota_path, {"maxTotalSizeBytes": 1000})

        allowed = await guard.check("summarize the repo", host, session_root, now=0.0)

        assert allowed is False
        errors = host.messages("error")
        assert len(errors) == 1
        assert "/session-guard clean" in errors[0]
        assert host.status[STATUS_KEY].startswith("Session quota CRITICAL")

    @pytest.mark.asyncio
    async def test_critical_allows_guard_commands(
        self, guard, host, session_root, write_session, quota_path
    ):
        write_session("a.jsonl", size=2000)
        write_quota(quota_path, {"maxTotalSizeBytes": 1000})

        assert await guard.check("/session-guard clean", host, session_root, now=0.0)
        assert await guard.check("/help", host, session_root, now=1.0)
        assert host.messages("error") == []

    @pytest.mark.asyncio
    async def test_warn_notifies_with_cooldown(
        self, guard, host, session_root, write_session, quota_path
    ):
        write_session("a.jsonl", size=950)
        write_quota(quota_path, {"maxTotalSizeBytes": 1000})

        assert await guard.check("one", host, session_root, now=0.0)
        assert await guard.check("two", host, session_root, now=30.0)
        assert await guard.check("three", host, session_root, now=61.0)

        warnings = host.messages("warning")
        assert len(warnings) == 2
        assert "95.0%" in warnings[0]

    @pytest.mark.asyncio
    async def test_info_state_is_silent(
        self, guard, host, session_root, write_session, quota_path
    ):
        write_session("a.jsonl", size=750)
        write_quota(quota_path, {"maxTotalSizeBytes": 1000})

        assert await guard.check("hello", host, session_root, now=0.0)
        assert host.notifications == []
        assert host.status[STATUS_KEY].startswith("Session quota INFO")

    @pytest.mark.asyncio
    async def test_uses_cached_summary(
        self, guard, host, session_root, write_session, quota_path
    ):
        write_quota(quota_path, {"maxTotalSizeBytes": 1000})
        write_session("a.jsonl", size=100)
        assert await guard.check("first", host, session_root, now=0.0)

        write_session("b.jsonl", size=5000)
        assert await guard.check("second", host, session_root, now=5.0)
        assert not await guard.check("third", host, session_root, now=20.0)


class TestInputGuardCache:
    @pytest.mark.asyncio
    async def test_remember_replaces_cache(self, guard, host, session_root):
        summary = build_quota_summary(UsageTotals(10, 1), None)

        guard.remember(host, session_root, summary, now=1.0)

        assert guard.cache is not None
        assert guard.cache.summary is summary
        assert guard.cache.root == str(session_root)
        assert host.status[STATUS_KEY] == "Session quota: not set"

    @pytest.mark.asyncio
    async def test_invalidate(self, guard, host, session_root):
        await guard.refresh(host, session_root, now=0.0)
        assert guard.cache is not None
        guard.invalidate()
        assert guard.cache is None

    @pytest.mark.asyncio
    async def test_refresh_force(self, guard, host, session_root, write_session):
        first = await guard.refresh(host, session_root, now=0.0)
        write_session("a.jsonl")
        second = await guard.refresh(host, session_root, force=True, now=1.0)
        assert first.total_sessions == 0
        assert second.total_sessions == 1
