# tests/unit/analysis/test_unit_server_status.py - v1
"""Tests for analysis/server_status.py."""

from __future__ import annotations

import asyncio

import pytest

from smelltrack.analysis.models import DetectionResult, ServerState
from smelltrack.analysis.server_status import ServerStatusMonitor


class TestServerStatusMonitor:
    def test_starts_unknown(self, server_status: ServerStatusMonitor):
        assert server_status.state == ServerState.UNKNOWN
        assert not server_status.is_down

    @pytest.mark.asyncio
    async def test_check_up(self, server_status, scripted_client):
        assert await server_status.check() == ServerState.UP

    @pytest.mark.asyncio
    async def test_check_down(self, server_status, scripted_client):
        scripted_client.reachable = False
        assert await server_status.check() == ServerState.DOWN
        assert server_status.is_down

    @pytest.mark.asyncio
    async def test_notifies_only_on_transition(self, server_status, scripted_client):
        seen: list[ServerState] = []
        server_status.subscribe(seen.append)
        await server_status.check()
        await server_status.check()
        scripted_client.reachable = False
        await server_status.check()
        scripted_client.reachable = True
        await server_status.check()
        assert seen == [ServerState.UP, ServerState.DOWN, ServerState.UP]

    @pytest.mark.asyncio
    async def test_poll_loop(self, server_status, scripted_client):
        scripted_client.reachable = False
        server_status.start()
        try:
            for _ in range(50):
                if server_status.is_down:
                    break
                await asyncio.sleep(0.01)
            assert server_status.is_down
        finally:
            await server_status.stop()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, server_status):
        await server_status.stop()


class TestDetectionResult:
    def test_ok_range(self):
        assert DetectionResult(status_code=200).ok
        assert DetectionResult(status_code=204).ok
        assert not DetectionResult(status_code=302).ok
        assert not DetectionResult(status_code=422).ok
