"""Entry point: startup failures, stop handling, and SIGTERM on a live process."""

import asyncio
import os
import signal
import subprocess
import sys
import time
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

import main
from core.config import Settings

REPO_ROOT = Path(__file__).resolve().parents[1]


class HangingServer:
    """Stands in for FastMCP: serves until cancelled."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def run_async(self, transport=None):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


def _recording_context(events):
    @asynccontextmanager
    async def fake_open_context(settings):
        events.append("opened")
        try:
            yield object()
        finally:
            events.append("closed")

    return fake_open_context


def test_invalid_backend_exits_with_status_1(monkeypatch, caplog):
    monkeypatch.setenv("CATALOG_BACKEND", "redis")
    assert main.main() == 1
    assert "Invalid configuration" in caplog.text


def test_connection_failure_at_startup_exits_with_status_1(monkeypatch, caplog):
    @asynccontextmanager
    async def unreachable(settings):
        raise ConnectionError("nats unreachable")
        yield

    monkeypatch.setenv("CATALOG_BACKEND", "memory")
    monkeypatch.setenv("DISPATCH_BACKEND", "nats")
    monkeypatch.setattr(main, "open_context", unreachable)

    assert main.main() == 1
    assert "[Fatal] MCP server failed" in caplog.text


@pytest.mark.asyncio
async def test_stop_event_closes_backends(monkeypatch):
    events = []
    server = HangingServer()
    monkeypatch.setattr(main, "open_context", _recording_context(events))
    monkeypatch.setattr(main, "create_server", lambda context: server)

    stop = asyncio.Event()
    run = asyncio.create_task(main.serve(Settings(catalog_backend="memory"), stop))
    await asyncio.wait_for(server.started.wait(), timeout=5)
    stop.set()

    assert await asyncio.wait_for(run, timeout=5) is True
    assert events == ["opened", "closed"]
    await asyncio.sleep(0.05)
    assert server.cancelled


@pytest.mark.asyncio
async def test_server_error_still_closes_backends(monkeypatch):
    class FailingServer:
        async def run_async(self, transport=None):
            raise RuntimeError("transport broke")

    events = []
    monkeypatch.setattr(main, "open_context", _recording_context(events))
    monkeypatch.setattr(main, "create_server", lambda context: FailingServer())

    with pytest.raises(RuntimeError, match="transport broke"):
        await main.serve(Settings(catalog_backend="memory"), asyncio.Event())
    assert events == ["opened", "closed"]


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals only")
def test_sigterm_stops_process_with_stdin_open(tmp_path):
    log_path = tmp_path / "stderr.log"
    env = dict(
        os.environ,
        CATALOG_BACKEND="memory",
        DISPATCH_BACKEND="rest",
        API_BASE_URL="http://127.0.0.1:9",
        LOG_LEVEL="INFO",
    )
    with open(log_path, "wb") as log:
        proc = subprocess.Popen(
            [sys.executable, "main.py"],
            cwd=REPO_ROOT,
            env=env,
            stdin=subprocess.PIPE,
            stdout=subprocess.DEVNULL,
            stderr=log,
        )
        try:
            deadline = time.monotonic() + 20
            while "Ready on stdio" not in log_path.read_text(errors="replace"):
                assert proc.poll() is None, log_path.read_text(errors="replace")
                assert time.monotonic() < deadline, "server never became ready"
                time.sleep(0.1)

            proc.send_signal(signal.SIGTERM)
            assert proc.wait(timeout=10) == 0
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            proc.stdin.close()

    output = log_path.read_text(errors="replace")
    assert "Shutdown requested" in output
    assert "Backends closed" in output
