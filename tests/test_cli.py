from __future__ import annotations

import importlib
import os
import signal
import sys

import pytest
from typer.testing import CliRunner

from clover.config import Settings
from fakes import FakeGameService

cli_module = importlib.import_module("clover.cli")

URL = "https://web.telegram.org/k/#tgWebAppData=abc123&tgWebAppVersion=7.10"


@pytest.fixture
def services(monkeypatch: pytest.MonkeyPatch) -> list[FakeGameService]:
    monkeypatch.setenv("CLOVER_PACING_SECONDS", "0")
    created: list[FakeGameService] = []

    def _fake_http_client(settings: Settings) -> FakeGameService:
        service = FakeGameService(settings)
        created.append(service)
        return service

    monkeypatch.setattr(cli_module, "HttpClient", _fake_http_client)
    return created


def test_play_runs_all_sessions(services: list[FakeGameService]) -> None:
    result = CliRunner().invoke(cli_module.app, [URL, "3"])

    assert result.exit_code == 0, result.output
    assert "Success: 3/3" in result.output
    [service] = services
    assert service.calls[0].json["query"] == "abc123"
    assert len(service.calls_to(service.settings.claim_url)) == 3


def test_play_defaults_to_single_session(services: list[FakeGameService]) -> None:
    result = CliRunner().invoke(cli_module.app, [URL, "lots"])

    assert result.exit_code == 0, result.output
    assert "Success: 1/1" in result.output


def test_pacing_option_overrides_settings(services: list[FakeGameService], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOVER_PACING_SECONDS", "60")

    result = CliRunner().invoke(cli_module.app, [URL, "--pacing", "0"])

    assert result.exit_code == 0, result.output
    assert services[0].settings.pacing_seconds == 0


def test_missing_auth_data_exits_before_any_network_call(services: list[FakeGameService]) -> None:
    result = CliRunner().invoke(cli_module.app, ["https://web.telegram.org/k/#tgWebAppVersion=7.10", "3"])

    assert result.exit_code != 0
    assert services == []


def test_token_without_access_field_aborts_run(services: list[FakeGameService], monkeypatch: pytest.MonkeyPatch) -> None:
    original_init = FakeGameService.__init__

    def _init(self: FakeGameService, settings: Settings) -> None:
        original_init(self, settings)
        self.handlers[settings.auth_url] = lambda call: {"token": {}}

    monkeypatch.setattr(FakeGameService, "__init__", _init)

    result = CliRunner().invoke(cli_module.app, [URL, "3"])

    assert result.exit_code != 0
    [service] = services
    assert service.calls_to(service.settings.start_url) == []


def test_missing_url_is_a_usage_error(services: list[FakeGameService]) -> None:
    result = CliRunner().invoke(cli_module.app, [])

    assert result.exit_code != 0
    assert services == []


@pytest.mark.skipif(sys.platform == "win32", reason="SIGINT delivery via os.kill is POSIX-only")
def test_interrupt_abandons_sessions_and_exits_cleanly(
    services: list[FakeGameService], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("CLOVER_PACING_SECONDS", "30")
    original_init = FakeGameService.__init__

    def _init(self: FakeGameService, settings: Settings) -> None:
        original_init(self, settings)
        start = self.handlers[settings.start_url]

        def _start_then_interrupt(call):
            body = start(call)
            if len(self.calls_to(settings.start_url)) == 1:
                os.kill(os.getpid(), signal.SIGINT)
            return body

        self.handlers[settings.start_url] = _start_then_interrupt

    monkeypatch.setattr(FakeGameService, "__init__", _init)

    result = CliRunner().invoke(cli_module.app, [URL, "3"])

    assert result.exit_code == 0, result.output
    assert "Received interrupt signal" in result.output
    assert "Success:" not in result.output
    [service] = services
    assert service.calls_to(service.settings.payload_url) == []
    assert service.calls_to(service.settings.claim_url) == []


def test_interrupt_before_run_starts_exits_cleanly(
    services: list[FakeGameService], monkeypatch: pytest.MonkeyPatch
) -> None:
    def _interrupted(url: str) -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_module, "extract_auth_payload", _interrupted)

    result = CliRunner().invoke(cli_module.app, [URL, "3"])

    assert result.exit_code == 0, result.output
    assert "Received interrupt signal" in result.output
    assert services == []
