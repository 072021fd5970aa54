from __future__ import annotations

import pytest

from clover.config import Settings
from fakes import FakeGameService


@pytest.fixture
def settings() -> Settings:
    return Settings(
        auth_url="http://game.test/auth",
        start_url="http://game.test/game/play",
        claim_url="http://game.test/game/claim",
        payload_url="http://payload.test/process",
        pacing_seconds=0,
    )


@pytest.fixture
def service(settings: Settings) -> FakeGameService:
    return FakeGameService(settings)
