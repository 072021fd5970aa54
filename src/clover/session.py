"""Single game session lifecycle: start, pacing wait, payload generation, claim."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from loguru import logger

from clover.auth import SessionToken
from clover.config import Settings
from clover.errors import PayloadError, TransportError
from clover.http import HttpClient


class SessionState(StrEnum):
    STARTED = "started"
    AWAITING_PAYLOAD = "awaiting_payload"
    CLAIMING = "claiming"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class GameSession:
    """Remote game owned by exactly one driver."""

    game_id: str
    target_score: int
    state: SessionState = SessionState.AWAITING_PAYLOAD


@dataclass(frozen=True)
class SessionResult:
    """Outcome of one driver run. Failures are data, not exceptions."""

    number: int
    ok: bool
    state: SessionState
    game_id: str | None = None
    score: int | None = None
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.ok


def _nested(body: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(body, dict):
            return None
        body = body.get(key)
    return body


class SessionDriver:
    """Drive one game session to a terminal state."""

    def __init__(
        self,
        number: int,
        http: HttpClient,
        token: SessionToken,
        settings: Settings,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.number = number
        self.http = http
        self.token = token
        self.settings = settings
        self._rng = rng or random.Random()
        self._state = SessionState.STARTED
        self.game: GameSession | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    def _transition(self, state: SessionState) -> None:
        logger.debug("session.state number={} {} -> {}", self.number, self._state, state)
        self._state = state
        if self.game is not None:
            self.game.state = state

    async def run(self) -> SessionResult:
        """Run every stage in order; never raises except on task cancellation."""
        with logger.contextualize(session=f"game {self.number}"):
            try:
                game = await self._start()
                await self._pace()
                payload = await self._generate_payload(game)
                await self._claim(payload)
            except Exception as exc:
                self._transition(SessionState.FAILED)
                self._log_failure(exc)
                return self._result(error=exc)
            self._transition(SessionState.COMPLETED)
            logger.info("session.completed game_id={} score={}", game.game_id, game.target_score)
            return self._result()

    async def _start(self) -> GameSession:
        logger.info("session.start")
        body = await self.http.post(self.settings.start_url, token=self.token.authorization)
        game_id = _nested(body, "gameId")
        if not game_id:
            raise PayloadError("start response has no gameId field")
        low, high = self.settings.score_range
        game = GameSession(game_id=str(game_id), target_score=self._rng.randint(low, high))
        self.game = game
        self._transition(SessionState.AWAITING_PAYLOAD)
        logger.info("session.started game_id={} target_score={}", game.game_id, game.target_score)
        return game

    async def _pace(self) -> None:
        logger.info("session.pacing seconds={}", self.settings.pacing_seconds)
        await asyncio.sleep(self.settings.pacing_seconds)

    async def _generate_payload(self, game: GameSession) -> str:
        logger.info("session.payload.request")
        params = {"apiKey": self.settings.payload_api_key} if self.settings.payload_api_key else None
        body = await self.http.post(
            self.settings.payload_url,
            json={
                "gameId": game.game_id,
                "earnedAssets": {self.settings.currency: {"amount": str(game.target_score)}},
            },
            params=params,
        )
        payload = _nested(body, "pack", "hash")
        if not payload:
            raise PayloadError("payload generator response has no pack.hash field")
        self._transition(SessionState.CLAIMING)
        return str(payload)

    async def _claim(self, payload: str) -> None:
        logger.info("session.claim")
        await self.http.post(self.settings.claim_url, token=self.token.authorization, json={"payload": payload})

    def _log_failure(self, exc: Exception) -> None:
        if isinstance(exc, TransportError):
            logger.error(
                "session.failed error={} status={} body={} headers={}",
                exc,
                exc.status,
                exc.body,
                exc.headers,
            )
        else:
            logger.opt(exception=exc).error("session.failed error={}: {}", type(exc).__name__, exc)

    def _result(self, error: Exception | None = None) -> SessionResult:
        return SessionResult(
            number=self.number,
            ok=self._state is SessionState.COMPLETED,
            state=self._state,
            game_id=self.game.game_id if self.game else None,
            score=self.game.target_score if self.game else None,
            error=error,
        )
