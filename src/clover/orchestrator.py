"""Fan-out/fan-in over independent game sessions."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any

from loguru import logger

from clover.auth import SessionToken
from clover.config import Settings
from clover.http import HttpClient
from clover.session import SessionDriver, SessionResult, SessionState


def parse_session_count(value: Any) -> int:
    """Return ``value`` as a positive int, falling back to 1."""
    if value is None or isinstance(value, bool):
        return 1
    try:
        count = int(str(value).strip())
    except ValueError:
        return 1
    return count if count >= 1 else 1


@dataclass(frozen=True)
class RunSummary:
    results: tuple[SessionResult, ...]

    @property
    def outcomes(self) -> list[bool]:
        return [result.ok for result in self.results]

    @property
    def success_count(self) -> int:
        return sum(self.outcomes)

    @property
    def total(self) -> int:
        return len(self.results)

    def __str__(self) -> str:
        return f"{self.success_count}/{self.total}"


class Orchestrator:
    """Run N session drivers concurrently against one shared token."""

    def __init__(
        self,
        http: HttpClient,
        token: SessionToken,
        settings: Settings,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self.http = http
        self.token = token
        self.settings = settings
        self._rng = rng

    def create_drivers(self, count: int) -> list[SessionDriver]:
        return [
            SessionDriver(number, self.http, self.token, self.settings, rng=self._rng)
            for number in range(1, count + 1)
        ]

    async def run(self, count: Any = 1) -> RunSummary:
        total = parse_session_count(count)
        drivers = self.create_drivers(total)
        logger.info("orchestrator.start sessions={}", total)

        tasks = [asyncio.create_task(driver.run(), name=f"clover-session-{driver.number}") for driver in drivers]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[SessionResult] = []
        for driver, outcome in zip(drivers, outcomes, strict=True):
            if isinstance(outcome, SessionResult):
                results.append(outcome)
                continue
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            logger.error("orchestrator.session.crashed number={} error={!r}", driver.number, outcome)
            results.append(
                SessionResult(
                    number=driver.number,
                    ok=False,
                    state=SessionState.FAILED,
                    error=outcome if isinstance(outcome, Exception) else None,
                )
            )

        summary = RunSummary(results=tuple(results))
        logger.info("orchestrator.done success={}", summary)
        return summary
