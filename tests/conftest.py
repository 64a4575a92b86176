"""Pytest configuration and shared fixtures"""
import asyncio
import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

DATA_DIR = Path(__file__).parent / "data"

HEADER = "Discrete Time;Signal A;Signal B;Signal T;Energy Lost"


class FakeFetcher:
    """Returns queued responses in order; an Exception instance is raised instead."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def fetch(self) -> str:
        self.calls += 1
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


class GatedFetcher(FakeFetcher):
    """Blocks inside fetch() until release is set, so a cycle can be held in flight."""

    def __init__(self, *responses):
        super().__init__(*responses)
        self.started = None
        self.release = None

    async def fetch(self) -> str:
        if self.started is None:
            self.started = asyncio.Event()
            self.release = asyncio.Event()
        self.started.set()
        await self.release.wait()
        return await super().fetch()


@pytest.fixture
def sample_csv_text():
    """The 65-line export: 58 time rows, letter line 60, value lines 62/63"""
    return (DATA_DIR / "sample.csv").read_text(encoding="utf-8")


@pytest.fixture
def expected_signals():
    """Hand-computed wasted energy table of sample.csv (Signal T and AB excluded)"""
    return [("A", 12.5), ("B", 7.25), ("C", 0.0), ("D", 3.75)]


@pytest.fixture
def make_csv():
    """Build a small export with n time rows: 'i;i,5;2;9;i,75'"""
    def _make(n_rows: int) -> str:
        lines = [HEADER] + [f"{i};{i},5;2;9;{i},75" for i in range(1, n_rows + 1)]
        return "\n".join(lines) + "\n"
    return _make
