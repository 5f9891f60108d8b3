"""
Global pytest fixtures for autocluster tests.

- Provides deterministic seeding across Python, NumPy, and PyTorch.
- Forces single-threaded torch inside each task so timings stay comparable.
- Hands out orchestrators that are always shut down after the test.
"""

from __future__ import annotations

import os
import random
import sys
from typing import Generator
from pathlib import Path

import numpy as np
import pytest
import torch

# Add the project's src directory to the Python path so tests can import the code
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if SRC.exists():
    sys.path.insert(0, str(SRC))

from autocluster import ClusteringOrchestrator  # noqa: E402


def _get_seed() -> int:
    """Resolve the test seed from env or default."""
    env = os.getenv("TEST_RANDOM_SEED", "1337")
    try:
        return int(env)
    except ValueError:
        return 1337


@pytest.fixture(scope="session", autouse=True)
def seed_all() -> int:
    """
    Seed Python, NumPy, and PyTorch RNGs once per session.

    Seed value comes from TEST_RANDOM_SEED (default 1337). The clustering
    itself is deterministic; the seed only fixes the generated data.
    """
    seed = _get_seed()
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    return seed


@pytest.fixture(scope="session", autouse=True)
def set_torch_threads() -> None:
    """
    Reduce PyTorch to a single intra-op thread; the orchestrator already
    runs one task per worker thread.
    """
    torch.set_num_threads(1)


@pytest.fixture(scope="function")
def rng(seed_all: int) -> Generator[np.random.Generator, None, None]:
    """
    Per-test NumPy Generator seeded from the session seed.

    Each test receives a fresh Generator (reproducible within a test).
    """
    yield np.random.default_rng(seed_all)


@pytest.fixture(scope="function")
def orchestrator() -> Generator[ClusteringOrchestrator, None, None]:
    """Default orchestrator with a small worker pool, shut down afterwards."""
    orch = ClusteringOrchestrator(max_workers=2)
    try:
        yield orch
    finally:
        orch.shutdown(wait=True)
