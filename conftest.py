"""
Root pytest configuration.
"""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest


def get_test_timeout(base: float, max_multiplier: float = 5.0) -> float:
    """Apply CI timeout multiplier to a base timeout value.

    Environment:
        CI_TIMEOUT_MULTIPLIER: Multiplier for CI environments (default: 1.0)

    Reads the env var on each call to support per-test monkeypatching.
    """
    raw = os.getenv("CI_TIMEOUT_MULTIPLIER", "1.0")
    try:
        multiplier = float(raw) if raw else 1.0
        multiplier = min(multiplier, max_multiplier)
    except ValueError:
        multiplier = 1.0
    return base * multiplier


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - chain and verification core",
    )
    config.addinivalue_line(
        "markers",
        "security: Tamper-detection tests",
    )
    config.addinivalue_line(
        "markers",
        "integration: End-to-end tests across recording, export and the CLI",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the diagnostics module cache before each test.

    The diagnostics module caches the ``internal_logging_enabled`` setting at
    first access; resetting it keeps tests from inheriting each other's state.
    """
    import typedproof.core.diagnostics as diag

    diag._internal_logging_enabled = None
    yield
    diag._internal_logging_enabled = None


@pytest.fixture
def fast_settings(monkeypatch: pytest.MonkeyPatch):
    """Settings with a tiny PoSW iteration count so chains build quickly."""
    from typedproof.core.settings import Settings

    monkeypatch.setenv("TYPEDPROOF_CORE__POSW_ITERATIONS", "3")
    return Settings()


@pytest.fixture
async def chain_factory():
    """Build real chains with a low PoSW cost; workers are closed afterwards.

    ``await chain_factory(n)`` returns a ``HashChainBuilder`` holding ``n``
    typed-character events.
    """
    from typedproof.core.chain import HashChainBuilder
    from typedproof.core.events import Event
    from typedproof.core.worker import PoswWorker

    workers: list[PoswWorker] = []

    async def _build(
        count: int, *, iterations: int = 2, fingerprint: str = "fp-test"
    ) -> HashChainBuilder:
        worker = PoswWorker()
        workers.append(worker)
        builder = HashChainBuilder(worker=worker, iterations=iterations)
        builder.genesis(fingerprint)
        for i in range(count):
            await builder.append(
                Event(
                    sequence=i,
                    timestamp=float(i * 10),
                    type="contentChange",
                    input_type="insertText",
                    data="abcdefghijklmnopqrstuvwxyz"[i % 26],
                    range_offset=i,
                    range_length=0,
                )
            )
        return builder

    yield _build
    for worker in workers:
        await worker.close()


@pytest.fixture
def make_proof_document(fast_settings):
    """``await make_proof_document(text)`` types ``text`` and exports a proof."""
    from typedproof.core.events import EventInput, EventType, InputType
    from typedproof.session import TypingProof

    async def _make(
        text: str = "hello world", *, language: str | None = "python"
    ) -> dict:
        session = TypingProof(settings=fast_settings)
        await session.initialize("fp-test", {"platform": "pytest"})
        try:
            for ch in text:
                await session.record_event(
                    EventInput(
                        type=EventType.CONTENT_CHANGE,
                        input_type=InputType.INSERT_TEXT,
                        data=ch,
                    )
                )
            return await session.export_proof(text, language=language)
        finally:
            await session.close()

    return _make
