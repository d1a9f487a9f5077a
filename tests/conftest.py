from __future__ import annotations

import pytest

from hdrtools.models.codec_engine import CodecEngine


@pytest.fixture
def fresh_engine(monkeypatch: pytest.MonkeyPatch) -> CodecEngine:
    """A brand-new, not yet initialised codec engine."""

    monkeypatch.setattr(CodecEngine, "_instance", None)
    return CodecEngine()


@pytest.fixture
def engine(fresh_engine: CodecEngine) -> CodecEngine:
    """An initialised codec engine with stock conversion constants."""

    return fresh_engine.initialize()


@pytest.fixture(autouse=True)
def _quiet_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DEFAULT_EXPOSURE", "DEFAULT_USE_FILMIC", "DEFAULT_NO_SRGB", "DEFAULT_PREMULTIPLIED"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SHOW_PROGRESS", "0")
    monkeypatch.setenv("IMAGE_READ_TIMEOUT", "5")
