from __future__ import annotations

import pytest

from bitchess.config import EngineSettings


def test_defaults() -> None:
    s = EngineSettings()
    assert (s.search_depth, s.search_workers, s.log_level) == (3, 8, "INFO")


def test_from_env_reads_prefixed_variables() -> None:
    s = EngineSettings.from_env(
        {
            "BITCHESS_SEARCH_DEPTH": "5",
            "BITCHESS_SEARCH_WORKERS": "2",
            "BITCHESS_LOG_LEVEL": "debug",
        }
    )
    assert s == EngineSettings(search_depth=5, search_workers=2, log_level="DEBUG")


def test_from_env_falls_back_to_defaults() -> None:
    assert EngineSettings.from_env({"BITCHESS_SEARCH_DEPTH": ""}) == EngineSettings()


def test_from_env_uses_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BITCHESS_SEARCH_WORKERS", "3")
    assert EngineSettings.from_env().search_workers == 3


@pytest.mark.parametrize("raw", ["zero", "0", "-2"])
def test_from_env_rejects_bad_numbers(raw: str) -> None:
    with pytest.raises(ValueError, match="BITCHESS_SEARCH_DEPTH"):
        EngineSettings.from_env({"BITCHESS_SEARCH_DEPTH": raw})
