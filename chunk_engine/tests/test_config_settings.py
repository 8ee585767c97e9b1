from __future__ import annotations

from textwrap import dedent

import pytest
from pydantic import ValidationError

from chunk_engine.config.settings import Settings


def _write_env(tmp_path, content: str):
    env_file = tmp_path / "test.env"
    env_file.write_text(dedent(content), encoding="utf-8")
    return env_file


def _base_env() -> str:
    return """
    MAX_SEGMENT_SIZE_TOKENS=500
    MAX_OVERLAP_SIZE_TOKENS=50
    TOKEN_ESTIMATOR=characters
    CHARS_PER_TOKEN=3.5
    SEPARATOR_PRESET=markdown
    OVERSIZED_POLICY=error
    LOG_LEVEL=DEBUG
    """


def test_defaults_without_env_file(monkeypatch):
    for name in ("MAX_SEGMENT_SIZE_TOKENS", "MAX_OVERLAP_SIZE_TOKENS", "TOKEN_ESTIMATOR", "OVERSIZED_POLICY"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings(_env_file=None)

    assert settings.max_segment_size_tokens == 300
    assert settings.max_overlap_size_tokens == 30
    assert settings.token_estimator == "tiktoken"
    assert settings.tiktoken_encoding == "cl100k_base"
    assert settings.separator_preset == "prose"
    assert settings.oversized_policy == "allow"
    assert settings.segment_index_key == "index"


def test_settings_loads_from_env_file(tmp_path):
    env_file = _write_env(tmp_path, _base_env())
    settings = Settings(_env_file=env_file)

    assert settings.max_segment_size_tokens == 500
    assert settings.max_overlap_size_tokens == 50
    assert settings.token_estimator == "characters"
    assert settings.chars_per_token == 3.5
    assert settings.separator_preset == "markdown"
    assert settings.oversized_policy == "error"
    assert settings.log_level == "DEBUG"


def test_environment_overrides_take_precedence(tmp_path, monkeypatch):
    env_file = _write_env(tmp_path, _base_env())
    monkeypatch.setenv("MAX_SEGMENT_SIZE_TOKENS", "42")
    settings = Settings(_env_file=env_file)

    assert settings.max_segment_size_tokens == 42


def test_unknown_oversized_policy_is_rejected(tmp_path):
    env_file = _write_env(tmp_path, "OVERSIZED_POLICY=truncate\n")

    with pytest.raises(ValidationError):
        Settings(_env_file=env_file)
