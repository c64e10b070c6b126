"""Tests for configuration loading."""

from __future__ import annotations

import pytest

from slidemark.config import ParserConfig, load_config


def test_defaults_without_environment():
    assert load_config(environ={}) == ParserConfig()


def test_environment_overrides():
    config = load_config(
        environ={
            "SLIDEMARK_THEMATIC_BREAK_SPLITS": "no",
            "SLIDEMARK_HEADING_DEPTH_SPLITS": "2",
            "SLIDEMARK_STRICT": "true",
            "SLIDEMARK_STRICT_LAYOUT": "1",
            "SLIDEMARK_FRONT_MATTER": "on",
            "SLIDEMARK_DEFAULT_TITLE": "Deck",
        }
    )

    assert config.segmentation.thematic_break_splits is False
    assert config.segmentation.heading_depth_splits == 2
    assert config.strict and config.strict_layout
    assert config.front_matter is True
    assert config.default_title == "Deck"


def test_heading_depth_can_be_switched_off():
    assert load_config(environ={"SLIDEMARK_HEADING_DEPTH_SPLITS": "none"}).segmentation.heading_depth_splits is None


@pytest.mark.parametrize(
    "key, value",
    [("SLIDEMARK_STRICT", "maybe"), ("SLIDEMARK_HEADING_DEPTH_SPLITS", "4")],
)
def test_invalid_values_raise(key, value):
    with pytest.raises(ValueError):
        load_config(environ={key: value})


def test_dotenv_file_is_loaded(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("SLIDEMARK_DEFAULT_TITLE=From dotenv\n", encoding="utf-8")
    # Registered first so teardown removes the value loaded from the file.
    monkeypatch.setenv("SLIDEMARK_DEFAULT_TITLE", "placeholder")
    monkeypatch.delenv("SLIDEMARK_DEFAULT_TITLE")

    config = load_config(dotenv_path=str(env_file))

    assert config.default_title == "From dotenv"
