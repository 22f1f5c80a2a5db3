# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError
from web_capture.config import CaptureConfig, RenderConfig, load_config


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("output_dir: captures\nrender: {deadline: 30}", ".yaml", None),
        (json.dumps({"output_dir": "captures", "render": {"deadline": 30}}), ".json", None),
        ("render: {deadline: -1}", ".yaml", ValidationError),
        ("unknown_key: 1", ".yaml", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("::invalid yaml", ".yaml", TypeError),
        ("{broken json", ".json", ValueError),
        ("output_dir: x", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, CaptureConfig)
        assert cfg.output_dir == Path("captures")
        assert cfg.render.deadline == 30
        # untouched sections keep their defaults
        assert cfg.static.timeout == 15


def test_defaults():
    cfg = CaptureConfig()
    assert cfg.output_dir == Path("outputs")
    assert cfg.concurrent is False
    assert cfg.atomic_writes is False
    assert cfg.static.timeout == 15
    assert cfg.static.accept_language.startswith("tr-TR")
    assert cfg.static.referer == "https://www.google.com/"
    assert (cfg.static.min_delay, cfg.static.random_delay) == (2, 1)
    assert cfg.render.deadline == 120
    assert (cfg.render.viewport_width, cfg.render.viewport_height) == (1920, 1080)
    assert cfg.render.settle_range == (3, 5)
    assert cfg.render.scroll_settle_range == (2, 4)
    assert cfg.render.screenshot_quality == 90
    assert cfg.render.screenshot_extension == "jpg"


def test_missing_default_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert load_config(None) == CaptureConfig()


def test_default_file_is_used_when_present(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "configs").mkdir()
    (tmp_path / "configs" / "default.yaml").write_text("concurrent: true\n", encoding="utf-8")
    assert load_config(None).concurrent is True


def test_explicit_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize("field", ["settle_range", "scroll_settle_range"])
def test_inverted_delay_range_rejected(field):
    with pytest.raises(ValidationError):
        RenderConfig(**{field: (5, 3)})


def test_png_has_png_extension():
    assert RenderConfig(screenshot_format="png").screenshot_extension == "png"


def test_config_is_frozen():
    cfg = CaptureConfig()
    with pytest.raises(ValidationError):
        cfg.concurrent = True
