"""Tests for the command-line entry point."""

import random

import pytest
from PIL import Image

from ascii_cam.capture import ArraySource
from ascii_cam.cli import build_parser, main, run_once, settings_from_args
from ascii_cam.config import Config, ConfigError, SessionSettings
from ascii_cam.rendering.colors import ColorMode
from ascii_cam.rendering.renderer import Renderer

# --- Fixtures ---


@pytest.fixture
def no_config(tmp_path):
    return str(tmp_path / "absent.json")


@pytest.fixture
def white_png(tmp_path):
    path = tmp_path / "white.png"
    Image.new("RGB", (40, 20), (255, 255, 255)).save(path)
    return str(path)


# --- Tests ---


class TestSettingsFromArgs:
    def test_cli_overrides_config(self, no_config):
        args = build_parser().parse_args(["clip.mp4", "--width", "64", "--mode", "thermal", "--flip", "--window"])
        settings = settings_from_args(Config.load(no_config), args)
        assert settings.device_or_path == "clip.mp4"
        assert settings.width == 64
        assert settings.mode is ColorMode.THERMAL
        assert settings.flip is True
        assert settings.run_in_terminal is False

    def test_defaults_come_from_config(self, no_config):
        settings = settings_from_args(Config.load(no_config), build_parser().parse_args([]))
        assert settings.device_or_path == "0"
        assert settings.flip is False
        assert settings.run_in_terminal is True

    def test_narrow_width_fails_fast(self, no_config):
        with pytest.raises(ConfigError):
            settings_from_args(Config.load(no_config), build_parser().parse_args(["--width", "4"]))


class TestRunOnce:
    def test_prints_one_frame(self, capsys):
        frame = [[[255, 255, 255]] * 20] * 20
        settings = SessionSettings(width=10).validate()
        code = run_once(settings, ArraySource([frame]), Renderer(random.Random(0)))
        out = capsys.readouterr().out
        assert code == 0
        assert "\x1b[38;2;255;255;255m@@@@@@@@@@" in out
        assert "mode=" not in out

    def test_no_frames_is_an_error(self, capsys):
        settings = SessionSettings(width=10).validate()
        assert run_once(settings, ArraySource([]), Renderer(random.Random(0))) == 1


class TestMain:
    def test_once_on_image(self, white_png, no_config, capsys):
        code = main([white_png, "--once", "--width", "10", "--config", no_config])
        assert code == 0
        assert "\x1b[38;2;255;255;255m" in capsys.readouterr().out

    def test_invalid_width_exit_code(self, white_png, no_config, capsys):
        assert main([white_png, "--once", "--width", "3", "--config", no_config]) == 2
        assert "invalid settings" in capsys.readouterr().err

    def test_missing_source_exit_code(self, tmp_path, no_config, capsys):
        assert main([str(tmp_path / "missing.mp4"), "--once", "--config", no_config]) == 1
        assert "not found" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert "ascii-cam" in capsys.readouterr().out
