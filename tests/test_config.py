"""Tests for loading the shell configuration."""

import json
import sys
from pathlib import Path

import pytest

from py_sh.config import (
    DEFAULT_MAX_PIPELINES,
    DEFAULT_MAX_STAGES,
    ShellConfig,
    default_subshell_argv,
    load_config,
    parse_log_level,
)
from py_sh.errors import ConfigError
from py_sh.logging import LogLevel

_CUSTOM_LIMIT = 8


def _write(tmp_path: Path, data: object) -> Path:
    """Write ``data`` as JSON and return the file."""
    path = tmp_path / "py-sh.json"
    path.write_text(json.dumps(data))
    return path


class TestDefaults:
    """Verify the built-in settings."""

    def test_classic_prompt_and_banner(self) -> None:
        """The defaults match the classic prompt."""
        config = ShellConfig()
        assert config.prompt == "> "
        assert config.banner == "Shell started:"

    def test_default_limits(self) -> None:
        """64 pipelines of 64 stages."""
        config = ShellConfig()
        assert config.max_pipelines == DEFAULT_MAX_PIPELINES
        assert config.max_stages == DEFAULT_MAX_STAGES

    def test_silent_by_default(self) -> None:
        """No log echo unless asked for."""
        assert ShellConfig().log_level is None

    def test_subshell_is_this_interpreter(self) -> None:
        """Subshells start a quiet copy of the running Python."""
        assert default_subshell_argv() == (sys.executable, "-m", "py_sh", "--quiet")

    def test_no_path_gives_defaults(self) -> None:
        """load_config() without a file returns the defaults."""
        assert load_config() == ShellConfig()

    def test_zero_limit_rejected(self) -> None:
        """A limit below one would reject every line."""
        with pytest.raises(ConfigError, match="max_stages must be at least 1"):
            ShellConfig(max_stages=0)

    def test_empty_subshell_rejected(self) -> None:
        """A subshell needs a program."""
        with pytest.raises(ConfigError):
            ShellConfig(subshell_argv=())


class TestLoadConfig:
    """Verify JSON files are validated and applied."""

    def test_values_applied(self, tmp_path: Path) -> None:
        """Known keys override the defaults."""
        path = _write(
            tmp_path,
            {"prompt": "$ ", "max_stages": _CUSTOM_LIMIT, "log_level": "debug"},
        )
        config = load_config(path)
        assert config.prompt == "$ "
        assert config.max_stages == _CUSTOM_LIMIT
        assert config.max_pipelines == DEFAULT_MAX_PIPELINES
        assert config.log_level is LogLevel.DEBUG

    def test_subshell_gets_same_file(self, tmp_path: Path) -> None:
        """Subshells are pointed at the same config file."""
        path = _write(tmp_path, {})
        argv = load_config(path).subshell_argv
        assert argv[-2:] == ("--config", str(path))

    def test_missing_file(self, tmp_path: Path) -> None:
        """An unreadable file is a config error."""
        with pytest.raises(ConfigError, match="Cannot load config"):
            load_config(tmp_path / "nope.json")

    def test_bad_json(self, tmp_path: Path) -> None:
        """Malformed JSON is a config error."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Cannot load config"):
            load_config(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        """The top level must be an object."""
        with pytest.raises(ConfigError, match="JSON object"):
            load_config(_write(tmp_path, [1, 2]))

    def test_unknown_key(self, tmp_path: Path) -> None:
        """Typos are reported rather than ignored."""
        with pytest.raises(ConfigError, match="promt"):
            load_config(_write(tmp_path, {"promt": "$ "}))

    def test_limit_must_be_int(self, tmp_path: Path) -> None:
        """A string limit is rejected."""
        with pytest.raises(ConfigError, match="max_pipelines must be an integer"):
            load_config(_write(tmp_path, {"max_pipelines": "10"}))

    def test_bool_is_not_an_int(self, tmp_path: Path) -> None:
        """``true`` is not a limit."""
        with pytest.raises(ConfigError, match="must be an integer"):
            load_config(_write(tmp_path, {"max_stages": True}))

    def test_prompt_must_be_str(self, tmp_path: Path) -> None:
        """A numeric prompt is rejected."""
        with pytest.raises(ConfigError, match="prompt must be a string"):
            load_config(_write(tmp_path, {"prompt": 5}))

    def test_negative_limit(self, tmp_path: Path) -> None:
        """Limits from a file are range-checked too."""
        with pytest.raises(ConfigError, match="at least 1"):
            load_config(_write(tmp_path, {"max_pipelines": -1}))


class TestParseLogLevel:
    """Verify level names."""

    @pytest.mark.parametrize("name", ["info", "INFO", "Info"])
    def test_case_insensitive(self, name: str) -> None:
        """Any case is accepted."""
        assert parse_log_level(name) is LogLevel.INFO

    def test_unknown_name(self) -> None:
        """An unknown level lists the choices."""
        with pytest.raises(ConfigError, match="debug, info, warning, error"):
            parse_log_level("loud")

    def test_non_string(self) -> None:
        """Numbers are not level names."""
        with pytest.raises(ConfigError):
            parse_log_level(1)
