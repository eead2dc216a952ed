"""
Tests for command line / environment resolution and the click command.
"""

import os
import signal
from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from standalone.cli import build_command, component_env_name, read_env, resolve_args
from standalone.errors import ArgumentError
from standalone.models.enums import LogLevel


# === resolve_args ===

def test_defaults_without_flags_or_env():
    args = resolve_args("echo", env={})

    assert args.log_level is LogLevel.WARN
    assert args.confdir is None
    assert args.extra == {}


@pytest.mark.parametrize("count,level", [
    (0, LogLevel.WARN),
    (1, LogLevel.INFO),
    (2, LogLevel.DEBUG),
    (3, LogLevel.TRACE),
])
def test_verbose_count_maps_to_level(count, level):
    assert resolve_args("echo", verbose=count, env={}).log_level is level


def test_more_than_three_verbose_flags_rejected():
    with pytest.raises(ArgumentError, match="More than three verbose flags is redundant"):
        resolve_args("echo", verbose=4, env={})


def test_confdir_precedence():
    env = {"CONSTELLATION_ECHO_CONFDIR": "/component", "CONSTELLATION_CONFDIR": "/general"}

    assert resolve_args("echo", confdir="/cli", env=env).confdir == Path("/cli")
    assert resolve_args("echo", env=env).confdir == Path("/component")
    assert resolve_args("echo", env={"CONSTELLATION_CONFDIR": "/general"}).confdir == Path("/general")


def test_loglvl_precedence():
    env = {"CONSTELLATION_ECHO_LOGLVL": "debug", "CONSTELLATION_LOGLVL": "error"}

    assert resolve_args("echo", loglvl="trace", env=env).log_level is LogLevel.TRACE
    assert resolve_args("echo", env=env).log_level is LogLevel.DEBUG
    assert resolve_args("echo", env={"CONSTELLATION_LOGLVL": "error"}).log_level is LogLevel.ERROR


def test_env_loglvl_accepts_warning_alias():
    assert resolve_args("echo", env={"CONSTELLATION_LOGLVL": "WARNING"}).log_level is LogLevel.WARN


def test_verbose_conflicts_with_component_env_level():
    env = {"CONSTELLATION_ECHO_LOGLVL": "info"}

    with pytest.raises(ArgumentError) as exc:
        resolve_args("echo", verbose=1, env=env)

    assert exc.value.message == (
        "Cannot use verbose flag when setting log level through environment variable "
        "CONSTELLATION_ECHO_LOGLVL"
    )


def test_verbose_conflicts_with_general_env_level():
    with pytest.raises(ArgumentError, match="environment variable CONSTELLATION_LOGLVL"):
        resolve_args("echo", verbose=2, env={"CONSTELLATION_LOGLVL": "info"})


def test_verbose_conflicts_with_command_line_level():
    with pytest.raises(ArgumentError, match="through command line"):
        resolve_args("echo", loglvl="info", verbose=1, env={})


def test_unparseable_env_level():
    with pytest.raises(ArgumentError, match="error parsing loglvl"):
        resolve_args("echo", env={"CONSTELLATION_LOGLVL": "loud"})


def test_extra_options_are_carried():
    extra = {"repeat": 3}

    args = resolve_args("echo", extra=extra, env={})

    assert args.extra == {"repeat": 3}
    assert args.extra is not extra


def test_component_env_name_uppercases():
    assert component_env_name("echo", "CONFDIR") == "CONSTELLATION_ECHO_CONFDIR"


# === read_env ===

def test_read_env_missing_is_none():
    assert read_env("CONSTELLATION_CONFDIR", {}) is None


def test_read_env_rejects_undecodable_value():
    env = {"CONSTELLATION_CONFDIR": "/etc/\udcff"}

    with pytest.raises(ArgumentError, match="Invalid unicode in environment variable CONSTELLATION_CONFDIR"):
        read_env("CONSTELLATION_CONFDIR", env)


def test_undecodable_env_is_an_argument_error():
    with pytest.raises(ArgumentError):
        resolve_args("echo", env={"CONSTELLATION_ECHO_LOGLVL": "\udcffinfo"})


# === click command ===

@pytest.fixture
def runner():
    return CliRunner()


def test_version_option(make_component, runner):
    result = runner.invoke(build_command(make_component()), ["--version"])

    assert result.exit_code == 0
    assert "fake, version 0.0.1" in result.output


def test_too_many_verbose_flags_exit_1(make_component, runner, config_env):
    component = make_component()

    result = runner.invoke(build_command(component), ["-vvvv"])

    assert result.exit_code == 1
    assert "More than three verbose flags is redundant" in result.output
    assert component.calls == []


def test_invalid_loglvl_choice_is_a_usage_error(make_component, runner, config_env):
    result = runner.invoke(build_command(make_component()), ["--loglvl", "loud"])

    assert result.exit_code == 2


def test_missing_config_exit_1(make_component, runner, config_env):
    component = make_component()

    result = runner.invoke(build_command(component), ["-c", str(config_env.confdir)])

    assert result.exit_code == 1
    assert "could not obtain valid configuration" in result.output
    assert component.calls == []


def test_component_options_reach_create(make_component, runner, config_env, restore_signals):
    config_env.write(config_env.confdir, "fake.yaml", "answer: 1\n")
    seen = {}

    def create(cls, config, args):
        seen.update(args.extra)
        seen["level"] = args.log_level
        return cls(), None

    def run(self):
        os.kill(os.getpid(), signal.SIGTERM)

    base = make_component(create=create, run=run)

    class WithOption(base):
        @classmethod
        def cmdargs(cls):
            return [click.Option(["--repeat"], type=int, default=1)]

    result = runner.invoke(
        build_command(WithOption),
        ["-c", str(config_env.confdir), "-l", "debug", "--repeat", "3"],
    )

    assert result.exit_code == 0, result.output
    assert seen == {"repeat": 3, "level": LogLevel.DEBUG}
    assert base.calls[-1] == ("shutdown", None, None)
