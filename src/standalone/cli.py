"""
Command line entry for standalone components.

Resolves the log level and configuration directory override from the
command line and environment, then hands them to the lifecycle engine.

Precedence:
    confdir:   --confdir, CONSTELLATION_<NAME>_CONFDIR, CONSTELLATION_CONFDIR
    log level: --loglvl, CONSTELLATION_<NAME>_LOGLVL, CONSTELLATION_LOGLVL,
               then -v count (none: warn, -v: info, -vv: debug, -vvv: trace)

-v cannot be combined with an explicit log level from any source.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Type

import click

from standalone.errors import ArgumentError
from standalone.lifecycle.component_protocol import Standalone
from standalone.lifecycle.lifecycle_engine import run_lifecycle
from standalone.models.args import HarnessArgs
from standalone.models.enums import LogLevel
from standalone.utils.logger import parse_log_level

ENV_PREFIX = "CONSTELLATION"
CONFDIR_ENV_NAME = f"{ENV_PREFIX}_CONFDIR"
LOGLVL_ENV_NAME = f"{ENV_PREFIX}_LOGLVL"

LOGLVL_CHOICES = ["error", "warn", "info", "debug", "trace"]

VERBOSITY_LEVELS = {
    0: LogLevel.WARN,
    1: LogLevel.INFO,
    2: LogLevel.DEBUG,
    3: LogLevel.TRACE,
}


def component_env_name(component_name: str, suffix: str) -> str:
    return f"{ENV_PREFIX}_{component_name.upper()}_{suffix}"


def read_env(name: str, env: Mapping[str, str]) -> Optional[str]:
    """
    Read an environment variable that must be valid unicode.

    Undecodable bytes show up as lone surrogates (surrogateescape).

    Raises:
        ArgumentError: the value is not valid unicode
    """
    value = env.get(name)
    if value is None:
        return None
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise ArgumentError(f"Invalid unicode in environment variable {name}", variable=name) from None
    return value


def resolve_args(
    component_name: str,
    confdir: Optional[str] = None,
    loglvl: Optional[str] = None,
    verbose: int = 0,
    extra: Optional[Dict[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
) -> HarnessArgs:
    """
    Combine command line values with the environment.

    Raises:
        ArgumentError: bad environment encoding, unparseable level,
            conflicting or excessive verbosity flags
    """
    env = os.environ if env is None else env

    component_confdir = read_env(component_env_name(component_name, "CONFDIR"), env)
    general_confdir = read_env(CONFDIR_ENV_NAME, env)
    resolved_confdir = confdir or component_confdir or general_confdir

    if verbose not in VERBOSITY_LEVELS:
        raise ArgumentError("More than three verbose flags is redundant", verbose=verbose)
    verbose_level = VERBOSITY_LEVELS[verbose]

    level_sources = []
    for env_name in (component_env_name(component_name, "LOGLVL"), LOGLVL_ENV_NAME):
        value = read_env(env_name, env)
        if value is not None and verbose != 0:
            raise ArgumentError(
                f"Cannot use verbose flag when setting log level through environment variable {env_name}",
                variable=env_name,
            )
        level_sources.append(value)

    if loglvl is not None and verbose != 0:
        raise ArgumentError("Cannot use verbose flag when setting log level through command line")

    level_text = loglvl or level_sources[0] or level_sources[1]
    if level_text is None:
        level = verbose_level
    else:
        try:
            level = parse_log_level(level_text)
        except ValueError as err:
            raise ArgumentError(f"error parsing loglvl: {err}", value=level_text) from err

    return HarnessArgs(
        log_level=level,
        confdir=Path(resolved_confdir) if resolved_confdir else None,
        extra=dict(extra or {}),
    )


def build_command(component: Type[Standalone]) -> click.Command:
    """Build the click command running `component`."""

    @click.pass_context
    def callback(ctx: click.Context, confdir: Optional[str], loglvl: Optional[str],
                 verbose: int, **extra: Any) -> None:
        try:
            args = resolve_args(component.COMPONENT_NAME, confdir, loglvl, verbose, extra)
        except ArgumentError as err:
            click.echo(err.message, err=True)
            ctx.exit(1)
        ctx.exit(run_lifecycle(component, args))

    params = [
        click.Option(
            ["-c", "--confdir"],
            type=click.Path(file_okay=False),
            help="Location of configuration files",
        ),
        click.Option(
            ["-l", "--loglvl"],
            type=click.Choice(LOGLVL_CHOICES),
            help="Set logging level",
        ),
        click.Option(
            ["-v", "--verbose"],
            count=True,
            help="Increase logging verbosity",
        ),
        *component.cmdargs(),
    ]

    command = click.Command(
        name=component.COMPONENT_NAME,
        callback=callback,
        params=params,
        help=f"Run the {component.COMPONENT_NAME} component.",
    )
    return click.version_option(component.VERSION, prog_name=component.COMPONENT_NAME)(command)
