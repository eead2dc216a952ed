"""
Config Manager

Finds and loads component configuration files.

Configuration directories are searched in a fixed order (home directory
first, then the override / system directory). For each candidate file name,
in order of preference, every directory is tried before moving to the next
name. The first file that exists and parses wins; files that fail to open,
parse or validate are logged and skipped.
"""

import os
from pathlib import Path
from typing import Any, Callable, Iterator, List, Optional, Sequence, Type

import yaml
from pydantic import BaseModel, ValidationError

from standalone.utils.logger import get_logger, LogCategory, BoundLogger

log = get_logger().for_category(LogCategory.CONFIG)

CONFIG_DIR_ENV = "CONSTELLATION_CONF_DIR"
SYSTEM_CONFIG_DIR = "/usr/local/etc/constellation/"
HOME_CONFIG_SUBDIR = ".config/constellation/"


class ConfigParseError(ValueError):
    """A candidate configuration file exists but is not usable"""


def resolve_config_dirs(
    component_name: str,
    cli_override: Optional[Path],
    home_subdir: str = HOME_CONFIG_SUBDIR,
    system_dir: str = SYSTEM_CONFIG_DIR,
    env_name: str = CONFIG_DIR_ENV,
) -> List[Path]:
    """
    Get the set of configuration directories to search.

    Args:
        component_name: Name of the component (diagnostics only)
        cli_override: Directory given on the command line / component env var
        home_subdir: Subdirectory of $HOME holding per-user configuration
        system_dir: System-wide configuration directory
        env_name: Environment variable overriding system_dir

    Returns:
        [$HOME/<home_subdir>] (if HOME is set) followed by exactly one of
        cli_override, $<env_name>, system_dir
    """
    log.debug(f"resolving configuration directories for {component_name}")
    dirs: List[Path] = []

    # Home configuration directory first
    home = os.environ.get("HOME")
    if home:
        path = Path(home) / home_subdir
        log.debug("adding configuration directory", path=path)
        dirs.append(path)

    if cli_override is not None:
        path = Path(cli_override)
    elif os.environ.get(env_name):
        path = Path(os.environ[env_name])
    else:
        path = Path(system_dir)

    log.debug("adding configuration directory", path=path)
    dirs.append(path)

    return dirs


def iter_candidates(
    dirs: Sequence[Path],
    names: Sequence[str],
    logger: BoundLogger = log,
) -> Iterator[Path]:
    """
    Yield existing candidate files: names outer (preference order), dirs inner.
    """
    for name in names:
        logger.debug(f"looking for file {name}")
        for directory in dirs:
            path = Path(directory) / name
            logger.trace("trying path", path=path)
            try:
                found = path.is_file()
            except OSError as ex:
                logger.trace(f"cannot access {path}", error=str(ex))
                continue
            if found:
                yield path
            else:
                logger.trace(f"file {path} not found")


def read_yaml(path: Path) -> Any:
    """
    Read one YAML document.

    Raises:
        ConfigParseError: file cannot be read, is not valid YAML, or is empty
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as ex:
        raise ConfigParseError(f"error loading file: {ex}") from ex
    except (yaml.YAMLError, UnicodeDecodeError) as ex:
        raise ConfigParseError(f"error parsing configuration at {path}: {ex}") from ex

    if data is None:
        raise ConfigParseError(f"configuration at {path} is empty")
    return data


def parse_document(path: Path, model: Optional[Type[BaseModel]] = None) -> Any:
    """
    Load a YAML file, validating it into `model` when one is given.

    Raises:
        ConfigParseError: unreadable, unparseable, or fails validation
    """
    data = read_yaml(path)
    if model is None:
        return data
    try:
        return model.model_validate(data)
    except ValidationError as ex:
        raise ConfigParseError(f"invalid configuration at {path}: {ex}") from ex


def load_first_matching(
    dirs: Sequence[Path],
    names: Sequence[str],
    model: Optional[Type[BaseModel]] = None,
    parse: Callable[[Path, Optional[Type[BaseModel]]], Any] = parse_document,
    logger: BoundLogger = log,
) -> Optional[Any]:
    """
    Load the first usable configuration file.

    Args:
        dirs: Directories, in search order
        names: File names, in order of preference
        model: Optional pydantic model the document is validated into
        parse: Loader for one candidate file
        logger: Where scan diagnostics go

    Returns:
        Parsed document (or model instance), None if nothing usable was found
    """
    logger.debug("loading configuration")

    for path in iter_candidates(dirs, names, logger):
        logger.debug("loading config file", path=path)
        try:
            config = parse(path, model)
        except ConfigParseError as ex:
            logger.error(str(ex))
            continue
        logger.trace("found valid configuration", path=path)
        return config

    return None
