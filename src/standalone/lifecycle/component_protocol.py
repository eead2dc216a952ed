"""
Component protocol for standalone executables.

A component subclasses Standalone, describes where its configuration lives,
and implements the four lifecycle operations. Its program entry point is
then a single call:

    if __name__ == "__main__":
        EchoComponent.main()
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, List, Optional, Sequence, Tuple, Type

import click
from pydantic import BaseModel

from standalone.managers.config_manager import CONFIG_DIR_ENV, HOME_CONFIG_SUBDIR, SYSTEM_CONFIG_DIR
from standalone.managers.log_manager import DEFAULT_LOG_CONFIG_FILES
from standalone.models.args import HarnessArgs


class Standalone(ABC):
    """
    Base class for components run by the harness.

    Cleanup tokens:
        create() returns (component, create_cleanup) or raises
        CreateFailed(create_cleanup). run() returns run_cleanup or raises
        RunFailed(run_error_cleanup). The harness hands each token back to
        exactly one of shutdown() / shutdown_err().

    Example:
        class EchoComponent(Standalone):
            COMPONENT_NAME = "echo"
            CONFIG_FILES = ("echo.yaml", "echo.yml")
            VERSION = "1.0.0"

            @classmethod
            def create(cls, config, args):
                sock = open_socket(config["port"])
                return cls(sock), sock

            def run(self):
                return start_worker(self.sock)

            @classmethod
            def shutdown(cls, create, run):
                if run is not None:
                    run.stop()
                create.close()

            @classmethod
            def shutdown_err(cls, create, run):
                create.close()
    """

    # Environment variable overriding the system-wide configuration directory
    CONFIG_DIR_ENV: ClassVar[str] = CONFIG_DIR_ENV

    # Location of the system-wide configuration directory
    SYSTEM_CONFIG_DIR: ClassVar[str] = SYSTEM_CONFIG_DIR

    # Subdirectory of $HOME under which per-user configurations are stored
    HOME_CONFIG_SUBDIR: ClassVar[str] = HOME_CONFIG_SUBDIR

    # Possible names of logging configuration files, in order of preference
    LOG_CONFIG_FILES: ClassVar[Sequence[str]] = DEFAULT_LOG_CONFIG_FILES

    # Optional pydantic model the configuration document is validated into
    config_model: ClassVar[Optional[Type[BaseModel]]] = None

    # Name of the standalone component (also used in environment variables)
    COMPONENT_NAME: ClassVar[str]

    # Possible names of component configuration files, in order of preference
    CONFIG_FILES: ClassVar[Sequence[str]]

    # Version string reported by --version
    VERSION: ClassVar[str]

    @classmethod
    def cmdargs(cls) -> List[click.Parameter]:
        """Extra command line options; parsed values arrive in args.extra."""
        return []

    @classmethod
    @abstractmethod
    def create(cls, config: Any, args: HarnessArgs) -> Tuple["Standalone", Any]:
        """Create the component from its configuration."""

    @abstractmethod
    def run(self) -> Any:
        """Start the component; return once it is running."""

    @classmethod
    @abstractmethod
    def shutdown(cls, create_cleanup: Any, run_cleanup: Optional[Any]) -> None:
        """
        Shut down and release resources.

        run_cleanup is None when run() was never reached.
        """

    @classmethod
    @abstractmethod
    def shutdown_err(cls, create_cleanup: Any, run_error_cleanup: Any) -> None:
        """Shut down after run() failed."""

    @classmethod
    def main(cls) -> None:
        """
        Complete program entry point: parse arguments, run the lifecycle,
        exit with its status code. Never returns (click calls sys.exit).
        """
        from standalone.cli import build_command

        build_command(cls).main(prog_name=cls.COMPONENT_NAME)
