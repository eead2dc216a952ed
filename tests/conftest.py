import os
import signal
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from standalone.lifecycle.component_protocol import Standalone
from standalone.lifecycle.signal_bridge import TERMINATION_SIGNALS
from standalone.models.enums import LogLevel
from standalone.utils.logger import configure_logger, get_logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Plain (uncolored) singleton logger, restored after each test."""
    logger = get_logger()
    configure_logger(min_level=LogLevel.INFO, use_colors=False, console=True, category_levels={})
    yield logger
    logger.close_file()
    configure_logger(min_level=LogLevel.INFO, use_colors=False, console=True, category_levels={})


@pytest.fixture
def restore_signals():
    """Put back the process's signal handlers and wakeup fd after tests that arm real ones."""
    signals = (*TERMINATION_SIGNALS, signal.SIGUSR1)
    saved = {sig: signal.getsignal(sig) for sig in signals}
    saved_wakeup = signal.set_wakeup_fd(-1)
    signal.set_wakeup_fd(saved_wakeup)
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler if handler is not None else signal.SIG_DFL)
    signal.set_wakeup_fd(saved_wakeup)


@pytest.fixture
def config_env(tmp_path, monkeypatch):
    """
    Isolated HOME and configuration directory.

    Every CONSTELLATION_* variable is removed from the environment.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    for name in list(os.environ):
        if name.startswith("CONSTELLATION_"):
            monkeypatch.delenv(name)

    confdir = tmp_path / "conf"
    confdir.mkdir()

    def write(directory: Path, name: str, text: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(text, encoding="utf-8")
        return path

    return SimpleNamespace(
        home=home,
        home_confdir=home / ".config" / "constellation",
        confdir=confdir,
        write=write,
    )


@pytest.fixture
def make_component():
    """
    Build a Standalone subclass that records every lifecycle call.

    Hooks (create/run/shutdown/shutdown_err) replace the default behavior:
    create returns (instance, "create-cleanup"), run returns "run-cleanup".
    """
    def factory(create=None, run=None, shutdown=None, shutdown_err=None,
                files=("fake.yaml",), model=None):
        calls = []

        class FakeComponent(Standalone):
            COMPONENT_NAME = "fake"
            CONFIG_FILES = files
            VERSION = "0.0.1"
            config_model = model

            @classmethod
            def create(cls, config, args):
                calls.append(("create", config))
                if create is not None:
                    return create(cls, config, args)
                return cls(), "create-cleanup"

            def run(self):
                calls.append(("run",))
                if run is not None:
                    return run(self)
                return "run-cleanup"

            @classmethod
            def shutdown(cls, create_cleanup, run_cleanup):
                calls.append(("shutdown", create_cleanup, run_cleanup))
                if shutdown is not None:
                    shutdown(create_cleanup, run_cleanup)

            @classmethod
            def shutdown_err(cls, create_cleanup, run_error_cleanup):
                calls.append(("shutdown_err", create_cleanup, run_error_cleanup))
                if shutdown_err is not None:
                    shutdown_err(create_cleanup, run_error_cleanup)

        FakeComponent.calls = calls
        return FakeComponent

    return factory
