"""
Tests for the lifecycle engine: every failure branch, plus the graceful path.
"""

import os
import signal
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from standalone.errors import CreateFailed, RunFailed, SignalArmError
from standalone.lifecycle.lifecycle_engine import EXIT_FAILURE, EXIT_OK, LifecycleEngine
from standalone.lifecycle.shutdown_notifier import ShutdownNotifier
from standalone.lifecycle.signal_bridge import SignalBridge
from standalone.models.args import HarnessArgs
from standalone.models.enums import LifecycleState as S, LogLevel
from standalone.utils.logger import Logger, configure_logger


def notified_bridge() -> SignalBridge:
    """Bridge that has already handled a SIGTERM (no real handlers)."""
    bridge = SignalBridge(ShutdownNotifier())
    bridge.handle(signal.SIGTERM)
    return bridge


@pytest.fixture
def args(config_env):
    config_env.write(config_env.confdir, "fake.yaml", "answer: 42\n")
    return HarnessArgs(log_level=LogLevel.DEBUG, confdir=config_env.confdir)


def engine_for(component, args, install_signals=notified_bridge):
    return LifecycleEngine(component, args, install_signals=install_signals)


def test_missing_config_terminates_without_calling_component(make_component, config_env, capsys):
    component = make_component()
    engine = engine_for(component, HarnessArgs(log_level=LogLevel.INFO, confdir=config_env.confdir))

    assert engine.run() == EXIT_FAILURE

    assert component.calls == []
    assert engine.history == [S.START, S.BOOTSTRAP_LOG, S.CONFIG_MISSING, S.TERMINATED]
    assert "could not obtain valid configuration" in capsys.readouterr().out


def test_config_is_passed_to_create(make_component, args):
    component = make_component()

    engine_for(component, args).run()

    assert component.calls[0] == ("create", {"answer": 42})


def test_create_failure_runs_shutdown_with_error_cleanup(make_component, args, capsys):
    def create(cls, config, a):
        raise CreateFailed(cleanup="partial", message="socket busy")

    install = MagicMock()
    component = make_component(create=create)
    engine = engine_for(component, args, install_signals=install)

    assert engine.run() == EXIT_FAILURE

    assert component.calls[1:] == [("shutdown", "partial", None)]
    install.assert_not_called()
    assert engine.history[-3:] == [S.CREATE_FAILED, S.SHUTDOWN, S.TERMINATED]
    out = capsys.readouterr().out
    assert "socket busy" in out
    assert "fake cleaned up after error" in out


def test_unexpected_create_exception_shuts_down_with_no_cleanup(make_component, args, capsys):
    def create(cls, config, a):
        raise KeyError("missing")

    component = make_component(create=create)

    assert engine_for(component, args).run() == EXIT_FAILURE

    assert component.calls[1:] == [("shutdown", None, None)]
    assert "raised unexpectedly" in capsys.readouterr().out


def test_create_returning_non_pair_is_a_failure(make_component, args):
    component = make_component(create=lambda cls, config, a: cls())

    assert engine_for(component, args).run() == EXIT_FAILURE
    assert component.calls[1:] == [("shutdown", None, None)]


def test_signal_arm_failure_shuts_down_without_running(make_component, args, capsys):
    register = MagicMock(side_effect=[signal.SIG_DFL, OSError(22, "Invalid argument")])
    component = make_component()
    engine = engine_for(
        component, args,
        install_signals=lambda: SignalBridge.install(register=register, set_wakeup=MagicMock(return_value=-1)),
    )

    assert engine.run() == EXIT_FAILURE

    assert register.call_count == 2
    assert component.calls[1:] == [("shutdown", "create-cleanup", None)]
    assert engine.history[-4:] == [S.CREATED, S.SIGNAL_ARM_FAILED, S.SHUTDOWN, S.TERMINATED]
    assert "error registering signal handler" in capsys.readouterr().out


def test_run_failure_goes_through_shutdown_err_only(make_component, args):
    def run(self):
        raise RunFailed(cleanup="half-started")

    component = make_component(run=run)
    engine = engine_for(component, args)

    assert engine.run() == EXIT_FAILURE

    assert [c[0] for c in component.calls] == ["create", "run", "shutdown_err"]
    assert component.calls[-1] == ("shutdown_err", "create-cleanup", "half-started")
    assert engine.history[-3:] == [S.RUNNING, S.SHUTDOWN_ERR, S.TERMINATED]


def test_unexpected_run_exception_goes_through_shutdown_err(make_component, args):
    def run(self):
        raise RuntimeError("thread failed")

    component = make_component(run=run)

    assert engine_for(component, args).run() == EXIT_FAILURE
    assert component.calls[-1] == ("shutdown_err", "create-cleanup", None)


def test_graceful_shutdown_on_real_sigterm(make_component, args, restore_signals, capsys):
    def run(self):
        os.kill(os.getpid(), signal.SIGTERM)
        return "run-cleanup"

    component = make_component(run=run)
    engine = LifecycleEngine(component, args)

    assert engine.run() == EXIT_OK

    assert component.calls[1:] == [("run",), ("shutdown", "create-cleanup", "run-cleanup")]
    assert engine.history == [
        S.START, S.BOOTSTRAP_LOG, S.CONFIG_RESOLVED, S.CREATED, S.SIGNALS_ARMED,
        S.RUNNING, S.AWAITING_SIGNAL, S.SHUTDOWN, S.TERMINATED,
    ]
    assert "fake shutdown successful" in capsys.readouterr().out


def test_broken_notifier_still_shuts_down(make_component, args, capsys):
    def closed_bridge():
        notifier = ShutdownNotifier()
        notifier.close()
        return SignalBridge(notifier)

    component = make_component()
    engine = engine_for(component, args, install_signals=closed_bridge)

    assert engine.run() == EXIT_OK

    assert component.calls[-1] == ("shutdown", "create-cleanup", "run-cleanup")
    assert "bad shutdown notifier" in capsys.readouterr().out


def test_shutdown_error_is_logged_and_process_terminates(make_component, args, capsys):
    def shutdown(create_cleanup, run_cleanup):
        raise RuntimeError("disk gone")

    component = make_component(shutdown=shutdown)
    engine = engine_for(component, args)

    assert engine.run() == EXIT_OK

    assert engine.state is S.TERMINATED
    assert "Error shutting down fake: disk gone" in capsys.readouterr().out


def test_config_model_skips_invalid_file_and_uses_next(make_component, config_env, capsys):
    class FakeConfig(BaseModel):
        answer: int

    config_env.write(config_env.home_confdir, "fake.yaml", "answer: not-a-number\n")
    config_env.write(config_env.confdir, "fake.yaml", "answer: 7\n")
    component = make_component(model=FakeConfig)
    args = HarnessArgs(log_level=LogLevel.INFO, confdir=config_env.confdir)

    assert engine_for(component, args).run() == EXIT_OK

    assert component.calls[0] == ("create", FakeConfig(answer=7))
    assert "invalid configuration" in capsys.readouterr().out


def test_wait_for_shutdown_requires_armed_signals(make_component, args):
    engine = engine_for(make_component(), args)

    with pytest.raises(RuntimeError):
        engine.wait_for_shutdown()


def test_arm_error_type_is_reported_with_signal_name(make_component, args, capsys):
    def fail():
        raise SignalArmError("SIGHUP", OSError(1, "Operation not permitted"))

    assert engine_for(make_component(), args, install_signals=fail).run() == EXIT_FAILURE
    assert "SIGHUP" in capsys.readouterr().out


@pytest.mark.parametrize("level", list(LogLevel))
def test_every_bootstrap_level_reaches_shutdown(make_component, config_env, level):
    config_env.write(config_env.confdir, "fake.yaml", "answer: 1\n")
    component = make_component()
    engine = engine_for(component, HarnessArgs(log_level=level, confdir=config_env.confdir))

    assert engine.run() == EXIT_OK

    assert S.CONFIG_RESOLVED in engine.history
    assert component.calls[-1] == ("shutdown", "create-cleanup", "run-cleanup")


def test_config_with_invalid_encoding_is_skipped(make_component, config_env, capsys):
    (config_env.home_confdir).mkdir(parents=True)
    (config_env.home_confdir / "fake.yaml").write_bytes(b"answer: \xff\xfe\n")
    config_env.write(config_env.confdir, "fake.yaml", "answer: 1\n")
    component = make_component()
    args = HarnessArgs(log_level=LogLevel.INFO, confdir=config_env.confdir)

    assert engine_for(component, args).run() == EXIT_OK

    assert component.calls[0] == ("create", {"answer": 1})
    assert "error parsing configuration" in capsys.readouterr().out


def test_log_config_with_invalid_encoding_keeps_bootstrap(make_component, args, config_env):
    (config_env.confdir / "constellation-log.yaml").write_bytes(b"level: \xff\n")
    component = make_component()

    assert engine_for(component, args).run() == EXIT_OK
    assert component.calls[-1][0] == "shutdown"


def test_inaccessible_home_config_dir_is_skipped(make_component, args, config_env, monkeypatch):
    real_is_file = Path.is_file

    def is_file(path):
        if config_env.home_confdir in path.parents:
            raise PermissionError(13, "Permission denied", str(path))
        return real_is_file(path)

    monkeypatch.setattr(Path, "is_file", is_file)
    component = make_component()

    assert engine_for(component, args).run() == EXIT_OK
    assert component.calls[0] == ("create", {"answer": 42})


def test_injected_logger_receives_engine_messages(make_component, config_env, capsys):
    configure_logger(console=False)
    component = make_component()
    engine = LifecycleEngine(
        component,
        HarnessArgs(log_level=LogLevel.INFO, confdir=config_env.confdir),
        install_signals=notified_bridge,
        logger=Logger(use_colors=False),
    )

    assert engine.run() == EXIT_FAILURE

    assert "could not obtain valid configuration" in capsys.readouterr().out
