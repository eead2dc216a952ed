#!/usr/bin/env python3
"""
Echo component - minimal standalone executable.

Reads echo.yaml from the configuration directories, prints a message every
`interval` seconds from a worker thread, and stops cleanly on SIGTERM,
SIGINT or SIGHUP (press Ctrl+C twice to force an immediate exit).

Example echo.yaml:
    message: "hello"
    interval: 1.5

Run:
    python samples/echo_component.py -c samples/config -v
"""

import threading
from typing import Optional

import click
from pydantic import BaseModel, Field

from standalone import CreateFailed, HarnessArgs, RunFailed, Standalone
from standalone.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.GENERAL)


class EchoConfig(BaseModel):
    message: str = Field(..., description="Text printed by the worker")
    interval: float = Field(1.0, gt=0, description="Seconds between messages")


class EchoWorker:
    """Background thread printing the configured message."""

    def __init__(self, message: str, interval: float):
        self._message = message
        self._interval = interval
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._loop, name="echo-worker", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            log.info(self._message)

    def stop(self) -> None:
        self._stop.set()
        self._thread.join(timeout=self._interval * 2)


class EchoComponent(Standalone):
    COMPONENT_NAME = "echo"
    CONFIG_FILES = ("echo.yaml", "echo.yml")
    VERSION = "0.1.0"
    config_model = EchoConfig

    def __init__(self, config: EchoConfig, repeat: int):
        self.config = config
        self.repeat = repeat

    @classmethod
    def cmdargs(cls):
        return [click.Option(["--repeat"], type=int, default=1, help="Print the message this many times per tick")]

    @classmethod
    def create(cls, config: EchoConfig, args: HarnessArgs):
        repeat = args.extra.get("repeat", 1)
        if repeat < 1:
            raise CreateFailed(cleanup=None, message="--repeat must be at least 1")
        return cls(config, repeat), None

    def run(self) -> EchoWorker:
        worker = EchoWorker(" ".join([self.config.message] * self.repeat), self.config.interval)
        try:
            worker.start()
        except RuntimeError as err:
            raise RunFailed(cleanup=None, message=f"could not start worker: {err}")
        return worker

    @classmethod
    def shutdown(cls, create_cleanup: None, run_cleanup: Optional[EchoWorker]) -> None:
        if run_cleanup is not None:
            run_cleanup.stop()
        log.info("echo stopped")

    @classmethod
    def shutdown_err(cls, create_cleanup: None, run_error_cleanup: None) -> None:
        log.warn("echo stopped after run failure")


if __name__ == "__main__":
    EchoComponent.main()
