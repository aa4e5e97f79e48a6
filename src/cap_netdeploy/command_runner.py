"""!
@brief Shared subprocess execution helpers.
@details Provides a consistent wrapper around :func:`subprocess.run` that
records structured telemetry for every installer, uninstaller and ``net use``
invocation. Commands run synchronously with no timeout, and stdout and stderr
are captured together so failures can be diagnosed from one block of text.
"""
from __future__ import annotations

import subprocess
import time
from dataclasses import dataclass
from typing import Mapping, MutableMapping, Sequence

from . import logging_ext
from .errors import CommandFailedError


@dataclass
class CommandResult:
    """!
    @brief Outcome metadata returned by :func:`run_command`.
    @details ``output`` holds the combined stdout/stderr text. ``error`` is set
    when the process could not be started at all.
    """

    command: Sequence[str] | str
    returncode: int
    output: str
    duration: float
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.returncode == 0


def _display(command: Sequence[str] | str) -> str:
    if isinstance(command, str):
        return command
    return subprocess.list2cmdline(list(command))


def _program(command: Sequence[str] | str) -> str:
    if isinstance(command, str):
        return command
    return command[0] if command else ""


def run_command(
    command: Sequence[str] | str,
    *,
    event: str,
    human_message: str | None = None,
    extra: Mapping[str, object] | None = None,
    expect_failure: bool = False,
) -> CommandResult:
    """!
    @brief Execute ``command`` while emitting structured telemetry records.
    @details A string is handed to the OS verbatim as a command line; a
    sequence is passed as an argument vector. The helper logs ``<event>_plan``
    before the call and ``<event>_result`` (or ``<event>_missing`` /
    ``<event>_error`` when the program cannot be launched) afterwards.
    @param command Command line or argument sequence.
    @param event Base event identifier recorded in machine logs.
    @param human_message Optional message logged to the human channel first.
    @param extra Mapping merged into machine log payloads.
    @param expect_failure Log a non-zero exit at debug level instead of as a
    warning, for steps whose failure is routine.
    @returns :class:`CommandResult` describing the observed outcome.
    """

    human_logger = logging_ext.get_human_logger()
    machine_logger = logging_ext.get_machine_logger()

    invocation: Sequence[str] | str = command if isinstance(command, str) else [str(part) for part in command]
    metadata: MutableMapping[str, object] = logging_ext.build_event_extra(
        f"{event}_plan", command=_display(invocation)
    )
    if extra:
        metadata.update(extra)
    machine_logger.info(f"{event}_plan", extra=dict(metadata))

    if human_message:
        human_logger.info(human_message)

    start = time.monotonic()
    try:
        completed = subprocess.run(  # noqa: S603 - intentional command execution
            invocation,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
        )
    except FileNotFoundError as exc:
        duration = time.monotonic() - start
        human_logger.error("Command not found: %s", _program(invocation))
        failure_meta = logging_ext.build_event_extra(
            f"{event}_missing", command=_display(invocation), duration=duration, error=str(exc)
        )
        if extra:
            failure_meta.update(extra)
        machine_logger.error(f"{event}_missing", extra=failure_meta)
        return CommandResult(
            command=invocation,
            returncode=127,
            output="",
            duration=duration,
            error=str(exc),
        )
    except OSError as exc:
        duration = time.monotonic() - start
        human_logger.error("Failed to execute %s: %s", _program(invocation), exc)
        failure_meta = logging_ext.build_event_extra(
            f"{event}_error", command=_display(invocation), duration=duration, error=str(exc)
        )
        if extra:
            failure_meta.update(extra)
        machine_logger.error(f"{event}_error", extra=failure_meta)
        return CommandResult(
            command=invocation,
            returncode=1,
            output="",
            duration=duration,
            error=str(exc),
        )

    duration = time.monotonic() - start
    output = completed.stdout or ""
    result_meta = logging_ext.build_event_extra(
        f"{event}_result",
        command=_display(invocation),
        return_code=completed.returncode,
        output=output,
        duration=duration,
    )
    if extra:
        result_meta.update(extra)
    machine_logger.info(f"{event}_result", extra=result_meta)

    if completed.returncode != 0:
        log_exit = human_logger.debug if expect_failure else human_logger.warning
        log_exit("Command %s exited with %s", _program(invocation), completed.returncode)

    return CommandResult(
        command=invocation,
        returncode=completed.returncode,
        output=output,
        duration=duration,
    )


def check_command(
    command: Sequence[str] | str,
    *,
    event: str,
    description: str,
    human_message: str | None = None,
) -> CommandResult:
    """!
    @brief Run ``command`` and raise unless it exits cleanly.
    @raises CommandFailedError With the captured output on a launch failure or
    non-zero exit code.
    """

    result = run_command(command, event=event, human_message=human_message)
    if not result.succeeded:
        raise CommandFailedError(
            description,
            result.command,
            result.returncode,
            result.output,
            error=result.error,
        )
    return result


__all__ = ["CommandResult", "check_command", "run_command"]
