"""!
@brief Terminal outcomes and their console reporting.
@details :class:`Outcome` is the pure value the driver returns. :func:`report`
is the only place that prints the category label, pauses so an unattended
console window stays readable, and hands back the process exit code.
"""
from __future__ import annotations

import enum
import sys
import time
from dataclasses import dataclass
from typing import Callable, TextIO

from . import constants, logging_ext


class OutcomeKind(enum.Enum):
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    UNSUCCESSFUL = "UNSUCCESSFUL"

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self]

    @property
    def pause_seconds(self) -> float:
        if self is OutcomeKind.SUCCESS:
            return constants.SUCCESS_PAUSE_SECONDS
        return constants.FAILURE_PAUSE_SECONDS


_EXIT_CODES = {
    OutcomeKind.SUCCESS: constants.EXIT_SUCCESS,
    OutcomeKind.ERROR: constants.EXIT_ERROR,
    OutcomeKind.UNSUCCESSFUL: constants.EXIT_UNSUCCESSFUL,
}


@dataclass(frozen=True)
class Outcome:
    """!
    @brief Terminal result of a run.
    @details ``error`` is only set for :attr:`OutcomeKind.ERROR` and carries the
    underlying exception for display and logging.
    """

    kind: OutcomeKind
    message: str
    error: BaseException | None = None

    @classmethod
    def success(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.SUCCESS, message)

    @classmethod
    def unsuccessful(cls, message: str) -> "Outcome":
        return cls(OutcomeKind.UNSUCCESSFUL, message)

    @classmethod
    def failure(cls, message: str, error: BaseException) -> "Outcome":
        return cls(OutcomeKind.ERROR, message, error)

    @property
    def exit_code(self) -> int:
        return self.kind.exit_code

    def render(self) -> str:
        text = f"{self.kind.value}: {self.message}"
        if self.error is not None:
            text = f"{text} ({self.error})"
        return text


def report(
    outcome: Outcome,
    *,
    pause: bool = True,
    stream: TextIO | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """!
    @brief Print ``outcome``, pause, and return its exit code.
    @details Waits 10 seconds after success and 5 minutes otherwise unless
    ``pause`` is false.
    """

    out = stream if stream is not None else sys.stdout
    out.write(outcome.render() + "\n\n")
    out.flush()

    logging_ext.get_machine_logger().info(
        "outcome",
        extra=logging_ext.build_event_extra(
            "outcome",
            kind=outcome.kind.value,
            summary=outcome.message,
            exit_code=outcome.exit_code,
            error=repr(outcome.error) if outcome.error is not None else None,
        ),
    )

    if pause:
        sleep(outcome.kind.pause_seconds)
    return outcome.exit_code


__all__ = ["Outcome", "OutcomeKind", "report"]
