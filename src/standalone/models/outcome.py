"""
Cleanup-typed phase outcomes
----------------------------

Every component phase (create, run) ends in one of two shapes:

- Succeeded(value, cleanup): the phase worked; `cleanup` is released at
  shutdown.
- Failed(cleanup, error): the phase failed, but whatever it acquired before
  failing is still described by `cleanup`, which may be of a different type
  than the success cleanup.

The lifecycle engine threads these tokens explicitly from one phase into the
matching shutdown call, so partially constructed resources are never mixed
up with fully running ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, Type, TypeVar, Union

from standalone.errors import PhaseFailed

T = TypeVar("T")
C = TypeVar("C")


@dataclass(frozen=True)
class Succeeded(Generic[T, C]):
    """Phase succeeded with a value and its cleanup token."""
    value: T
    cleanup: C

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(Generic[C]):
    """
    Phase failed; cleanup is still owed.

    `expected` is False when the phase raised something other than its
    PhaseFailed subclass, in which case no cleanup token exists (None).
    """
    cleanup: Optional[C]
    error: BaseException
    expected: bool = True

    @property
    def ok(self) -> bool:
        return False


PhaseOutcome = Union[Succeeded, Failed]


def capture_phase(
    phase: Callable[[], Any],
    failure: Type[PhaseFailed],
    split: Optional[Callable[[Any], Tuple[Any, Any]]] = None,
) -> PhaseOutcome:
    """
    Run a phase and fold its return value or failure into an outcome.

    Args:
        phase: Zero-argument callable executing the phase
        failure: PhaseFailed subclass the phase raises to report failure
        split: Turns the return value into (value, cleanup). Without it the
            whole return value is the cleanup token and value is None.

    Returns:
        Succeeded or Failed
    """
    try:
        result = phase()
        value, cleanup = split(result) if split is not None else (None, result)
    except failure as err:
        return Failed(cleanup=err.cleanup, error=err)
    except Exception as err:
        return Failed(cleanup=None, error=err, expected=False)
    return Succeeded(value=value, cleanup=cleanup)


def split_pair(result: Any) -> Tuple[Any, Any]:
    """Unpack a (value, cleanup) pair returned from create()."""
    if not isinstance(result, tuple) or len(result) != 2:
        raise TypeError(
            f"create() must return (component, cleanup), got {type(result).__name__}"
        )
    return result[0], result[1]
