"""
Models package - data models for the standalone harness
"""

from .enums import LogLevel, LogCategory, LifecycleState
from .args import HarnessArgs
from .outcome import Succeeded, Failed, PhaseOutcome, capture_phase

__all__ = [
    'LogLevel',
    'LogCategory',
    'LifecycleState',
    'HarnessArgs',
    'Succeeded',
    'Failed',
    'PhaseOutcome',
    'capture_phase',
]
