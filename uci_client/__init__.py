"""Public package interface for the UCI engine client."""

from .candidates import CandidateAggregator, CandidateMove, ScoreType, parse_info_line
from .engine import EngineSettings, EngineState, UciEngine
from .errors import (
    EngineAlreadyRunningError,
    EngineCommunicationError,
    EngineConfigurationError,
    EngineError,
    EngineNotRunningError,
    EngineStartError,
)
from .events import ConsoleEventSink, EngineEventSink, EventQueue
from .process import EngineProcess
from .utils import ReportingLevel, resolve_engine_path

__all__ = [
    "CandidateAggregator",
    "CandidateMove",
    "ConsoleEventSink",
    "EngineAlreadyRunningError",
    "EngineCommunicationError",
    "EngineConfigurationError",
    "EngineError",
    "EngineEventSink",
    "EngineNotRunningError",
    "EngineProcess",
    "EngineSettings",
    "EngineStartError",
    "EngineState",
    "EventQueue",
    "ReportingLevel",
    "ScoreType",
    "UciEngine",
    "parse_info_line",
    "resolve_engine_path",
]
