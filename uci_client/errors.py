"""Exceptions raised by the engine process layer."""


class EngineError(Exception):
    """Base class for engine lifecycle and communication failures."""

    pass


class EngineConfigurationError(EngineError):
    """Raised when the engine cannot be started because it is misconfigured."""

    pass


class EngineAlreadyRunningError(EngineError):
    pass


class EngineStartError(EngineError):
    """Raised when the operating system refuses to spawn the engine process."""

    pass


class EngineNotRunningError(EngineError):
    pass


class EngineCommunicationError(EngineError):
    """Raised when a command cannot be written to the engine's stdin."""

    pass
