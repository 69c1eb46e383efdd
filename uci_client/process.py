import subprocess
import threading
from typing import IO, Optional, Sequence

from .errors import (
    EngineAlreadyRunningError,
    EngineCommunicationError,
    EngineConfigurationError,
    EngineNotRunningError,
    EngineStartError,
)
from .protocol import CMD_QUIT

STOP_TIMEOUT_S = 2.0


class EngineProcess:
    """Owns one engine child process and its three text streams."""

    def __init__(
        self,
        path: Optional[str],
        args: Sequence[str] = (),
        *,
        workdir: Optional[str] = None,
    ) -> None:
        self.path = path
        self.args = tuple(args)
        self.workdir = workdir
        self._proc: Optional[subprocess.Popen] = None
        self._write_lock = threading.Lock()
        self._last_returncode: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    @property
    def started(self) -> bool:
        return self._proc is not None

    @property
    def stdout(self) -> Optional[IO[str]]:
        return self._proc.stdout if self._proc else None

    @property
    def stderr(self) -> Optional[IO[str]]:
        return self._proc.stderr if self._proc else None

    @property
    def pid(self) -> Optional[int]:
        return self._proc.pid if self._proc else None

    @property
    def returncode(self) -> Optional[int]:
        if self._proc is not None:
            return self._proc.poll()
        return self._last_returncode

    def start(self) -> None:
        if self._proc is not None:
            raise EngineAlreadyRunningError("Engine is already running")
        if not self.path:
            raise EngineConfigurationError("Engine executable path not set")

        try:
            self._proc = subprocess.Popen(
                [self.path, *self.args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
                cwd=self.workdir,
            )
        except OSError as exc:
            self._proc = None
            raise EngineStartError(f"Failed to start engine: {exc}") from exc
        self._last_returncode = None

    def send(self, command: str) -> None:
        with self._write_lock:
            proc = self._proc
            if proc is None or proc.stdin is None or proc.stdin.closed:
                raise EngineNotRunningError("Engine not running")
            try:
                proc.stdin.write(command + "\n")
                proc.stdin.flush()
            except (BrokenPipeError, OSError, ValueError) as exc:
                raise EngineCommunicationError(f"Error sending command: {exc}") from exc

    def stop(self, timeout: float = STOP_TIMEOUT_S) -> bool:
        """Ask the engine to quit, killing it after ``timeout`` seconds.

        Returns True when the process exited on its own. Calling this with no
        process is a no-op returning False.
        """
        proc = self._proc
        if proc is None:
            return False

        graceful = False
        try:
            if proc.poll() is None:
                try:
                    self.send(CMD_QUIT)
                except (EngineNotRunningError, EngineCommunicationError):
                    pass
            try:
                proc.wait(timeout=timeout)
                graceful = True
            except subprocess.TimeoutExpired:
                proc.kill()
                try:
                    proc.wait(timeout=1.0)
                except subprocess.TimeoutExpired:
                    pass
        finally:
            with self._write_lock:
                for stream in (proc.stdin, proc.stdout, proc.stderr):
                    if stream is None:
                        continue
                    try:
                        stream.close()
                    except (OSError, ValueError):
                        pass
                self._last_returncode = proc.poll()
                self._proc = None
        return graceful
