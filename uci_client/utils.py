import os
import platform
import stat
from enum import IntEnum
from typing import Optional


class ReportingLevel(IntEnum):
    QUIET = 0
    BASIC = 1
    VERBOSE = 2


ENGINE_EXECUTABLES = {
    "Windows": "stockfish-windows.exe",
    "Linux": "stockfish-linux",
    "Darwin": "stockfish-macos",
}


def color_text(text, color_code):
    return f"\033[{color_code}m{text}\033[0m"

def debug_text(text):
    return f"{color_text('DEBUG', '31')} {text}"

def info_text(text):
    return f"{color_text('INFO', '34')}  {text}"

def sending_text(text):
    return f"{color_text('SENDING  ', '32')} {text}"

def received_text(text):
    return f"{color_text('RECEIVED ', '35')} {text}"


def ensure_executable(path: str) -> bool:
    try:
        mode = os.stat(path).st_mode
        if not mode & stat.S_IXUSR:
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        print(debug_text(f"Failed to set executable permissions on {path}: {exc}"))
        return False
    return True


def resolve_engine_path(engines_dir: str, platform_name: Optional[str] = None) -> Optional[str]:
    """Return the bundled engine binary for this platform, or None if unavailable."""

    system = platform_name or platform.system()
    executable = ENGINE_EXECUTABLES.get(system)
    if executable is None:
        print(debug_text(f"Unsupported platform: {system}"))
        return None

    path = os.path.abspath(os.path.join(engines_dir, executable))
    if not os.path.isfile(path):
        print(debug_text(f"Engine executable not found at: {path}"))
        return None

    if system != "Windows" and not ensure_executable(path):
        return None
    return path
