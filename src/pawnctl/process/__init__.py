"""Server process bookkeeping and platform process control."""

from ._controller import ProcessController, WindowLaunch, get_process_controller
from ._posix import PosixProcessController
from ._state import ProcessState, ServerStateStore, remove_temp_files
from ._windows import WindowsProcessController

__all__ = [
    "PosixProcessController",
    "ProcessController",
    "ProcessState",
    "ServerStateStore",
    "WindowLaunch",
    "WindowsProcessController",
    "get_process_controller",
    "remove_temp_files",
]
