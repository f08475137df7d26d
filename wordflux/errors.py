"""
Error taxonomy for per-file word counting failures.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kind of failure recorded for a single file"""
    NOT_FOUND = "not_found"
    IS_DIRECTORY = "is_directory"
    IO_ERROR = "io_error"
    WORKER_CRASHED = "worker_crashed"
    WORKER_TIMEOUT = "worker_timeout"


class WordCountError(Exception):
    """Failure of one file's scan. Never aborts the rest of a run."""

    kind = ErrorKind.IO_ERROR

    def __init__(self, path: str, message: str, cause: Optional[BaseException] = None,
                 kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.path = path
        self.message = message
        self.cause = cause
        if kind is not None:
            self.kind = kind

    def __reduce__(self):
        # The cause may not survive pickling across the worker queue
        return (_restore_error, (self.__class__, self.path, self.message, self.kind))

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'message': self.message,
        }


class NotFoundError(WordCountError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(path, f"File not found: {path}", cause)


class IsDirectoryError(WordCountError):
    kind = ErrorKind.IS_DIRECTORY

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(path, f"Path is a directory, not a file: {path}", cause)


class ScanIOError(WordCountError):
    kind = ErrorKind.IO_ERROR

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(path, f"Read failed for {path}{detail}", cause)


def _restore_error(cls, path, message, kind):
    error = cls.__new__(cls)
    WordCountError.__init__(error, path, message, None, kind)
    return error


def worker_crashed(path: str, detail: str) -> WordCountError:
    """Failure synthesised by the orchestrator for a worker that died silently"""
    return WordCountError(path, f"Worker crashed while processing {path}: {detail}",
                          kind=ErrorKind.WORKER_CRASHED)


def worker_timeout(path: str, timeout: float) -> WordCountError:
    """Failure synthesised by the orchestrator for a worker past its deadline"""
    return WordCountError(path, f"Worker timed out after {timeout:.1f}s processing {path}",
                          kind=ErrorKind.WORKER_TIMEOUT)
