from __future__ import annotations
import logging
import functools
from typing import Type, Callable, Any

class S3FetchError(Exception): pass
class RemoteListingError(S3FetchError): pass
class RemoteReadError(S3FetchError): pass
class LocalWriteError(S3FetchError): pass
class ConfigError(S3FetchError): pass

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

def setup_logging(level: int = logging.INFO, logfile: str | None = None) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):  # avoid duplicate handlers
        root.removeHandler(h)
    fmt = logging.Formatter(LOG_FORMAT)
    stream = logging.StreamHandler()
    stream.setFormatter(fmt)
    root.addHandler(stream)
    if logfile:
        fh = logging.FileHandler(logfile)
        fh.setFormatter(fmt)
        root.addHandler(fh)

def log_and_reraise(exception_cls: Type[S3FetchError] = S3FetchError):
    """Wrap foreign exceptions raised by `func` into `exception_cls`.

    Exceptions that are already an S3FetchError pass through untouched.
    """
    def deco(func: Callable[..., Any]):
        @functools.wraps(func)
        def wrapper(*a, **kw):
            try:
                return func(*a, **kw)
            except S3FetchError:
                raise
            except Exception as e:
                logging.getLogger(func.__module__).error("%s failed: %s", func.__name__, e)
                raise exception_cls(f"{func.__name__} failed: {e}") from e
        return wrapper
    return deco
