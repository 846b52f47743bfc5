import functools
import gzip
import inspect
import logging
import logging.handlers
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Callable, ParamSpec, TypeVar

from .config import settings

logger = logging.getLogger("gluemc")
logger.setLevel(logging.DEBUG)
formatter = logging.Formatter(
    "%(asctime)s %(levelname)s [%(module)s:%(funcName)s:%(lineno)d] %(message)s"
)

logs_dir = Path(settings.logs_dir)
logs_dir.mkdir(parents=True, exist_ok=True)


def rotator(source: str, dest: str) -> None:
    """Compress a rotated log file to ``dest.gz`` and remove the original."""
    with open(source, "rb") as f_in, gzip.open(dest + ".gz", "wb") as f_out:
        shutil.copyfileobj(f_in, f_out)
    os.remove(source)


log_file_handler = logging.handlers.TimedRotatingFileHandler(
    logs_dir / "gluemc.log", when="midnight"
)
log_file_handler.setFormatter(formatter)
log_file_handler.rotator = rotator
logger.addHandler(log_file_handler)

log_stream_handler = logging.StreamHandler(sys.stdout)
log_stream_handler.setFormatter(formatter)
logger.addHandler(log_stream_handler)


def _describe_call(
    sig: inspect.Signature, qualname: str, args: tuple, kwargs: dict
) -> tuple[dict[str, Any], str]:
    try:
        bound = sig.bind(*args, **kwargs)
    except TypeError as e:
        logger.warning(f"Failed to bind arguments for {qualname}: {e}", stacklevel=4)
        raw = [f"args={args!r}"] if args else []
        if kwargs:
            raw.append(f"kwargs={kwargs!r}")
        return {}, f"[{', '.join(raw)}] " if raw else ""

    bound.apply_defaults()
    params = ", ".join(f"{k}={v!r}" for k, v in bound.arguments.items())
    return dict(bound.arguments), f"[{params}] " if params else ""


def _render_prefix(prefix: str, arguments: dict[str, Any]) -> str:
    if not prefix:
        return ""
    if "{" not in prefix or "}" not in prefix:
        return f"{prefix}: "
    try:
        return f"{prefix.format_map(arguments)}: "
    except (KeyError, ValueError, IndexError) as e:
        logger.warning(f"Failed to format prefix '{prefix}': {e}", stacklevel=4)
        return f"{prefix}: "


P = ParamSpec("P")
R = TypeVar("R")


def log_exception(
    prefix: str = "",
    default_return: R | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Log and swallow exceptions raised by the decorated sync or async callable.

    The log record names the bound call arguments and an optional prefix, which
    may reference parameters by name, e.g. ``@log_exception("relay {event}")``.
    The wrapped call returns ``default_return`` when it fails.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        sig = inspect.signature(func)
        qualname = func.__qualname__

        def report(e: Exception, args: tuple, kwargs: dict) -> None:
            arguments, args_str = _describe_call(sig, qualname, args, kwargs)
            logger.error(
                f"{args_str}{_render_prefix(prefix, arguments)}{type(e).__name__}: {e}",
                exc_info=True,
                stacklevel=3,
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    report(e, args, kwargs)
                    return default_return  # type: ignore[return-value]

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                report(e, args, kwargs)
                return default_return  # type: ignore[return-value]

        return sync_wrapper

    return decorator
