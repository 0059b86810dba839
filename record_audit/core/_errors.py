"""Error translation for driver adapter methods."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Callable, Iterable, Optional, TypeVar

from .exceptions import AuditError

F = TypeVar("F", bound=Callable[..., object])


def wrap_errors(
    message: str,
    *,
    logger: Optional[logging.Logger] = None,
    pass_through: Iterable[type[BaseException]] = (),
) -> Callable[[F], F]:
    """Turn unexpected driver failures into ``RuntimeError("<message>: ...")``.

    Domain errors (:class:`AuditError`) and ``pass_through`` types are
    re-raised as they are. The failure is logged on the bound instance's
    ``logger`` attribute when it has one, else on ``logger``.
    """
    keep = (AuditError,) + tuple(pass_through)
    fallback = logger or logging.getLogger(__name__)

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except keep:
                raise
            except Exception as exc:
                log = getattr(args[0], "logger", None) if args else None
                (log or fallback).error(f"{message}: {exc}")
                raise RuntimeError(f"{message}: {exc}") from exc

        return wrapper  # type: ignore[return-value]

    return decorator
