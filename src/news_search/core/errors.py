"""
Error Handling

This module defines the exception taxonomy of the search core and the
boundary helper that keeps internal failures away from callers.

Design Goals
------------
- Search is best-effort: a failed build or query never crashes the caller
- Always return a deterministic, empty result on failure
- Log full stack traces internally for debugging
"""

from __future__ import annotations

import copy
import functools
import inspect
import logging
from typing import Any, Callable, TypeVar

logger = logging.getLogger("news_search.errors")

F = TypeVar("F", bound=Callable[..., Any])


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SearchError(RuntimeError):
    """Base error for search core failures."""


class CorpusUnavailableError(SearchError):
    """Raised when the corpus provider cannot supply a corpus."""


class CorpusValidationError(CorpusUnavailableError):
    """Raised when a supplied corpus has an invalid structure."""


# ---------------------------------------------------------------------
# Public Boundary Helper
# ---------------------------------------------------------------------

def best_effort(default: Any, operation: str | None = None) -> Callable[[F], F]:
    """
    Downgrade any exception raised by a public operation to a default value.

    Works for both plain and coroutine functions. The default is deep-copied
    on every failure so callers never share a mutable fallback.

    Parameters
    ----------
    default : Any
        Value returned when the wrapped call raises.

    operation : str | None
        Name used in the diagnostic log. Defaults to the function name.

    Returns
    -------
    Callable
        Decorator applying the boundary.
    """

    def decorator(func: F) -> F:
        name = operation or func.__name__

        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await func(*args, **kwargs)
                except Exception:
                    logger.exception("Search operation '%s' failed", name)
                    return copy.deepcopy(default)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception:
                logger.exception("Search operation '%s' failed", name)
                return copy.deepcopy(default)

        return wrapper  # type: ignore[return-value]

    return decorator
