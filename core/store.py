# core/store.py
# Degrade-gracefully guard around document store access

import functools
import logging

from django.db import InterfaceError, OperationalError

logger = logging.getLogger("teamup.store")

# Errors that mean "the database could not be reached", as opposed to
# integrity/programming errors which always propagate.
STORE_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)


def store_guard(default=None):
    """
    Decorate a service function so that an unreachable store turns the call
    into a no-op.

    `default` is returned instead of raising; pass a callable (e.g. `list`)
    to get a fresh value per call.

    Domain errors (AlreadyInTeam, TeamFull, ...) are not caught here.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except STORE_UNAVAILABLE_ERRORS as e:
                logger.error(f"Store unavailable in {func.__name__}: {e}")
                return default() if callable(default) else default
        return wrapper
    return decorator
