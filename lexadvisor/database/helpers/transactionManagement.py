"""
Transaction scope for service functions.

The outermost ``@transactional`` call opens a session, publishes it in
``db_session_context`` and commits when the call returns; nested
``@transactional`` calls run inside that same session. A sign-up (auth user,
profile and default role) or one gateway request therefore commits or rolls
back as a single unit.

Sessions are created with ``expire_on_commit=False`` so ORM objects returned
from a committed call can still be read by the caller.
"""

from functools import wraps
import contextvars

from sqlalchemy.orm import sessionmaker

from lexadvisor.database.config.connection_engine import connection_engine

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Session of the transaction currently running in this context, if any."""

SessionFactory = sessionmaker(bind=connection_engine, expire_on_commit=False)


def transactional(func):
    """
    Run ``func`` inside the current transaction, or in a new one.

    ``func`` receives the session as its ``session`` keyword argument. Any
    exception rolls the outermost transaction back and propagates.

    Example
    -------
    >>> @transactional
    ... def count_profiles(session=None):
    ...     return session.scalar(select(func.count()).select_from(Profile))
    """

    @wraps(func)
    def wrap_func(*args, **kwargs):
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        session = SessionFactory()
        token = db_session_context.set(session)
        try:
            result = func(*args, session=session, **kwargs)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)
        return result

    return wrap_func
