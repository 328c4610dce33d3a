"""
Unit-of-work decorator for the service layer.

Service functions in `humanlenk.database.core.funcs` are wrapped with
``@transactional``. The caller hands over the application's session factory
(`app.state.session_factory`); the wrapped function receives an open
`session`, and one commit or rollback closes the unit of work.
"""

from functools import wraps
import contextvars

db_session_context = contextvars.ContextVar("db_session_context", default=None)
"""Session of the unit of work in progress, if any."""


def transactional(func):
    """
    Run `func` inside a unit of work.

    A call made while another unit of work is open joins its session. Otherwise
    a session is opened from the `session_factory` keyword argument, committed
    when `func` returns and rolled back when it raises.

    Wrapped functions take `session` as their first parameter, so callers
    pass every other argument by keyword:

    >>> get_user(user_id=user_id, session_factory=request.app.state.session_factory)
    """
    @wraps(func)
    def wrap_func(*args, session_factory=None, **kwargs):
        session = db_session_context.get()
        if session is not None:
            return func(*args, session=session, **kwargs)

        if session_factory is None:
            raise RuntimeError(f"{func.__name__} needs a session_factory outside an active transaction")

        session = session_factory()
        token = db_session_context.set(session)
        try:
            result = func(*args, session=session, **kwargs)
            session.flush()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
            db_session_context.reset(token)

        return result

    return wrap_func
