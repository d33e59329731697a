"""A module that defines a timing decorator for the seirsvbh logger."""

import logging
import os
from datetime import datetime
from functools import wraps


def _short_repr(value, limit: int = 80) -> str:
    text = repr(value)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


def log_decorator(_func=None):
    """Log entry, exit, timing and failures of the wrapped function.

    Can be applied either as `@log_decorator()` or `@log_decorator`, or
    called directly as `log_decorator(func)`.

    Parameters
    ----------
    _func : function, optional
        function to wrap when used without parentheses. Defaults to None.
    """

    def log_decorator_info(func):
        @wraps(func)
        def log_decorator_wrapper(*args, **kwargs):
            """Log arguments, run `func`, then log timing and return type.

            Long argument reprs (numpy arrays, data records) are shortened so
            a grid sweep does not dump its whole input into the log. Any
            exception is logged and re-raised unchanged.
            """
            logger = logging.getLogger("seirsvbh")
            formatted_arguments = ", ".join(
                [_short_repr(a) for a in args]
                + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
            )
            extra_args = {
                "func_name_override": func.__name__,
                "file_name_override": os.path.basename(
                    func.__code__.co_filename
                ),
            }

            start_time = datetime.now()
            logger.debug(
                f"Arguments: {formatted_arguments} - Begin function",
                extra=extra_args,
            )
            try:
                value = func(*args, **kwargs)
            except Exception as ex:
                logger.error(f"Exception: {ex}", extra=extra_args)
                raise
            execution_time = datetime.now() - start_time
            logger.info(
                f"Execution Time: {execution_time}", extra=extra_args
            )
            logger.debug(
                f"Returned: {type(value).__name__} - End function",
                extra=extra_args,
            )
            return value

        return log_decorator_wrapper

    if _func is None:
        return log_decorator_info
    else:
        return log_decorator_info(_func)
