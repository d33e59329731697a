import logging


class CustomLogFormatter(logging.Formatter):
    """Log formatter that lets a record override its function and file name.

    Records created by `log_decorator` report the decorated function rather
    than the wrapper. If the record contains `func_name_override` or
    `file_name_override` the formatter swaps them in for `funcName` and
    `filename`. Inline logging calls format exactly like
    `logging.Formatter` unless the caller passes those attributes through
    `extra`.

    Parameters
    ----------
    fmt : str, optional
        Format string for the logged output as a whole. Defaults to None.
    datefmt : str, optional
        Format string for the date/time portion of the output.
        Defaults to None.
    """

    def format(self, record):
        if hasattr(record, "func_name_override"):
            record.funcName = record.func_name_override
        if hasattr(record, "file_name_override"):
            record.filename = record.file_name_override
        return super().format(record)
