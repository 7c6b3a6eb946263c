# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import functools
import os
import platform
import sys
import threading
import traceback

import vardump
from vardump.common import timestamp


LEVELS = ("debug", "info", "warning", "error")
"""Logging levels, lowest to highest importance.
"""

stderr = sys.__stderr__

stderr_levels = {"warning", "error"}
"""What should be logged to stderr.
"""

file_levels = set(LEVELS)
"""What should be logged to file, when it is not None.
"""

file = None
"""If not None, which file to log to.

This can be automatically set by to_file().
"""

log_dir = os.getenv("VARDUMP_LOG_DIR") or None
"""If not None, to_file() without a filename logs to vardump-<pid>.log in this
directory.
"""

timestamp_format = "09.3f"
"""Format spec used for timestamps. Can be changed to dial precision up or down.
"""


_lock = threading.RLock()


def write(level, text):
    assert level in LEVELS

    t = timestamp.current()
    format_string = "{0}+{1:" + timestamp_format + "}: "
    prefix = format_string.format(level[0].upper(), t)

    indent = "\n" + (" " * len(prefix))
    output = indent.join(text.split("\n"))
    output = prefix + output + "\n\n"

    with _lock:
        if level in stderr_levels and stderr is not None:
            try:
                stderr.write(output)
            except Exception:
                pass

        if file is not None and level in file_levels:
            try:
                file.write(output)
                file.flush()
            except Exception:
                pass

    return text


def write_format(level, format_string, *args, **kwargs):
    # Don't spend cycles on formatting if nobody is going to see the message.
    if level not in stderr_levels and (file is None or level not in file_levels):
        return format_string

    try:
        text = format_string.format(*args, **kwargs)
    except Exception:
        exception()
        raise
    return write(level, text)


debug = functools.partial(write_format, "debug")
info = functools.partial(write_format, "info")


def exception(format_string="", *args, **kwargs):
    """Logs an exception with full traceback.

    If format_string is specified, it is formatted with str.format(*args, **kwargs),
    and prepended to the exception traceback on a separate line.

    If exc_info is specified, the exception it describes will be logged. Otherwise,
    sys.exc_info() - i.e. the exception being handled currently - will be logged.

    If level is specified, the exception will be logged as a message of that level.
    The default is "error".

    Returns the exception object, for convenient re-raising::

        try:
            ...
        except Exception:
            raise log.exception()  # log it and re-raise
    """

    level = kwargs.pop("level", "error")
    exc_info = kwargs.pop("exc_info", sys.exc_info())

    if format_string:
        format_string += "\n\n"
    format_string += "{exception}"

    exception = "".join(traceback.format_exception(*exc_info))
    write_format(level, format_string, *args, exception=exception, **kwargs)

    return exc_info[1]


swallow_exception = functools.partial(exception, level="debug")
"""Logs an exception that is handled locally and does not propagate, at debug
level. Use for failures that the caller turns into a placeholder in the output.
"""


def to_file(filename=None):
    """Starts logging all messages at all levels to the specified file.

    If filename is None, the file is created in log_dir as vardump-<pid>.log.
    Does nothing if already logging to a file, or if neither filename nor log_dir
    is available.
    """

    global file
    if file is not None:
        return

    if filename is None:
        if log_dir is None:
            return
        filename = "{0}/vardump-{1}.log".format(log_dir, os.getpid())

    file = open(filename, "w", encoding="utf-8")

    info(
        "{0} {1}\n{2} {3} ({4}-bit)\nvardump {5}",
        platform.platform(),
        platform.machine(),
        platform.python_implementation(),
        platform.python_version(),
        64 if sys.maxsize > 2**32 else 32,
        vardump.__version__,
    )
