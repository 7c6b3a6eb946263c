# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Human-readable dumps of arbitrary Python values, for debugging.

Values are rendered as an indented tree with type names, field
visibility markers, back-references for objects that were already
shown, and hex dumps for binary data.
"""

__all__ = [
    "__version__",
    "Dumper",
    "dd",
    "dump",
    "dump_html",
    "dump_json",
    "dump_json_str",
    "dump_str",
    "fdump",
]

# Must be defined before any submodule is imported, since vardump.common.log
# reports it.
__version__ = "1.0.0"


# The dumper machinery is not imported until a member is invoked, so that
# "import vardump" stays cheap and setup.py can import the package.

# Docstrings for public API members must be formatted according to PEP 8 - no more
# than 72 characters per line! - and must be readable when retrieved via help().


def dump(*values):
    """Writes a dump of values to sys.stdout, preceded by a header that
    names the file and line of the call.

    Colors are used unless the NO_COLOR environment variable is set.
    """

    from vardump import dumper

    dumper.default().dump(*values)


def dump_str(*values):
    """Returns the same text that dump() would write."""

    from vardump import dumper

    return dumper.default().dump_str(*values)


def dump_html(*values):
    """Returns a dump of values as an HTML fragment, colored with inline
    styles and safe to embed in a page.
    """

    from vardump import dumper

    return dumper.default().dump_html(*values)


def dump_json(*values):
    """Writes values to sys.stdout as indented JSON. See dump_json_str().
    """

    from vardump import dumper

    dumper.default().dump_json(*values)


def dump_json_str(*values):
    """Returns values as indented JSON: a single value is encoded as is,
    several values as an array.

    This never raises; if values cannot be encoded, the result is
    {"error": "<reason>"}.
    """

    from vardump import dumper

    return dumper.default().dump_json_str(*values)


def dd(*values):
    """Dumps values like dump(), then exits the process with exit code 1.
    """

    from vardump import dumper

    dumper.default().dd(*values)


def fdump(writer, *values):
    """Writes a dump of values to writer, which can be any object with a
    write() method. Binary streams receive UTF-8.
    """

    from vardump import dumper

    dumper.Dumper(writer=writer).dump(*values)


def __getattr__(name):
    if name == "Dumper":
        from vardump.dumper import Dumper

        return Dumper
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
