"""Exception hierarchy.

Only the type-descriptor wrapper raises these; the conversion engine reports
failure through ``(value, ok)`` flags and ``bool`` results instead.
"""

from __future__ import annotations


class DynkitError(Exception):
    """Base class for all dynkit errors."""


class UnknownTypeNameError(DynkitError, LookupError):
    """A serialized type name is not present in the registry."""


class MalformedTypeError(DynkitError, ValueError):
    """A serialized type descriptor does not have the expected shape."""
