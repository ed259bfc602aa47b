"""
Error types raised by the calculation engine.
"""


class UraseiError(Exception):
    """Base class for all engine errors."""


class InvalidInput(UraseiError, ValueError):
    """A date, hour, coordinate, zone or sign failed validation."""


class LookupMiss(UraseiError, KeyError):
    """A reference-table accessor was asked for a key it does not hold."""

    def __str__(self):
        # KeyError repr-quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""
