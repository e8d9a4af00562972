"""
Error taxonomy for the UDSV codec.

Every failure is structured: the error kind, the offending fragment of text
(or the repr of the offending value when encoding) and, where the failure
happened inside record text, the character offset into that record.

The codec never recovers from an error. A record either decodes cleanly or
the whole decode fails.
"""

from typing import Optional


class UDSVError(Exception):
    """
    Base class for all codec errors.

    Properties:
        fragment: The substring (or value repr) that caused the failure
        offset: Character offset into the record text, if known
        line: 1-based record number when decoding multi-record text
        detail: Optional free-text explanation
    """

    def __init__(
        self,
        fragment: str = "",
        offset: Optional[int] = None,
        detail: Optional[str] = None,
        line: Optional[int] = None,
    ):
        self.fragment = fragment
        self.offset = offset
        self.detail = detail
        self.line = line
        super().__init__(self._message())

    @property
    def kind(self) -> str:
        return type(self).__name__

    def _message(self) -> str:
        msg = f"{self.kind}: {self.fragment!r}"
        if self.detail:
            msg += f" ({self.detail})"
        where = []
        if self.line is not None:
            where.append(f"line {self.line}")
        if self.offset is not None:
            where.append(f"offset {self.offset}")
        if where:
            msg += " at " + ", ".join(where)
        return msg

    def at_line(self, line: int) -> "UDSVError":
        """Attach a record number and refresh the message."""
        self.line = line
        self.args = (self._message(),)
        return self

    def shifted(self, base: int) -> "UDSVError":
        """Rebase a field-relative offset onto the enclosing record."""
        if self.offset is not None:
            self.offset += base
            self.args = (self._message(),)
        return self


class InvalidEscape(UDSVError):
    """Raised when a backslash is followed by a character with no escape meaning."""
    pass


class MalformedMapItem(UDSVError):
    """Raised when a map item does not have exactly one unescaped '='."""
    pass


class InvalidBoolean(UDSVError):
    """Raised when boolean text is neither 'true' nor 'false'."""
    pass


class InvalidNumber(UDSVError):
    """Raised when the numeric type rejects a scalar."""
    pass


class UnknownVariant(UDSVError):
    """Raised when an enum tag matches no declared variant."""
    pass


class ArityMismatch(UDSVError):
    """Raised when a tuple or struct receives the wrong number of parts."""
    pass


class UnsupportedNesting(UDSVError):
    """Raised when a composite shape is placed inside another composite."""
    pass


class UnexpectedTrailingData(UDSVError):
    """Raised when text remains after the requested shape is fully consumed."""
    pass


class DuplicateKey(UDSVError):
    """Raised when a map repeats a key and the policy is to reject."""
    pass


class LayoutError(UDSVError):
    """Raised when a record layout definition is invalid."""
    pass


__all__ = [
    "UDSVError",
    "InvalidEscape",
    "MalformedMapItem",
    "InvalidBoolean",
    "InvalidNumber",
    "UnknownVariant",
    "ArityMismatch",
    "UnsupportedNesting",
    "UnexpectedTrailingData",
    "DuplicateKey",
    "LayoutError",
]
