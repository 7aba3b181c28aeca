"""libotp.exc -- exceptions & warnings raised by libotp"""

from __future__ import annotations

import enum

__all__ = [
    "ErrorKind",
    "URIParseReason",
    # errors
    "OTPError",
    "InvalidSecretEncodingError",
    "InvalidInputLengthError",
    "MissingIssuerError",
    "MissingAccountNameError",
    "URIParseError",
    # warnings
    "OTPWarning",
    "OTPRuntimeWarning",
    "OTPSecurityWarning",
]


# =============================================================================
# error kinds
# =============================================================================


class ErrorKind(enum.Enum):
    """closed set of failures reported by libotp, see :attr:`OTPError.kind`"""

    INVALID_SECRET_ENCODING = "invalid_secret_encoding"
    INVALID_INPUT_LENGTH = "invalid_input_length"
    MISSING_ISSUER = "missing_issuer"
    MISSING_ACCOUNT_NAME = "missing_account_name"
    URI_PARSE = "uri_parse"


class URIParseReason(enum.Enum):
    """sub-reason attached to :class:`URIParseError`"""

    MALFORMED_URI = "malformed uri"
    BAD_SCHEME = "wrong uri scheme"
    UNKNOWN_TYPE = "unknown OTP type"
    MISSING_LABEL = "missing label"
    MALFORMED_QUERY = "malformed query string"
    DUPLICATE_PARAMETER = "duplicate parameter"
    MISSING_SECRET = "missing 'secret' parameter"
    UNRECOGNIZED_ALGORITHM = "unrecognized 'algorithm' parameter"
    UNRECOGNIZED_DIGITS = "unrecognized 'digits' parameter"
    MALFORMED_PARAMETER = "malformed parameter"


# =============================================================================
# errors
# =============================================================================


class OTPError(Exception):
    """
    Base class for all errors raised by libotp.

    Callers should match on :attr:`kind` rather than on the concrete subclass
    when they only need to know *what* went wrong::

        >>> try:
        ...     totp.validate_custom("foo", secret, 59, opts)
        ... except OTPError as err:
        ...     if err.kind is ErrorKind.INVALID_INPUT_LENGTH:
        ...         ...

    All subclasses also derive from :exc:`ValueError`, since each of them
    signals bad input from the caller.
    """

    kind: ErrorKind
    _default_message: str = "OTP error"

    def __init__(self, msg: str | None = None) -> None:
        if msg is None:
            msg = self._default_message
        super().__init__(msg)


class InvalidSecretEncodingError(OTPError, ValueError):
    """secret text is not valid base32, even after padding was normalized"""

    kind = ErrorKind.INVALID_SECRET_ENCODING
    _default_message = "Decoding of secret as base32 failed"


class InvalidInputLengthError(OTPError, ValueError):
    """candidate code does not have the configured number of digits"""

    kind = ErrorKind.INVALID_INPUT_LENGTH

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Code must have exactly {expected} digits, got {actual}")


class MissingIssuerError(OTPError, ValueError):
    kind = ErrorKind.MISSING_ISSUER
    _default_message = "Issuer must be set"


class MissingAccountNameError(OTPError, ValueError):
    kind = ErrorKind.MISSING_ACCOUNT_NAME
    _default_message = "AccountName must be set"


class URIParseError(OTPError, ValueError):
    """
    raised by :meth:`libotp.key.Key.from_uri` when the uri is unusable.
    :attr:`reason` tells which part of the uri was rejected.
    """

    kind = ErrorKind.URI_PARSE

    def __init__(self, reason: URIParseReason, detail: str | None = None) -> None:
        self.reason = reason
        self.detail = detail
        msg = f"Invalid otpauth uri: {reason.value}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


# =============================================================================
# warnings
# =============================================================================


class OTPWarning(UserWarning):
    """base class for libotp's warnings"""


class OTPRuntimeWarning(OTPWarning):
    """
    Warning issued when something unexpected was encountered,
    but could be safely ignored (e.g. unknown otpauth uri parameters).
    """


class OTPSecurityWarning(OTPWarning):
    """Special warning issued when a weak configuration is accepted anyway"""
