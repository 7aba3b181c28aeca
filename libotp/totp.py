"""libotp.totp -- time-based one-time passwords (RFC 6238)"""

from __future__ import annotations

import calendar
import datetime
import logging
import time as _time
from typing import TYPE_CHECKING, Union

from libotp import base32
from libotp._generate import new_key
from libotp.options import DEFAULT_PERIOD, GenerateOpts, OTPType, ValidateOpts
from libotp.otp import codes_equal, compute_code, normalize_code

if TYPE_CHECKING:
    from libotp._utils.bytes import StrOrBytes
    from libotp.key import Key

__all__ = [
    "Timestamp",
    "normalize_time",
    "time_to_counter",
    "generate",
    "generate_code",
    "generate_code_custom",
    "validate",
    "validate_custom",
]

log = logging.getLogger(__name__)

#: accepted time representations; ``None`` means "now"
Timestamp = Union[int, float, datetime.datetime, None]

_DEFAULT_OPTS = ValidateOpts()

#: options used by validate(): one step of clock drift allowed either way
_VALIDATE_OPTS = ValidateOpts(skew=1)


def generate(opts: GenerateOpts) -> Key:
    """
    Create a new TOTP :class:`~libotp.key.Key`, with a random secret
    unless ``opts.secret`` is set.

    :raises ~libotp.exc.MissingIssuerError: if ``opts.issuer`` is empty.
    :raises ~libotp.exc.MissingAccountNameError: if ``opts.account_name`` is empty.
    """
    if opts.period < 1:
        raise ValueError("period must be >= 1")
    return new_key(OTPType.TOTP, opts)


# =============================================================================
# time helpers
# =============================================================================


def normalize_time(time: Timestamp) -> int:
    """
    Normalize time value to unix epoch seconds.

    :arg time:
        Can be ``None``, :class:`!datetime`,
        or unix epoch timestamp as :class:`!float` or :class:`!int`.
        If ``None``, uses current system time.
        Naive datetimes are treated as UTC.

    :returns:
        unix epoch timestamp as :class:`int`.
    """
    if isinstance(time, bool):
        raise TypeError("time must be int, float, or datetime, not bool")
    if isinstance(time, int):
        return time
    elif isinstance(time, float):
        return int(time)
    elif time is None:
        return int(_time.time())
    elif isinstance(time, datetime.datetime):
        # NOTE: utctimetuple() assumes naive datetimes are in UTC,
        #       and we explicitly *don't* want microseconds.
        return calendar.timegm(time.utctimetuple())
    raise TypeError(
        f"time must be int, float, or datetime, not {type(time).__name__}"
    )


def time_to_counter(time: Timestamp, period: int = DEFAULT_PERIOD) -> int:
    """
    convert timestamp to HOTP counter using **period**.
    input is passed through :func:`normalize_time`.
    """
    if period < 1:
        raise ValueError("period must be >= 1")
    time = normalize_time(time)
    if time < 0:
        raise ValueError("time must be >= 0")
    return time // period


# =============================================================================
# code generation
# =============================================================================


def generate_code(secret: StrOrBytes, time: Timestamp = None) -> str:
    """
    :func:`generate_code_custom` using the default options
    (SHA1, 6 digits, 30 second period).
    """
    return generate_code_custom(secret, time, _DEFAULT_OPTS)


def generate_code_custom(
    secret: StrOrBytes, time: Timestamp, opts: ValidateOpts
) -> str:
    """
    Generate the code for a specific time.

    :arg secret: shared secret, as base32 text.
    :arg time:
        unix epoch timestamp, :class:`!datetime`,
        or ``None`` for the current system time.
    :arg opts: digits, algorithm & period to use; ``skew`` is ignored.

    :raises ~libotp.exc.InvalidSecretEncodingError: if the secret isn't valid base32.

    Usage example::

        >>> opts = ValidateOpts(digits=Digits.EIGHT)
        >>> totp.generate_code_custom("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", 59, opts)
        '94287082'
    """
    counter = time_to_counter(time, opts.period)
    key = base32.decode(secret)
    return compute_code(key, counter, opts.algorithm, opts.digits)


# =============================================================================
# code validation
# =============================================================================


def validate(code: StrOrBytes, secret: StrOrBytes, time: Timestamp = None) -> bool:
    """
    Check a code against the current time (or **time**, if given),
    accepting codes from one time step before or after it.
    Uses SHA1, 6 digits, and a 30 second period.
    Malformed codes or secrets, and negative times, are reported as ``False``.
    """
    try:
        return validate_custom(code, secret, time, _VALIDATE_OPTS)
    except ValueError as err:
        log.debug("totp code rejected: %s", err)
        return False


def validate_custom(
    code: StrOrBytes, secret: StrOrBytes, time: Timestamp, opts: ValidateOpts
) -> bool:
    """
    Check a code against a specific time.

    Searches ``opts.skew`` time steps before & after the one **time** falls in,
    in order to account for transmission delay and client clock drift.

    :arg code: code to check; surrounding whitespace is ignored.
    :arg secret: shared secret, as base32 text.
    :arg time:
        unix epoch timestamp, :class:`!datetime`,
        or ``None`` for the current system time.
        *this should correspond to the time the code was received from the client*.
    :arg opts: digits, algorithm, period & skew to use.

    :raises ~libotp.exc.InvalidInputLengthError:
        if the code doesn't have exactly ``opts.digits`` characters.
    :raises ~libotp.exc.InvalidSecretEncodingError:
        if the secret isn't valid base32.

    :returns:
        ``True`` if the code matches any step in the window,
        ``False`` if it is well formed but matches none of them.

    Usage example::

        >>> opts = ValidateOpts(digits=Digits.EIGHT, skew=1)
        >>> secret = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

        >>> # code for counter 1, checked during counter 2 (within skew)
        >>> totp.validate_custom("94287082", secret, 61, opts)
        True

        >>> # checked during counter 3 (outside of skew)
        >>> totp.validate_custom("94287082", secret, 91, opts)
        False
    """
    code = normalize_code(code, opts.digits)
    key = base32.decode(secret)
    counter = time_to_counter(time, opts.period)

    start = max(counter - opts.skew, 0)
    end = counter + opts.skew + 1
    for step in range(start, end):
        if codes_equal(code, compute_code(key, step, opts.algorithm, opts.digits)):
            if step != counter:
                log.debug("totp code matched %+d steps from current", step - counter)
            return True
    return False
