"""libotp.hotp -- counter-based one-time passwords (RFC 4226)"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from libotp import base32
from libotp._generate import new_key
from libotp.options import GenerateOpts, OTPType, ValidateOpts
from libotp.otp import codes_equal, compute_code, normalize_code

if TYPE_CHECKING:
    from libotp._utils.bytes import StrOrBytes
    from libotp.key import Key

__all__ = [
    "generate",
    "generate_code",
    "generate_code_custom",
    "validate",
    "validate_custom",
]

log = logging.getLogger(__name__)

_DEFAULT_OPTS = ValidateOpts()


def generate(opts: GenerateOpts) -> Key:
    """
    Create a new HOTP :class:`~libotp.key.Key`, with a random secret
    unless ``opts.secret`` is set.

    :raises ~libotp.exc.MissingIssuerError: if ``opts.issuer`` is empty.
    :raises ~libotp.exc.MissingAccountNameError: if ``opts.account_name`` is empty.

    Usage example::

        >>> key = hotp.generate(GenerateOpts(issuer="SnakeOil", account_name="alice@example.com"))
        >>> key.to_uri()
        'otpauth://hotp/SnakeOil:alice@example.com?secret=...&issuer=SnakeOil&algorithm=SHA1&digits=6&counter=0'
    """
    return new_key(OTPType.HOTP, opts)


def generate_code(secret: StrOrBytes, counter: int) -> str:
    """:func:`generate_code_custom` using the default options (SHA1, 6 digits)"""
    return generate_code_custom(secret, counter, _DEFAULT_OPTS)


def generate_code_custom(secret: StrOrBytes, counter: int, opts: ValidateOpts) -> str:
    """
    Generate the code for a specific counter value.

    :arg secret: shared secret, as base32 text.
    :arg counter: counter value to use.
    :arg opts: digits & algorithm to use; ``skew`` and ``period`` are ignored.

    :raises ~libotp.exc.InvalidSecretEncodingError: if the secret isn't valid base32.

    :returns: code as a string of ``opts.digits`` decimal characters.

    Usage example::

        >>> hotp.generate_code("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", 0)
        '755224'
    """
    key = base32.decode(secret)
    return compute_code(key, counter, opts.algorithm, opts.digits)


def validate(code: StrOrBytes, counter: int, secret: StrOrBytes) -> bool:
    """
    :func:`validate_custom` using the default options (SHA1, 6 digits).
    Malformed codes or secrets, and out of range counters, are reported as ``False``.
    """
    try:
        return validate_custom(code, counter, secret, _DEFAULT_OPTS)
    except ValueError as err:
        log.debug("hotp code rejected: %s", err)
        return False


def validate_custom(
    code: StrOrBytes, counter: int, secret: StrOrBytes, opts: ValidateOpts
) -> bool:
    """
    Check a code against the one expected for a specific counter value.

    :arg code: code to check; surrounding whitespace is ignored.
    :arg counter: counter value the code should match.
    :arg secret: shared secret, as base32 text.
    :arg opts: digits & algorithm to use.

    :raises ~libotp.exc.InvalidInputLengthError:
        if the code doesn't have exactly ``opts.digits`` characters.
    :raises ~libotp.exc.InvalidSecretEncodingError:
        if the secret isn't valid base32.

    :returns:
        ``True`` if the code matches, ``False`` if it is well formed but wrong.
    """
    code = normalize_code(code, opts.digits)
    expected = generate_code_custom(secret, counter, opts)
    return codes_equal(code, expected)

