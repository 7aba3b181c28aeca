"""libotp.otp -- HOTP value computation shared by the HOTP & TOTP engines (RFC 4226)"""

from __future__ import annotations

import hmac
import struct
from typing import TYPE_CHECKING

from libotp._utils.bytes import as_bytes
from libotp.exc import InvalidInputLengthError
from libotp.options import Algorithm, Digits

if TYPE_CHECKING:
    from libotp._utils.bytes import StrOrBytes

__all__ = ["compute_code", "codes_equal", "normalize_code"]

#: largest counter which fits the 8-byte moving factor
MAX_COUNTER = (1 << 64) - 1


def compute_code(
    secret: bytes,
    counter: int,
    algorithm: Algorithm = Algorithm.SHA1,
    digits: Digits = Digits.SIX,
) -> str:
    """
    implementation of lowlevel HOTP generation algorithm.

    :arg secret: shared secret, as raw bytes.
    :arg counter: moving factor, as integer in ``[0, 2**64)``.
    :arg algorithm: HMAC hash to use.
    :arg digits: number of decimal digits to render.

    :returns: code as a string of exactly **digits** decimal characters.
    """
    if not 0 <= counter <= MAX_COUNTER:
        raise ValueError("counter must be in range [0, 2**64)")
    algorithm = Algorithm.parse(algorithm)
    digits = Digits(digits)

    # generate digest
    digest = hmac.new(secret, struct.pack(">Q", counter), algorithm.hash).digest()

    # derive 31-bit value (dynamic truncation, RFC 4226 section 5.3);
    # offset + 4 stays inside the digest, since every digest is >= 20 bytes
    offset = digest[-1] & 0xF
    value = struct.unpack(">I", digest[offset : offset + 4])[0] & 0x7FFFFFFF

    return digits.format(value % 10**digits.length)


def codes_equal(candidate: StrOrBytes, expected: StrOrBytes) -> bool:
    """
    timing-safe comparison of two codes.

    non-ascii input never matches (and doesn't raise).
    """
    return hmac.compare_digest(as_bytes(candidate), as_bytes(expected))


def normalize_code(code: StrOrBytes, digits: Digits) -> StrOrBytes:
    """
    strip surrounding whitespace from a candidate code, and check its length.

    :raises ~libotp.exc.InvalidInputLengthError:
        if the code doesn't have exactly **digits** characters.
    """
    code = code.strip()
    if len(code) != digits:
        raise InvalidInputLengthError(expected=int(digits), actual=len(code))
    return code
