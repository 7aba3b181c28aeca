"""libotp.base32 -- unpadded base32 codec used for shared secrets"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING

from libotp._utils.bytes import as_ascii
from libotp.exc import InvalidSecretEncodingError

if TYPE_CHECKING:
    from libotp._utils.bytes import StrOrBytes

__all__ = ["decode", "encode", "group_string"]

_BASE32_PAD = b"="


def encode(data: bytes) -> str:
    """
    wrapper around :func:`base64.b32encode` which strips padding,
    and returns a native string.
    """
    # NOTE: authenticator apps commonly omit padding, so it's never emitted;
    #       decode() puts it back.
    return base64.b32encode(data).rstrip(_BASE32_PAD).decode("ascii")


def decode(text: StrOrBytes) -> bytes:
    """
    wrapper around :func:`base64.b32decode`
    which tolerates lower case, surrounding whitespace, and missing padding.

    :raises ~libotp.exc.InvalidSecretEncodingError:
        if the text isn't valid base32 once padding is normalized.
    """
    try:
        data = as_ascii(text).strip().upper()
    except UnicodeError as err:
        raise InvalidSecretEncodingError() from err
    pad = -len(data) % 8  # pad things so final string is multiple of 8
    try:
        return base64.b32decode(data + _BASE32_PAD * pad)
    except binascii.Error as err:
        raise InvalidSecretEncodingError() from err


_chunk_sizes = [4, 6, 5]


def _get_group_size(klen: int) -> int:
    """
    helper for group_string() --
    calculates optimal size of group for given string size.
    """
    # look for exact divisor
    for size in _chunk_sizes:
        if not klen % size:
            return size
    # fallback to divisor with largest remainder
    # (so chunks are as close to even as possible)
    best = _chunk_sizes[0]
    rem = 0
    for size in _chunk_sizes:
        if klen % size > rem:
            best = size
            rem = klen % size
    return best


def group_string(value: str, sep: str = "-") -> str:
    """
    reformat string into (roughly) evenly-sized groups, separated by **sep**.
    useful for making secrets easier to type in by hand.

        >>> group_string("JBSWY3DPEHPK3PXP")
        'JBSW-Y3DP-EHPK-3PXP'
    """
    klen = len(value)
    size = _get_group_size(klen)
    return sep.join(value[o : o + size] for o in range(0, klen, size))
