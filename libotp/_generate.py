"""libotp._generate -- creation of new keys, shared by libotp.hotp & libotp.totp"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from warnings import warn

from libotp import base32
from libotp.exc import MissingAccountNameError, MissingIssuerError, OTPSecurityWarning
from libotp.key import Key
from libotp.options import OTPType

if TYPE_CHECKING:
    from libotp.options import GenerateOpts

log = logging.getLogger(__name__)

#: secrets shorter than this are accepted from callers, but warned about.
MIN_SECRET_SIZE = 10


def _secret_bytes(opts: GenerateOpts) -> bytes:
    if opts.secret is not None:
        if not opts.secret:
            raise ValueError("secret must contain at least 1 byte")
        if len(opts.secret) < MIN_SECRET_SIZE:
            warn(
                f"for security purposes, secret should be >= {MIN_SECRET_SIZE} bytes",
                OTPSecurityWarning,
                stacklevel=4,
            )
        return bytes(opts.secret)
    secret = opts.rand(opts.secret_size)
    if len(secret) != opts.secret_size:
        raise RuntimeError(
            f"entropy source returned {len(secret)} bytes, expected {opts.secret_size}"
        )
    return secret


def new_key(type: OTPType, opts: GenerateOpts) -> Key:
    """
    build a new :class:`Key` of the given type from generation options.

    :raises ~libotp.exc.MissingIssuerError: if ``opts.issuer`` is empty.
    :raises ~libotp.exc.MissingAccountNameError: if ``opts.account_name`` is empty.
    """
    type = OTPType(type)
    if not opts.issuer:
        raise MissingIssuerError()
    if not opts.account_name:
        raise MissingAccountNameError()

    secret = _secret_bytes(opts)
    log.debug(
        "generating new %s key for issuer=%r (secret size=%d bytes)",
        type.value,
        opts.issuer,
        len(secret),
    )
    kwds = dict(
        type=type,
        issuer=opts.issuer,
        account_name=opts.account_name,
        secret=base32.encode(secret),
        algorithm=opts.algorithm,
        digits=opts.digits,
    )
    if type is OTPType.HOTP:
        kwds["counter"] = opts.counter
    else:
        kwds["period"] = opts.period
    return Key(**kwds)
