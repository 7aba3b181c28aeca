"""libotp.options -- enumerated settings & option records shared by HOTP / TOTP"""

from __future__ import annotations

import dataclasses
import enum
import hashlib
import secrets
from typing import Callable, Protocol

from typing_extensions import Buffer, Self

__all__ = [
    "Algorithm",
    "Digits",
    "OTPType",
    "ValidateOpts",
    "GenerateOpts",
    "DEFAULT_PERIOD",
    "DEFAULT_SECRET_SIZE",
]

#: TOTP time-step length, in seconds, used when none is specified.
DEFAULT_PERIOD = 30

#: number of random bytes drawn for a new secret (matches SHA1's digest size,
#: per RFC 4226 section 4 R6)
DEFAULT_SECRET_SIZE = 20


class HashLike(Protocol):
    """subset of hashlib.pyi which hmac.new() relies on"""

    @property
    def digest_size(self) -> int: ...

    @property
    def block_size(self) -> int: ...

    @property
    def name(self) -> str: ...

    def copy(self) -> Self: ...

    def digest(self) -> bytes: ...

    def update(self, data: Buffer, /) -> None: ...


HashFunc = Callable[..., HashLike]


class OTPType(str, enum.Enum):
    """otpauth uri type (the uri "host" component)"""

    HOTP = "hotp"
    TOTP = "totp"

    def __str__(self) -> str:
        return self.value


class Algorithm(str, enum.Enum):
    """HMAC hash algorithm, named the way the otpauth uri spells it"""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    def __str__(self) -> str:
        return self.value

    @property
    def hash(self) -> HashFunc:
        """hashlib constructor for this algorithm"""
        return _hash_constructors[self]

    @classmethod
    def parse(cls, name: str) -> Algorithm:
        """
        case-insensitive lookup of algorithm name.

        :raises ValueError: if the name isn't one of SHA1, SHA256, SHA512.
        """
        try:
            return cls(name.upper())
        except ValueError:
            raise ValueError(f"unknown algorithm: {name!r}") from None


_hash_constructors: dict[Algorithm, HashFunc] = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}


class Digits(int, enum.Enum):
    """number of decimal digits in a generated code"""

    SIX = 6
    EIGHT = 8

    def __str__(self) -> str:
        return str(self.value)

    @property
    def length(self) -> int:
        return self.value

    def format(self, value: int) -> str:
        """render value as a decimal string, left padded with zeros"""
        return "%0*d" % (self.value, value)


@dataclasses.dataclass(frozen=True)
class ValidateOpts:
    """
    Settings used when generating or validating a code.

    :param digits: code length. Defaults to ``6``.
    :param algorithm: HMAC hash. Defaults to ``SHA1``.
    :param skew:
        number of adjacent TOTP time steps, before and after the current one,
        which are also accepted. Ignored by HOTP. Defaults to ``0``.
    :param period: TOTP time step, in seconds. Ignored by HOTP. Defaults to ``30``.
    """

    digits: Digits = Digits.SIX
    algorithm: Algorithm = Algorithm.SHA1
    skew: int = 0
    period: int = DEFAULT_PERIOD

    def __post_init__(self) -> None:
        # accept plain ints / strings, store the enum members
        object.__setattr__(self, "digits", Digits(self.digits))
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))
        if self.skew < 0:
            raise ValueError("skew must be >= 0")
        if self.period < 1:
            raise ValueError("period must be >= 1")


@dataclasses.dataclass(frozen=True)
class GenerateOpts:
    """
    Settings used when generating a new :class:`~libotp.key.Key`.

    :param issuer: name of the issuing service; required.
    :param account_name: name of the user's account; required.
    :param period: TOTP time step, in seconds. Defaults to ``30``.
    :param counter: HOTP initial counter. Defaults to ``0``.
    :param secret_size:
        number of random bytes to draw for the secret.
        Defaults to ``20``; ``0`` also means the default.
    :param secret:
        raw secret bytes to use instead of drawing random ones.
    :param digits: code length. Defaults to ``6``.
    :param algorithm: HMAC hash. Defaults to ``SHA1``.
    :param rand:
        entropy source, called as ``rand(size)``.
        Defaults to :func:`secrets.token_bytes`.
    """

    issuer: str = ""
    account_name: str = ""
    period: int = DEFAULT_PERIOD
    counter: int = 0
    secret_size: int = DEFAULT_SECRET_SIZE
    secret: bytes | None = None
    digits: Digits = Digits.SIX
    algorithm: Algorithm = Algorithm.SHA1
    rand: Callable[[int], bytes] = secrets.token_bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "digits", Digits(self.digits))
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))
        if not self.secret_size:
            object.__setattr__(self, "secret_size", DEFAULT_SECRET_SIZE)
        elif self.secret_size < 0:
            raise ValueError("secret_size must be >= 0")
