"""libotp.key -- otpauth:// key uri parsing & rendering"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, quote, unquote, urlsplit
from warnings import warn

from libotp import base32
from libotp._utils.bytes import as_str
from libotp.exc import (
    MissingAccountNameError,
    OTPRuntimeWarning,
    URIParseError,
    URIParseReason,
)
from libotp.options import DEFAULT_PERIOD, Algorithm, Digits, OTPType, ValidateOpts

if TYPE_CHECKING:
    from typing_extensions import Self

    from libotp._utils.bytes import StrOrBytes

__all__ = ["Key"]

log = logging.getLogger(__name__)

_SCHEME = "otpauth"

#: query parameter understood by each otp type (besides the common ones),
#: and its minimum value
_type_params = {
    OTPType.HOTP: ("counter", 0),
    OTPType.TOTP: ("period", 1),
}


@dataclasses.dataclass(frozen=True)
class Key:
    """
    One OTP credential, as carried by an ``otpauth://`` uri
    (see Google Authenticator's
    `KeyUriFormat <https://github.com/google/google-authenticator/wiki/Key-Uri-Format>`_).

    Instances are immutable. They're normally obtained from
    :meth:`from_uri` (e.g. a scanned qrcode), or from
    :func:`libotp.totp.generate` / :func:`libotp.hotp.generate`.

    :param type: ``OTPType.TOTP`` or ``OTPType.HOTP``.
    :param account_name: name of the user's account. Must not be empty.
    :param secret:
        shared secret as base32 text. It's not decoded until a code
        is generated (see :meth:`secret_bytes`).
    :param issuer: name of the issuing service, may be empty.
    :param algorithm: HMAC hash. Defaults to ``SHA1``.
    :param digits: code length. Defaults to ``6``.
    :param period: TOTP time step in seconds. Defaults to ``30``; ignored for HOTP.
    :param counter: HOTP initial counter. Defaults to ``0``; ignored for TOTP.
    :param label:
        uri label (``"issuer:account"`` or ``"account"``).
        Derived from **issuer** and **account_name** when omitted.
        When given, its account part must match **account_name**, and it may
        only name an issuer if **issuer** is set (which takes precedence).
    :param raw_uri:
        uri text this key was parsed from.
        Rendered via :meth:`to_uri` when omitted.
        Not taken into account when comparing keys.
    """

    type: OTPType
    account_name: str
    secret: str
    issuer: str = ""
    algorithm: Algorithm = Algorithm.SHA1
    digits: Digits = Digits.SIX
    period: int = DEFAULT_PERIOD
    counter: int = 0
    label: str = ""
    raw_uri: str = dataclasses.field(default="", compare=False, repr=False)

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "type", OTPType(self.type.lower()))
        set_(self, "algorithm", Algorithm.parse(self.algorithm))
        set_(self, "digits", Digits(self.digits))
        if not self.account_name:
            raise MissingAccountNameError()

        # the unused attribute is pinned to its default, so keys compare sanely
        if self.type is OTPType.TOTP:
            self._check_serial(self.period, "period", minval=1)
            set_(self, "counter", 0)
        else:
            self._check_serial(self.counter, "counter")
            set_(self, "period", DEFAULT_PERIOD)

        if self.label:
            self._check_label(self.label, self.issuer, self.account_name)
        else:
            set_(self, "label", self._build_label(self.issuer, self.account_name))
        if not self.raw_uri:
            set_(self, "raw_uri", self.to_uri())

    @staticmethod
    def _check_serial(value: int, param: str, minval: int = 0) -> None:
        """
        check that serial value (e.g. 'counter') is an integer >= minval
        """
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{param} must be an integer, not {type(value).__name__}")
        if value < minval:
            raise ValueError(f"{param} must be >= {minval}")

    @staticmethod
    def _split_label(label: str) -> tuple[str, str]:
        """split label into ``(issuer, account_name)``; issuer is empty if absent"""
        issuer, sep, account_name = label.partition(":")
        if not sep:
            return "", label
        if account_name.startswith(" "):
            account_name = account_name[1:]
        return issuer, account_name

    @classmethod
    def _check_label(cls, label: str, issuer: str, account_name: str) -> None:
        # label must parse back to the same account name & issuer.
        # a label issuer differing from **issuer** is allowed, the latter wins.
        label_issuer, label_account = cls._split_label(label)
        if label_account != account_name:
            raise ValueError(
                f"label {label!r} does not match account name {account_name!r}"
            )
        if label_issuer and not issuer:
            raise ValueError(f"label {label!r} names an issuer, but issuer is empty")

    @staticmethod
    def _build_label(issuer: str, account_name: str) -> str:
        # labels are split on the first ':' when parsed,
        # and a single space after it is dropped
        if issuer:
            if ":" in issuer:
                raise ValueError("issuer may not contain ':'")
            if account_name.startswith(" "):
                raise ValueError(
                    "account name may not start with a space when an issuer is set"
                )
            return f"{issuer}:{account_name}"
        if ":" in account_name:
            raise ValueError("account name may not contain ':' unless an issuer is set")
        return account_name

    def __str__(self) -> str:
        return self.raw_uri

    # =========================================================================
    # secret helpers
    # =========================================================================

    def secret_bytes(self) -> bytes:
        """
        secret decoded to raw bytes.

        :raises ~libotp.exc.InvalidSecretEncodingError: if the secret isn't valid base32.
        """
        return base32.decode(self.secret)

    def pretty_secret(self, sep: str = "-") -> str:
        """
        secret formatted for humans who can't scan the qrcode,
        and have to type it into their client by hand.

            >>> key.pretty_secret()
            'JBSW-Y3DP-EHPK-3PXP'
        """
        return base32.group_string(self.secret.upper(), sep)

    def validate_opts(self, skew: int = 0) -> ValidateOpts:
        """options matching this key, for the validate_custom() functions"""
        return ValidateOpts(
            digits=self.digits,
            algorithm=self.algorithm,
            skew=skew,
            period=self.period,
        )

    # =========================================================================
    # uri parsing
    # =========================================================================

    @classmethod
    def from_uri(cls, uri: StrOrBytes) -> Self:
        """
        create a Key from an ``otpauth://`` uri (such as returned by :meth:`to_uri`).

        :raises ~libotp.exc.URIParseError:
            if the uri cannot be parsed or contains errors;
            :attr:`~libotp.exc.URIParseError.reason` tells which.
        """
        # trailing newlines are a common copy & paste artifact
        try:
            uri = as_str(uri).strip()
        except UnicodeDecodeError as err:
            raise URIParseError(URIParseReason.MALFORMED_URI, str(err)) from None
        try:
            result = urlsplit(uri)
        except ValueError as err:
            raise URIParseError(URIParseReason.MALFORMED_URI, str(err)) from None
        if result.scheme != _SCHEME:
            raise URIParseError(URIParseReason.BAD_SCHEME, result.scheme)
        try:
            type = OTPType(result.netloc.lower())
        except ValueError:
            raise URIParseError(URIParseReason.UNKNOWN_TYPE, result.netloc) from None

        # decode label from uri path
        label = result.path
        if label.startswith("/") and len(label) > 1:
            label = unquote(label[1:])
        else:
            raise URIParseError(URIParseReason.MISSING_LABEL)

        label_issuer, account_name = cls._split_label(label)
        if not account_name:
            raise URIParseError(URIParseReason.MISSING_LABEL, "empty account name")

        params = cls._parse_query(result.query)

        secret = params.pop("secret", "")
        if not secret:
            raise URIParseError(URIParseReason.MISSING_SECRET)

        # synchronize issuer prefix w/ issuer param; the param wins
        issuer = params.pop("issuer", "")
        if not issuer:
            issuer = label_issuer
        elif label_issuer and issuer != label_issuer:
            log.debug("label issuer %r differs from issuer param %r", label_issuer, issuer)
            warn(
                f"otpauth uri label issuer {label_issuer!r} differs from "
                f"issuer parameter {issuer!r}, using the latter",
                OTPRuntimeWarning,
                stacklevel=2,
            )

        kwds = dict(
            type=type,
            account_name=account_name,
            secret=secret,
            issuer=issuer,
            label=label,
            raw_uri=uri,
        )
        if "algorithm" in params:
            try:
                kwds["algorithm"] = Algorithm.parse(params.pop("algorithm"))
            except ValueError as err:
                raise URIParseError(
                    URIParseReason.UNRECOGNIZED_ALGORITHM, str(err)
                ) from None
        if "digits" in params:
            kwds["digits"] = cls._parse_digits(params.pop("digits"))
        param, minval = _type_params[type]
        if param in params:
            kwds[param] = cls._parse_int(params.pop(param), param, minval)

        if params:
            # malicious uri, or a newer revision of the key uri format?
            # in either case, we issue warning and ignore extra params.
            log.debug("ignoring unexpected otpauth uri parameters: %r", sorted(params))
            warn(
                f"unexpected parameters encountered in otpauth uri: {sorted(params)!r}",
                OTPRuntimeWarning,
                stacklevel=2,
            )
        return cls(**kwds)

    @staticmethod
    def _parse_query(query: str) -> dict[str, str]:
        params: dict[str, str] = {}
        if not query:
            return params
        try:
            pairs = parse_qsl(query, keep_blank_values=True, strict_parsing=True)
        except ValueError as err:
            raise URIParseError(URIParseReason.MALFORMED_QUERY, str(err)) from None
        for name, value in pairs:
            if name in params:
                raise URIParseError(URIParseReason.DUPLICATE_PARAMETER, repr(name))
            params[name] = value
        return params

    @staticmethod
    def _parse_digits(source: str) -> Digits:
        try:
            return Digits(int(source))
        except ValueError:
            raise URIParseError(URIParseReason.UNRECOGNIZED_DIGITS, repr(source)) from None

    @staticmethod
    def _parse_int(source: str, param: str, minval: int) -> int:
        """uri parsing helper -- int() wrapper"""
        try:
            value = int(source)
        except ValueError:
            value = None
        if value is None or value < minval:
            raise URIParseError(
                URIParseReason.MALFORMED_PARAMETER, f"{param}={source!r}"
            )
        return value

    # =========================================================================
    # uri rendering
    # =========================================================================

    def to_uri(self) -> str:
        """
        serialize key and configuration into an ``otpauth://`` uri.

        Usage example::

            >>> Key(OTPType.TOTP, "alice@example.com", "JBSWY3DPEHPK3PXP", issuer="Snake Oil").to_uri()
            'otpauth://totp/Snake%20Oil:alice@example.com?secret=JBSWY3DPEHPK3PXP&issuer=Snake%20Oil&algorithm=SHA1&digits=6&period=30'
        """
        # NOTE: reference examples leave '@' and the issuer ':' separator unescaped
        label = quote(self.label, safe="@:")

        args = self._to_uri_params()
        # NOTE: not using urllib.urlencode() because it encodes ' ' as '+';
        #       but the key uri format uses '%20', and not all clients accept '+'.
        argstr = "&".join(f"{name}={quote(value, safe='')}" for name, value in args)
        return f"{_SCHEME}://{self.type.value}/{label}?{argstr}"

    def _to_uri_params(self) -> list[tuple[str, str]]:
        """return list of (key, param) entries for URI"""
        args = [("secret", self.secret)]
        if self.issuer:
            args.append(("issuer", self.issuer))
        args.append(("algorithm", self.algorithm.value))
        args.append(("digits", str(self.digits.value)))
        if self.type is OTPType.TOTP:
            args.append(("period", str(self.period)))
        else:
            args.append(("counter", str(self.counter)))
        return args
