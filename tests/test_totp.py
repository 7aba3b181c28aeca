import base64
import datetime
from datetime import timezone

import pytest

from libotp import base32, totp
from libotp.exc import ErrorKind, InvalidInputLengthError, MissingIssuerError
from libotp.key import Key
from libotp.options import Algorithm, Digits, GenerateOpts, OTPType, ValidateOpts

SECRET_SHA1 = base64.b32encode(b"12345678901234567890").decode("ascii")
SECRET_SHA256 = base64.b32encode(b"12345678901234567890123456789012").decode("ascii")
SECRET_SHA512 = base64.b32encode(
    b"1234567890123456789012345678901234567890123456789012345678901234"
).decode("ascii")

# Test vectors from RFC 6238 Appendix B.
# NOTE: the rfc documents these as sharing the SAME secret, which is wrong --
#       the secret's size depends on the hmac algorithm (see rfc 6238 errata).
RFC6238_VECTORS = [
    (59, "94287082", Algorithm.SHA1, SECRET_SHA1),
    (59, "46119246", Algorithm.SHA256, SECRET_SHA256),
    (59, "90693936", Algorithm.SHA512, SECRET_SHA512),
    (1111111109, "07081804", Algorithm.SHA1, SECRET_SHA1),
    (1111111109, "68084774", Algorithm.SHA256, SECRET_SHA256),
    (1111111109, "25091201", Algorithm.SHA512, SECRET_SHA512),
    (1111111111, "14050471", Algorithm.SHA1, SECRET_SHA1),
    (1111111111, "67062674", Algorithm.SHA256, SECRET_SHA256),
    (1111111111, "99943326", Algorithm.SHA512, SECRET_SHA512),
    (1234567890, "89005924", Algorithm.SHA1, SECRET_SHA1),
    (1234567890, "91819424", Algorithm.SHA256, SECRET_SHA256),
    (1234567890, "93441116", Algorithm.SHA512, SECRET_SHA512),
    (2000000000, "69279037", Algorithm.SHA1, SECRET_SHA1),
    (2000000000, "90698825", Algorithm.SHA256, SECRET_SHA256),
    (2000000000, "38618901", Algorithm.SHA512, SECRET_SHA512),
    (20000000000, "65353130", Algorithm.SHA1, SECRET_SHA1),
    (20000000000, "77737706", Algorithm.SHA256, SECRET_SHA256),
    (20000000000, "47863826", Algorithm.SHA512, SECRET_SHA512),
]


@pytest.mark.parametrize(("time", "code", "algorithm", "secret"), RFC6238_VECTORS)
def test_validate_rfc_matrix(
    time: int, code: str, algorithm: Algorithm, secret: str
) -> None:
    opts = ValidateOpts(digits=Digits.EIGHT, algorithm=algorithm)
    assert totp.validate_custom(code, secret, time, opts) is True


@pytest.mark.parametrize(("time", "code", "algorithm", "secret"), RFC6238_VECTORS)
def test_generate_rfc_matrix(
    time: int, code: str, algorithm: Algorithm, secret: str
) -> None:
    opts = ValidateOpts(digits=Digits.EIGHT, algorithm=algorithm)
    assert totp.generate_code_custom(secret, time, opts) == code


@pytest.mark.parametrize("time", [29, 59, 61])
def test_validate_skew(time: int) -> None:
    opts = ValidateOpts(digits=Digits.EIGHT, skew=1)
    assert totp.validate_custom("94287082", SECRET_SHA1, time, opts) is True


def test_skew_window() -> None:
    opts = ValidateOpts(skew=1)
    code = totp.generate_code_custom(SECRET_SHA1, 300, opts)  # counter 10

    # accepted from server steps 9, 10, 11
    for time in [270, 300, 330, 359]:
        assert totp.validate_custom(code, SECRET_SHA1, time, opts) is True

    # but not from steps 8 or 12
    assert totp.validate_custom(code, SECRET_SHA1, 269, opts) is False
    assert totp.validate_custom(code, SECRET_SHA1, 360, opts) is False

    # without skew, only the exact step matches
    exact = ValidateOpts()
    assert totp.validate_custom(code, SECRET_SHA1, 300, exact) is True
    assert totp.validate_custom(code, SECRET_SHA1, 330, exact) is False


def test_skew_rejects_two_steps_ahead() -> None:
    opts = ValidateOpts(skew=1)
    future = totp.generate_code_custom(SECRET_SHA1, 360, opts)  # counter 12
    assert totp.validate_custom(future, SECRET_SHA1, 300, opts) is False


def test_skew_near_epoch() -> None:
    # steps before counter 0 are skipped, not an error
    opts = ValidateOpts(skew=2)
    code = totp.generate_code_custom(SECRET_SHA1, 0, opts)
    assert totp.validate_custom(code, SECRET_SHA1, 5, opts) is True


def test_custom_period() -> None:
    opts = ValidateOpts(period=60, digits=Digits.EIGHT)
    # 119 // 60 == 1, same counter as 59 // 30
    assert totp.generate_code_custom(SECRET_SHA1, 119, opts) == "94287082"


def test_validate_invalid_length() -> None:
    opts = ValidateOpts()
    with pytest.raises(InvalidInputLengthError) as exc_info:
        totp.validate_custom("foo", SECRET_SHA1, 59, opts)
    assert exc_info.value.kind is ErrorKind.INVALID_INPUT_LENGTH

    assert totp.validate("foo", SECRET_SHA1, 59) is False


def test_validate_default_options() -> None:
    code = totp.generate_code(SECRET_SHA1, 59)
    assert code == "287082"
    assert totp.validate(code, SECRET_SHA1, 59) is True
    # one step of drift is allowed
    assert totp.validate(code, SECRET_SHA1, 89) is True
    assert totp.validate(code, SECRET_SHA1, 119) is False


def test_generate_code_now(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(totp._time, "time", lambda: 59.9)
    assert totp.generate_code(SECRET_SHA1) == "287082"
    assert totp.validate("287082", SECRET_SHA1) is True


@pytest.mark.parametrize(
    ("time", "expected"),
    [
        (59, 59),
        (59.9, 59),
        (datetime.datetime(1970, 1, 1, 0, 0, 59, tzinfo=timezone.utc), 59),
        (datetime.datetime(1970, 1, 1, 0, 0, 59, 999999), 59),
        (
            datetime.datetime(
                2009, 2, 14, 1, 31, 30, tzinfo=timezone(datetime.timedelta(hours=2))
            ),
            1234567890,
        ),
    ],
)
def test_normalize_time(time, expected: int) -> None:
    assert totp.normalize_time(time) == expected


def test_normalize_time_invalid() -> None:
    with pytest.raises(TypeError):
        totp.normalize_time("59")
    with pytest.raises(TypeError):
        totp.normalize_time(True)


def test_time_to_counter() -> None:
    assert totp.time_to_counter(0) == 0
    assert totp.time_to_counter(29) == 0
    assert totp.time_to_counter(30) == 1
    assert totp.time_to_counter(59, 60) == 0
    with pytest.raises(ValueError):
        totp.time_to_counter(-1)
    with pytest.raises(ValueError):
        totp.time_to_counter(59, 0)


def test_generate_with_datetime() -> None:
    opts = ValidateOpts(digits=Digits.EIGHT)
    when = datetime.datetime(2005, 3, 18, 1, 58, 29, tzinfo=timezone.utc)
    assert totp.generate_code_custom(SECRET_SHA1, when, opts) == "07081804"


def test_generate() -> None:
    key = totp.generate(GenerateOpts(issuer="SnakeOil", account_name="alice@example.com"))
    assert key.type is OTPType.TOTP
    assert key.issuer == "SnakeOil"
    assert key.account_name == "alice@example.com"
    assert key.period == 30
    assert len(key.secret) == 32
    assert len(key.secret_bytes()) == 20
    assert "period=30" in str(key)
    assert "counter=" not in str(key)

    key = totp.generate(GenerateOpts(issuer="Snake Oil", account_name="alice@example.com"))
    assert "issuer=Snake%20Oil" in str(key)

    key = totp.generate(
        GenerateOpts(issuer="SnakeOil", account_name="alice@example.com", secret_size=20)
    )
    assert len(key.secret) == 32

    key = totp.generate(
        GenerateOpts(issuer="SnakeOil", account_name="alice@example.com", secret_size=0)
    )
    assert len(key.secret) == 32

    key = totp.generate(
        GenerateOpts(issuer="SnakeOil", account_name="alice@example.com", secret_size=13)
    )
    assert "=" not in key.secret

    key = totp.generate(
        GenerateOpts(
            issuer="SnakeOil", account_name="alice@example.com", secret=b"helloworld"
        )
    )
    assert base32.decode(key.secret) == b"helloworld"

    with pytest.raises(MissingIssuerError):
        totp.generate(GenerateOpts(account_name="alice@example.com"))


def test_generate_custom_period() -> None:
    key = totp.generate(
        GenerateOpts(issuer="SnakeOil", account_name="alice@example.com", period=60)
    )
    assert key.period == 60
    assert "period=60" in str(key)
    assert key.validate_opts().period == 60


def test_generate_rand_override() -> None:
    calls = []

    def rand(size: int) -> bytes:
        calls.append(size)
        return b"\x00" * size

    key = totp.generate(
        GenerateOpts(
            issuer="SnakeOil", account_name="alice@example.com", secret_size=10, rand=rand
        )
    )
    assert calls == [10]
    assert key.secret == "A" * 16


def test_google_lower_case_secret() -> None:
    key = Key.from_uri(
        "otpauth://totp/Google%3Afoo%40example.com"
        "?secret=qlt6vmy6svfx4bt4rpmisaiyol6hihca&issuer=Google"
    )
    assert key.secret == "qlt6vmy6svfx4bt4rpmisaiyol6hihca"

    now = datetime.datetime.now(timezone.utc)
    code = totp.generate_code(key.secret, now)
    assert totp.validate(code, key.secret, now) is True
    assert code == totp.generate_code(key.secret.upper(), now)


def test_validate_negative_time() -> None:
    with pytest.raises(ValueError):
        totp.validate_custom("287082", SECRET_SHA1, -1, ValidateOpts())
    assert totp.validate("287082", SECRET_SHA1, -1) is False
