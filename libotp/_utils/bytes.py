from typing import Union

StrOrBytes = Union[str, bytes]


def as_bytes(value: StrOrBytes) -> bytes:
    return value.encode("utf8") if isinstance(value, str) else value


def as_str(value: StrOrBytes) -> str:
    return value.decode("utf8") if isinstance(value, bytes) else value


def as_ascii(value: StrOrBytes) -> bytes:
    """
    coerce str / bytes to ascii-encoded bytes.

    :raises UnicodeError: if value contains anything outside of 7-bit ascii.
    """
    if isinstance(value, str):
        return value.encode("ascii")
    value.decode("ascii")
    return value
