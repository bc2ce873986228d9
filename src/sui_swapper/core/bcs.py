"""
BCS (Binary Canonical Serialization) encoding helpers for Sui.

Only the encoding side is implemented: the transaction builder serializes
TransactionData and pure call arguments, the node returns everything else
as JSON.

Reference: https://github.com/diem/bcs
"""

from __future__ import annotations

from sui_swapper.core.models import normalize_sui_address

# Base58 alphabet (same as Bitcoin), used for Sui object digests
_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_MAP = {char: i for i, char in enumerate(_ALPHABET)}

ADDRESS_LENGTH = 32
DIGEST_LENGTH = 32

_U8_MAX = (1 << 8) - 1
_U16_MAX = (1 << 16) - 1
_U64_MAX = (1 << 64) - 1
_U128_MAX = (1 << 128) - 1
_U256_MAX = (1 << 256) - 1

# TypeTag variant indices
_PRIMITIVE_TYPE_TAGS = {
    "bool": 0,
    "u8": 1,
    "u64": 2,
    "u128": 3,
    "address": 4,
    "signer": 5,
    "u16": 8,
    "u32": 9,
    "u256": 10,
}
_VECTOR_TYPE_TAG = 6
_STRUCT_TYPE_TAG = 7


class BCSError(Exception):
    """Raised for values that cannot be BCS-encoded."""
    pass


# ------------------------------------------------------------------
# Primitives
# ------------------------------------------------------------------

def encode_uleb128(value: int) -> bytes:
    """Encode a non-negative integer as ULEB128 (used for lengths and enum tags)."""
    if value < 0:
        raise BCSError(f"ULEB128 cannot encode negative value {value}")
    result = bytearray()
    while value > 0x7F:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value & 0x7F)
    return bytes(result)


def _encode_uint(value: int, max_value: int, size: int) -> bytes:
    if not 0 <= value <= max_value:
        raise BCSError(f"Value {value} out of range for u{size * 8}")
    return value.to_bytes(size, "little")


def encode_u8(value: int) -> bytes:
    return _encode_uint(value, _U8_MAX, 1)


def encode_u16(value: int) -> bytes:
    return _encode_uint(value, _U16_MAX, 2)


def encode_u64(value: int) -> bytes:
    return _encode_uint(value, _U64_MAX, 8)


def encode_u128(value: int) -> bytes:
    return _encode_uint(value, _U128_MAX, 16)


def encode_u256(value: int) -> bytes:
    return _encode_uint(value, _U256_MAX, 32)


def encode_bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def encode_bytes(data: bytes) -> bytes:
    """Length-prefixed byte vector."""
    return encode_uleb128(len(data)) + data


def encode_str(value: str) -> bytes:
    return encode_bytes(value.encode("utf-8"))


def encode_vector(items: list[bytes]) -> bytes:
    """Length-prefixed vector of already-encoded items."""
    return encode_uleb128(len(items)) + b"".join(items)


def encode_option(item: bytes | None) -> bytes:
    return b"\x00" if item is None else b"\x01" + item


def encode_address(address: str) -> bytes:
    """Encode a 0x-prefixed Sui address / object ID as 32 raw bytes."""
    normalized = normalize_sui_address(address)
    try:
        raw = bytes.fromhex(normalized[2:])
    except ValueError as e:
        raise BCSError(f"Invalid address {address!r}: {e}") from None
    if len(raw) != ADDRESS_LENGTH:
        raise BCSError(f"Address {address!r} is longer than {ADDRESS_LENGTH} bytes")
    return raw


def encode_digest(digest: str) -> bytes:
    """Encode a Base58 object digest as a length-prefixed 32-byte vector."""
    raw = base58_decode(digest)
    if len(raw) != DIGEST_LENGTH:
        raise BCSError(f"Digest {digest!r} decodes to {len(raw)} bytes, expected {DIGEST_LENGTH}")
    return encode_bytes(raw)


def encode_object_ref(object_id: str, version: int, digest: str) -> bytes:
    """ObjectRef = (ObjectID, SequenceNumber, ObjectDigest)."""
    return encode_address(object_id) + encode_u64(version) + encode_digest(digest)


# ------------------------------------------------------------------
# Move type tags
# ------------------------------------------------------------------

def encode_type_tag(type_str: str) -> bytes:
    """
    Encode a Move type string as a TypeTag.

    Supports primitives, vector<T>, and struct tags with nested type
    parameters, e.g. "0x2::coin::Coin<0x2::sui::SUI>".
    """
    tag, rest = _parse_type_tag(type_str.strip())
    if rest.strip():
        raise BCSError(f"Trailing characters in type {type_str!r}: {rest!r}")
    return tag


def _parse_type_tag(s: str) -> tuple[bytes, str]:
    s = s.lstrip()
    for name, index in _PRIMITIVE_TYPE_TAGS.items():
        if s.startswith(name) and not s[len(name):len(name) + 1].isalnum():
            return encode_uleb128(index), s[len(name):]

    if s.startswith("vector<"):
        inner, rest = _parse_type_tag(s[len("vector<"):])
        rest = rest.lstrip()
        if not rest.startswith(">"):
            raise BCSError(f"Unterminated vector type near {s!r}")
        return encode_uleb128(_VECTOR_TYPE_TAG) + inner, rest[1:]

    return _parse_struct_tag(s)


def _parse_struct_tag(s: str) -> tuple[bytes, str]:
    end = len(s)
    for i, char in enumerate(s):
        if char in "<>,":
            end = i
            break
    head, rest = s[:end].strip(), s[end:]
    parts = head.split("::")
    if len(parts) != 3 or not all(parts):
        raise BCSError(f"Invalid struct type {head!r}")
    address, module, name = parts

    type_params: list[bytes] = []
    if rest.startswith("<"):
        rest = rest[1:]
        while True:
            param, rest = _parse_type_tag(rest)
            type_params.append(param)
            rest = rest.lstrip()
            if rest.startswith(","):
                rest = rest[1:]
                continue
            if rest.startswith(">"):
                rest = rest[1:]
                break
            raise BCSError(f"Malformed type parameters in {s!r}")

    encoded = (
        encode_uleb128(_STRUCT_TYPE_TAG)
        + encode_address(address)
        + encode_str(module)
        + encode_str(name)
        + encode_vector(type_params)
    )
    return encoded, rest


# ------------------------------------------------------------------
# Base58
# ------------------------------------------------------------------

def base58_decode(s: str) -> bytes:
    """Decode a Base58-encoded string to bytes."""
    n = 0
    try:
        for char in s.encode("ascii"):
            n = n * 58 + _ALPHABET_MAP[char]
    except (KeyError, UnicodeEncodeError):
        raise BCSError(f"Invalid Base58 string: {s!r}") from None

    if n == 0:
        result = b""
    else:
        byte_length = (n.bit_length() + 7) // 8
        result = n.to_bytes(byte_length, "big")

    # Each leading '1' is a 0x00 byte
    pad_size = 0
    for char in s.encode("ascii"):
        if char == _ALPHABET[0]:
            pad_size += 1
        else:
            break

    return b"\x00" * pad_size + result


def base58_encode(data: bytes) -> str:
    """Encode bytes to a Base58 string."""
    n = int.from_bytes(data, "big")
    result = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_ALPHABET[remainder:remainder + 1])
    result.reverse()

    pad_size = 0
    for byte in data:
        if byte == 0:
            pad_size += 1
        else:
            break

    return (b"1" * pad_size + b"".join(result)).decode("ascii")
