"""KeeLoq-style NLFSR block cipher used to derive numeric access codes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = [
    "CODE_PREFIX",
    "KeyPair",
    "crypt_usercode",
    "decrypt",
    "derive_keys",
    "encrypt",
    "format_code",
    "parse_code",
    "recover_usercode",
]


ROUNDS: Final[int] = 528
CODE_PREFIX: Final[int] = 5_000_000_000

_MASK32: Final[int] = 0xFFFFFFFF
# Bit i of this constant is the NLF output for index
# (b31 << 4) | (b26 << 3) | (b20 << 2) | (b9 << 1) | b1.
_NLF: Final[int] = 0x3A5C742E
_KEY_N: Final[bytes] = bytes((133, 103, 37, 67))
_KEY_T: Final[bytes] = bytes((68, 84, 25, 55))
_SECRET_WIDTH: Final[int] = 8


@dataclass(frozen=True, slots=True)
class KeyPair:
    """The two 32-bit round key halves derived from an admin secret."""

    key1: int
    key2: int


def _nlf(state: int) -> int:
    index = (
        ((state >> 27) & 0x10)
        | ((state >> 23) & 0x08)
        | ((state >> 18) & 0x04)
        | ((state >> 8) & 0x02)
        | ((state >> 1) & 0x01)
    )
    return (_NLF >> index) & 1


def encrypt(data: int, key1: int, key2: int) -> int:
    """Run the 528 round non-linear feedback shift over a 32-bit block."""

    state = data & _MASK32
    schedule = (key1 & _MASK32) | ((key2 & _MASK32) << 32)
    for round_index in range(ROUNDS):
        key_bit = (schedule >> (round_index & 63)) & 1
        feedback = _nlf(state) ^ ((state >> 16) & 1) ^ (state & 1) ^ key_bit
        state = (state >> 1) | (feedback << 31)
    return state


def decrypt(data: int, key1: int, key2: int) -> int:
    """Invert :func:`encrypt` by replaying the rounds backwards."""

    state = data & _MASK32
    schedule = (key1 & _MASK32) | ((key2 & _MASK32) << 32)
    for round_index in range(ROUNDS - 1, -1, -1):
        key_bit = (schedule >> (round_index & 63)) & 1
        feedback = state >> 31
        shifted = (state << 1) & _MASK32
        # ``shifted`` holds every pre-round bit except bit 0, which is solved for.
        lowest = feedback ^ _nlf(shifted) ^ ((shifted >> 16) & 1) ^ key_bit
        state = shifted | lowest
    return state


def derive_keys(admin_secret: str) -> KeyPair:
    """Derive ``key1``/``key2`` from an admin secret.

    The secret is truncated or right-padded with ``'0'`` to eight characters.
    Each character contributes its digit value (non-digits count as zero)
    and is XORed into a fixed four byte constant per key half.
    """

    padded = admin_secret[:_SECRET_WIDTH].ljust(_SECRET_WIDTH, "0")
    digits = [int(ch) if ch.isascii() and ch.isdigit() else 0 for ch in padded]
    key_s = bytes(n ^ d for n, d in zip(_KEY_N, digits[:4]))
    key_g = bytes(t ^ d for t, d in zip(_KEY_T, digits[4:]))
    return KeyPair(
        key1=int.from_bytes(key_s, "little"),
        key2=int.from_bytes(key_g, "little"),
    )


def _swap_bytes(value: int) -> int:
    return int.from_bytes((value & _MASK32).to_bytes(4, "big"), "little")


def crypt_usercode(value: int, admin_secret: str) -> int:
    """Encrypt a window value for ``admin_secret`` the way codes are minted."""

    keys = derive_keys(admin_secret)
    return _swap_bytes(encrypt(_swap_bytes(value), keys.key1, keys.key2))


def recover_usercode(cipher_value: int, admin_secret: str) -> int:
    """Return the window value that :func:`crypt_usercode` maps to ``cipher_value``."""

    keys = derive_keys(admin_secret)
    return _swap_bytes(decrypt(_swap_bytes(cipher_value), keys.key1, keys.key2))


def format_code(cipher_value: int) -> str:
    """Render a cipher output as the user-facing ``5``-prefixed code."""

    return str(CODE_PREFIX + (cipher_value & _MASK32))


def parse_code(code: str) -> int | None:
    """Strip the code prefix, returning ``None`` for anything malformed."""

    token = (code or "").strip()
    if not token.isascii() or not token.isdigit():
        return None
    value = int(token) - CODE_PREFIX
    if value < 0 or value > _MASK32:
        return None
    return value
