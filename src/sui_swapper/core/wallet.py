"""
Wallet: key material and transaction signing for Sui.

Key material is resolved once at startup into a `Wallet`, the only object in
the package that holds a private key. Everything else sees the address and
the `sign_transaction` capability.

Sui Ed25519 conventions:
  - address   = blake2b-256(0x00 || public_key)
  - signature = 0x00 || ed25519(blake2b-256(intent || tx_bytes)) || public_key
  - mnemonic derivation path m/44'/784'/0'/0'/0' (SLIP-0010)
"""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass
from typing import Union

import nacl.signing
from bip_utils import Bip32Slip10Ed25519, Bip39MnemonicValidator, Bip39SeedGenerator

ED25519_FLAG = 0x00
SUI_DERIVATION_PATH = "m/44'/784'/0'/0'/0'"

# IntentScope.TransactionData, IntentVersion.V0, AppId.Sui
TRANSACTION_INTENT = bytes([0, 0, 0])

PRIVATE_KEY_HEX_LENGTH = 64


class WalletError(Exception):
    pass


@dataclass(frozen=True)
class PrivateKey:
    """Raw 32-byte Ed25519 seed."""
    seed: bytes

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"


@dataclass(frozen=True)
class Mnemonic:
    """BIP39 phrase plus the derivation path to use."""
    phrase: str
    path: str = SUI_DERIVATION_PATH

    def __repr__(self) -> str:
        return f"Mnemonic(<redacted>, path={self.path!r})"


SigningMaterial = Union[PrivateKey, Mnemonic]


def parse_private_key(hex_key: str) -> PrivateKey:
    """
    Parse a hex private key, with or without a 0x prefix.

    Raises:
        WalletError: if the key is not exactly 64 hex characters
    """
    clean = hex_key.strip().removeprefix("0x").removeprefix("0X")
    if len(clean) != PRIVATE_KEY_HEX_LENGTH:
        raise WalletError(
            f"Invalid private key length. Must be {PRIVATE_KEY_HEX_LENGTH} hex characters."
        )
    try:
        return PrivateKey(seed=bytes.fromhex(clean))
    except ValueError:
        raise WalletError("Private key is not valid hex.") from None


def signing_material_from_env(
    private_key: str | None,
    mnemonic: str | None,
) -> SigningMaterial:
    """
    Choose the signing material from raw configuration values.

    A private key wins when both are set. Exactly one of them is required.
    """
    if private_key and private_key.strip():
        return parse_private_key(private_key)
    if mnemonic and mnemonic.strip():
        return Mnemonic(phrase=" ".join(mnemonic.split()))
    raise WalletError("Either PRIVATE_KEY or MNEMONIC must be provided in .env file")


def derive_seed(material: SigningMaterial) -> bytes:
    """Resolve signing material to a 32-byte Ed25519 seed."""
    if isinstance(material, PrivateKey):
        return material.seed
    if isinstance(material, Mnemonic):
        if not Bip39MnemonicValidator().IsValid(material.phrase):
            raise WalletError("Invalid BIP39 mnemonic phrase.")
        seed = Bip39SeedGenerator(material.phrase).Generate()
        derived = Bip32Slip10Ed25519.FromSeed(seed).DerivePath(material.path)
        return derived.PrivateKey().Raw().ToBytes()
    raise WalletError(f"Unsupported signing material: {type(material).__name__}")


def public_key_to_address(public_key: bytes) -> str:
    digest = hashlib.blake2b(bytes([ED25519_FLAG]) + public_key, digest_size=32).digest()
    return "0x" + digest.hex()


def transaction_digest(tx_bytes: bytes) -> bytes:
    """blake2b-256 of the intent-prefixed transaction: the bytes that get signed."""
    return hashlib.blake2b(TRANSACTION_INTENT + tx_bytes, digest_size=32).digest()


class Wallet:
    """
    Sui Ed25519 wallet.

    Usage:
        wallet = Wallet.from_private_key("0x...")
        wallet = Wallet.from_mnemonic("word1 word2 ...")
        wallet = Wallet.from_signing_material(signing_material_from_env(pk, phrase))
        signature = wallet.sign_transaction(tx_bytes)
    """

    def __init__(self, seed: bytes, source: str = "private_key") -> None:
        if len(seed) != 32:
            raise WalletError(f"Ed25519 seed must be 32 bytes, got {len(seed)}.")
        self._signing_key = nacl.signing.SigningKey(seed)
        self.public_key = self._signing_key.verify_key.encode()
        self.address = public_key_to_address(self.public_key)
        self.source = source

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_signing_material(cls, material: SigningMaterial) -> Wallet:
        source = "mnemonic" if isinstance(material, Mnemonic) else "private_key"
        return cls(derive_seed(material), source=source)

    @classmethod
    def from_private_key(cls, hex_key: str) -> Wallet:
        return cls.from_signing_material(parse_private_key(hex_key))

    @classmethod
    def from_mnemonic(cls, phrase: str, path: str = SUI_DERIVATION_PATH) -> Wallet:
        return cls.from_signing_material(Mnemonic(phrase=" ".join(phrase.split()), path=path))

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign_transaction(self, tx_bytes: bytes) -> str:
        """
        Sign serialized TransactionData.

        Returns:
            str: base64 serialized signature (flag || signature || public key)
        """
        signed = self._signing_key.sign(transaction_digest(tx_bytes))
        serialized = bytes([ED25519_FLAG]) + signed.signature + self.public_key
        return base64.b64encode(serialized).decode("ascii")

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r}, source={self.source!r})"
