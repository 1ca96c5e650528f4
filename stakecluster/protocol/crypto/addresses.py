# MIT License
# Copyright (c) 2025 Hashborn

import bech32 # type: ignore
from dataclasses import dataclass
from typing import Tuple, Optional
from ..types.common import AddressType, MalformedAddress
from ..config.params import (
    MAX_BECH32_LENGTH, PAYMENT_KEY_HASH_PREFIX, CREDENTIAL_HASH_LENGTH,
    REWARD_PREFIX_MAINNET, REWARD_PREFIX_TESTNET
)

MAINNET_ID = 1

_BASE_TYPES = (
    AddressType.BASE_KEY_KEY, AddressType.BASE_SCRIPT_KEY,
    AddressType.BASE_KEY_SCRIPT, AddressType.BASE_SCRIPT_SCRIPT,
)
_POINTER_TYPES = (AddressType.POINTER_KEY, AddressType.POINTER_SCRIPT)
_ENTERPRISE_TYPES = (AddressType.ENTERPRISE_KEY, AddressType.ENTERPRISE_SCRIPT)
_REWARD_TYPES = (AddressType.REWARD_KEY, AddressType.REWARD_SCRIPT)
_SCRIPT_PAYMENT_TYPES = (
    AddressType.BASE_SCRIPT_KEY, AddressType.BASE_SCRIPT_SCRIPT,
    AddressType.POINTER_SCRIPT, AddressType.ENTERPRISE_SCRIPT,
)
_SCRIPT_STAKE_TYPES = (AddressType.BASE_KEY_SCRIPT, AddressType.BASE_SCRIPT_SCRIPT, AddressType.REWARD_SCRIPT)

@dataclass(frozen=True)
class ShelleyAddress:
    """Decoded view of a bech32 Shelley address."""
    hrp: str
    address_type: AddressType
    network_tag: int
    payment_hash: Optional[bytes] = None
    payment_is_script: bool = False
    stake_hash: Optional[bytes] = None
    stake_is_script: bool = False

def encode_bech32(hrp: str, payload: bytes) -> str:
    """Encodes raw bytes as bech32 under the given prefix."""
    five_bit_r = bech32.convertbits(payload, 8, 5)
    if five_bit_r is None:
        raise ValueError("Error converting to bech32 words")

    return bech32.bech32_encode(hrp, five_bit_r)

def decode_bech32(text: str) -> Tuple[str, bytes]:
    """
    Decodes bech32 text to (prefix, payload_bytes).

    bech32.bech32_decode caps input at 90 characters (BIP-173), which every
    Shelley base address exceeds, so the envelope is parsed here and only the
    checksum and word conversion go through the library.
    """
    if text.lower() != text and text.upper() != text:
        raise ValueError("Mixed case bech32 string")

    text = text.lower()
    pos = text.rfind("1")
    if pos < 1 or pos + 7 > len(text) or len(text) > MAX_BECH32_LENGTH:
        raise ValueError("Invalid bech32 length or separator position")

    hrp = text[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError("Invalid character in bech32 prefix")

    if any(c not in bech32.CHARSET for c in text[pos + 1:]):
        raise ValueError("Invalid character in bech32 data")

    data = [bech32.CHARSET.find(c) for c in text[pos + 1:]]
    if not bech32.bech32_verify_checksum(hrp, data):
        raise ValueError("Invalid bech32 checksum")

    decoded = bech32.convertbits(data[:-6], 5, 8, False)
    if decoded is None:
        raise ValueError("Error converting from bech32 words")

    return hrp, bytes(decoded)

def decode_address(address: str) -> ShelleyAddress:
    """Decodes a bech32 Shelley address into its header and credential hashes."""
    try:
        hrp, payload = decode_bech32(address)
    except (ValueError, TypeError, AttributeError) as e:
        raise MalformedAddress(address, str(e))

    if not payload:
        raise MalformedAddress(address, "empty payload")

    header = payload[0]
    try:
        address_type = AddressType(header >> 4)
    except ValueError:
        raise MalformedAddress(address, f"unknown address type {header >> 4}")

    network_tag = header & 0x0F
    body = payload[1:]
    n = CREDENTIAL_HASH_LENGTH

    if address_type in _BASE_TYPES:
        if len(body) != 2 * n:
            raise MalformedAddress(address, f"base address body must be {2 * n} bytes, got {len(body)}")
        return ShelleyAddress(
            hrp=hrp,
            address_type=address_type,
            network_tag=network_tag,
            payment_hash=body[:n],
            payment_is_script=address_type in _SCRIPT_PAYMENT_TYPES,
            stake_hash=body[n:],
            stake_is_script=address_type in _SCRIPT_STAKE_TYPES,
        )

    if address_type in _POINTER_TYPES:
        # Pointer is three variable-length naturals after the payment hash
        if len(body) < n + 3:
            raise MalformedAddress(address, "pointer address too short")
        return ShelleyAddress(
            hrp=hrp,
            address_type=address_type,
            network_tag=network_tag,
            payment_hash=body[:n],
            payment_is_script=address_type in _SCRIPT_PAYMENT_TYPES,
        )

    if address_type in _ENTERPRISE_TYPES:
        if len(body) != n:
            raise MalformedAddress(address, f"enterprise address body must be {n} bytes, got {len(body)}")
        return ShelleyAddress(
            hrp=hrp,
            address_type=address_type,
            network_tag=network_tag,
            payment_hash=body,
            payment_is_script=address_type in _SCRIPT_PAYMENT_TYPES,
        )

    if address_type in _REWARD_TYPES:
        if len(body) != n:
            raise MalformedAddress(address, f"reward address body must be {n} bytes, got {len(body)}")
        return ShelleyAddress(
            hrp=hrp,
            address_type=address_type,
            network_tag=network_tag,
            stake_hash=body,
            stake_is_script=address_type in _SCRIPT_STAKE_TYPES,
        )

    raise MalformedAddress(address, "Byron addresses are not supported")

def reward_address(stake_hash: bytes, network_id: int, is_script: bool = False) -> str:
    """Builds the bech32 reward account address for a staking hash."""
    header = (0xF0 if is_script else 0xE0) | (network_id & 0x0F)
    prefix = REWARD_PREFIX_MAINNET if network_id == MAINNET_ID else REWARD_PREFIX_TESTNET
    return encode_bech32(prefix, bytes([header]) + stake_hash)

def resolve_payment_credential(address: str) -> str:
    """
    Gets the payment credential of an address as bech32 `addr_vkh`.

    Raises MalformedAddress if the address does not decode or has no
    key-hash payment part.
    """
    decoded = decode_address(address)

    if decoded.payment_hash is None:
        raise MalformedAddress(address, "address has no payment credential")
    if decoded.payment_is_script:
        raise MalformedAddress(address, "script payment credentials are not supported")

    return encode_bech32(PAYMENT_KEY_HASH_PREFIX, decoded.payment_hash)

def resolve_staking_credential(address: str, network_id: int) -> Optional[str]:
    """Gets the reward account of an address for the given network, or None if it has no staking part."""
    decoded = decode_address(address)

    if decoded.stake_hash is None:
        return None

    return reward_address(decoded.stake_hash, network_id, decoded.stake_is_script)

def is_valid_address(addr: str, expected_prefix: Optional[str] = None) -> bool:
    try:
        decoded = decode_address(addr)
        if expected_prefix and decoded.hrp != expected_prefix:
            return False
        return True
    except MalformedAddress:
        return False
