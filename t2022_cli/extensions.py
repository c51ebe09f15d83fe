"""
Token-2022 account layouts and extension decoding.

Mints and token accounts owned by the Token-2022 program start with the same
base layout as the original token program. When extensions are present the
record is padded to the base account length, followed by a one byte account
type and a sequence of type-length-value entries::

    | base (82 or 165 bytes) | padding | account type (1) | TLV | TLV | ...

Each TLV entry has a little-endian u16 extension type, a u16 length and the
extension payload. Only the transfer fee extensions are decoded in full; every
other extension is reported by name with its raw payload.
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional

from construct import Bytes, ConstructError, Flag, If, Int8ul, Int16ul, Int64ul, Struct, this
from solders.pubkey import Pubkey
from spl.token._layouts import ACCOUNT_LAYOUT, MINT_LAYOUT

from .errors import AccountDataError, InstructionBuildError

logger = logging.getLogger("t2022")

MINT_SIZE = 82
ACCOUNT_SIZE = 165
MULTISIG_SIZE = 355
ACCOUNT_TYPE_SIZE = 1
TLV_HEADER_SIZE = 4


class AccountType(IntEnum):
    UNINITIALIZED = 0
    MINT = 1
    ACCOUNT = 2


class ExtensionType(IntEnum):
    UNINITIALIZED = 0
    TRANSFER_FEE_CONFIG = 1
    TRANSFER_FEE_AMOUNT = 2
    MINT_CLOSE_AUTHORITY = 3
    CONFIDENTIAL_TRANSFER_MINT = 4
    CONFIDENTIAL_TRANSFER_ACCOUNT = 5
    DEFAULT_ACCOUNT_STATE = 6
    IMMUTABLE_OWNER = 7
    MEMO_TRANSFER = 8
    NON_TRANSFERABLE = 9
    INTEREST_BEARING_CONFIG = 10
    CPI_GUARD = 11
    PERMANENT_DELEGATE = 12
    NON_TRANSFERABLE_ACCOUNT = 13
    TRANSFER_HOOK = 14
    TRANSFER_HOOK_ACCOUNT = 15
    CONFIDENTIAL_TRANSFER_FEE_CONFIG = 16
    CONFIDENTIAL_TRANSFER_FEE_AMOUNT = 17
    METADATA_POINTER = 18
    TOKEN_METADATA = 19
    GROUP_POINTER = 20
    TOKEN_GROUP = 21
    GROUP_MEMBER_POINTER = 22
    TOKEN_GROUP_MEMBER = 23

    @property
    def display_name(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


# Payload sizes of the fixed-length extensions
EXTENSION_SIZES: Dict[ExtensionType, int] = {
    ExtensionType.TRANSFER_FEE_CONFIG: 108,
    ExtensionType.TRANSFER_FEE_AMOUNT: 8,
    ExtensionType.MINT_CLOSE_AUTHORITY: 32,
    ExtensionType.DEFAULT_ACCOUNT_STATE: 1,
    ExtensionType.IMMUTABLE_OWNER: 0,
    ExtensionType.MEMO_TRANSFER: 1,
    ExtensionType.NON_TRANSFERABLE: 0,
    ExtensionType.INTEREST_BEARING_CONFIG: 52,
    ExtensionType.CPI_GUARD: 1,
    ExtensionType.PERMANENT_DELEGATE: 32,
    ExtensionType.NON_TRANSFERABLE_ACCOUNT: 0,
    ExtensionType.TRANSFER_HOOK: 64,
    ExtensionType.TRANSFER_HOOK_ACCOUNT: 1,
    ExtensionType.METADATA_POINTER: 64,
    ExtensionType.GROUP_POINTER: 64,
    ExtensionType.GROUP_MEMBER_POINTER: 64,
}

# The mint and account base layouts are shared with the original token program
# and come from spl.token; everything past the base record is Token-2022 only.
TLV_HEADER_LAYOUT = Struct(
    "type" / Int16ul,
    "length" / Int16ul,
)

TRANSFER_FEE_LAYOUT = Struct(
    "epoch" / Int64ul,
    "maximum_fee" / Int64ul,
    "transfer_fee_basis_points" / Int16ul,
)

TRANSFER_FEE_CONFIG_LAYOUT = Struct(
    "transfer_fee_config_authority" / Bytes(32),
    "withdraw_withheld_authority" / Bytes(32),
    "withheld_amount" / Int64ul,
    "older_transfer_fee" / TRANSFER_FEE_LAYOUT,
    "newer_transfer_fee" / TRANSFER_FEE_LAYOUT,
)

TRANSFER_FEE_AMOUNT_LAYOUT = Struct(
    "withheld_amount" / Int64ul,
)

# COption<Pubkey> as packed in instruction data: a tag byte, then the key if set
OPTIONAL_PUBKEY_LAYOUT = Struct(
    "present" / Flag,
    "pubkey" / If(this.present, Bytes(32)),
)

INITIALIZE_TRANSFER_FEE_CONFIG_LAYOUT = Struct(
    "instruction_type" / Int8ul,
    "transfer_fee_instruction_type" / Int8ul,
    "transfer_fee_config_authority" / OPTIONAL_PUBKEY_LAYOUT,
    "withdraw_withheld_authority" / OPTIONAL_PUBKEY_LAYOUT,
    "transfer_fee_basis_points" / Int16ul,
    "maximum_fee" / Int64ul,
)

INITIALIZE_MINT2_LAYOUT = Struct(
    "instruction_type" / Int8ul,
    "decimals" / Int8ul,
    "mint_authority" / Bytes(32),
    "freeze_authority" / OPTIONAL_PUBKEY_LAYOUT,
)

ACCOUNT_STATES = {0: "uninitialized", 1: "initialized", 2: "frozen"}


def get_account_len(base_size: int, extension_types: Iterable[ExtensionType]) -> int:
    """
    Compute the account size needed for a base record plus extensions.

    Args:
        base_size: MINT_SIZE or ACCOUNT_SIZE
        extension_types: Fixed-size extensions the record will carry
    """
    extension_types = list(extension_types)
    if not extension_types:
        return base_size

    tlv_size = 0
    for extension_type in extension_types:
        if extension_type not in EXTENSION_SIZES:
            raise InstructionBuildError(
                f"Extension {ExtensionType(extension_type).display_name} has no fixed size"
            )
        tlv_size += TLV_HEADER_SIZE + EXTENSION_SIZES[extension_type]

    account_len = ACCOUNT_SIZE + ACCOUNT_TYPE_SIZE + tlv_size
    # A record of exactly multisig size would be ambiguous
    if account_len == MULTISIG_SIZE:
        account_len += 2
    return account_len


def get_mint_len(extension_types: Iterable[ExtensionType]) -> int:
    return get_account_len(MINT_SIZE, extension_types)


def _optional_pubkey(option: int, raw: bytes) -> Optional[Pubkey]:
    return Pubkey.from_bytes(raw) if option else None


def _nonzero_pubkey(raw: bytes) -> Optional[Pubkey]:
    if raw == bytes(32):
        return None
    return Pubkey.from_bytes(raw)


def _pubkey_str(pubkey: Optional[Pubkey]) -> Optional[str]:
    return str(pubkey) if pubkey is not None else None


@dataclass
class TransferFee:
    epoch: int
    maximum_fee: int
    transfer_fee_basis_points: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "epoch": self.epoch,
            "maximum_fee": self.maximum_fee,
            "transfer_fee_basis_points": self.transfer_fee_basis_points,
        }


@dataclass
class TransferFeeConfig:
    transfer_fee_config_authority: Optional[Pubkey]
    withdraw_withheld_authority: Optional[Pubkey]
    withheld_amount: int
    older_transfer_fee: TransferFee
    newer_transfer_fee: TransferFee

    @classmethod
    def decode(cls, data: bytes) -> "TransferFeeConfig":
        parsed = TRANSFER_FEE_CONFIG_LAYOUT.parse(data)
        return cls(
            transfer_fee_config_authority=_nonzero_pubkey(parsed.transfer_fee_config_authority),
            withdraw_withheld_authority=_nonzero_pubkey(parsed.withdraw_withheld_authority),
            withheld_amount=parsed.withheld_amount,
            older_transfer_fee=TransferFee(
                parsed.older_transfer_fee.epoch,
                parsed.older_transfer_fee.maximum_fee,
                parsed.older_transfer_fee.transfer_fee_basis_points,
            ),
            newer_transfer_fee=TransferFee(
                parsed.newer_transfer_fee.epoch,
                parsed.newer_transfer_fee.maximum_fee,
                parsed.newer_transfer_fee.transfer_fee_basis_points,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transfer_fee_config_authority": _pubkey_str(self.transfer_fee_config_authority),
            "withdraw_withheld_authority": _pubkey_str(self.withdraw_withheld_authority),
            "withheld_amount": self.withheld_amount,
            "older_transfer_fee": self.older_transfer_fee.to_dict(),
            "newer_transfer_fee": self.newer_transfer_fee.to_dict(),
        }


@dataclass
class TransferFeeAmount:
    withheld_amount: int

    @classmethod
    def decode(cls, data: bytes) -> "TransferFeeAmount":
        return cls(withheld_amount=TRANSFER_FEE_AMOUNT_LAYOUT.parse(data).withheld_amount)

    def to_dict(self) -> Dict[str, Any]:
        return {"withheld_amount": self.withheld_amount}


DECODERS = {
    ExtensionType.TRANSFER_FEE_CONFIG: TransferFeeConfig.decode,
    ExtensionType.TRANSFER_FEE_AMOUNT: TransferFeeAmount.decode,
}


def parse_extensions(data: bytes, base_size: int, expected_type: AccountType) -> Dict[ExtensionType, bytes]:
    """
    Split the TLV area of a Token-2022 record into raw extension payloads.

    Returns an empty mapping for records without extension data.
    """
    if len(data) <= base_size:
        return {}

    if len(data) == MULTISIG_SIZE:
        raise AccountDataError("Account data has multisig size and cannot carry extensions")

    if len(data) <= ACCOUNT_SIZE:
        raise AccountDataError(
            f"Invalid account data length {len(data)}: extension records must exceed {ACCOUNT_SIZE} bytes"
        )

    account_type = data[ACCOUNT_SIZE]
    if account_type != expected_type:
        raise AccountDataError(
            f"Account type mismatch: expected {expected_type.name.lower()}, found {account_type}"
        )

    extensions: Dict[ExtensionType, bytes] = {}
    offset = ACCOUNT_SIZE + ACCOUNT_TYPE_SIZE
    while offset + TLV_HEADER_SIZE <= len(data):
        header = TLV_HEADER_LAYOUT.parse(data[offset:offset + TLV_HEADER_SIZE])
        if header.type == ExtensionType.UNINITIALIZED:
            break

        start = offset + TLV_HEADER_SIZE
        end = start + header.length
        if end > len(data):
            raise AccountDataError(f"Extension {header.type} overruns the account data")

        try:
            extension_type = ExtensionType(header.type)
        except ValueError:
            logger.warning(f"Skipping unknown extension type {header.type}")
        else:
            extensions[extension_type] = data[start:end]
        offset = end

    return extensions


@dataclass
class _ExtensibleState:
    extensions: Dict[ExtensionType, bytes] = field(default_factory=dict)

    @property
    def extension_types(self) -> List[ExtensionType]:
        return list(self.extensions)

    def get_extension(self, extension_type: ExtensionType) -> Optional[Any]:
        """Decode an extension, or return None when the record does not carry it"""
        raw = self.extensions.get(extension_type)
        if raw is None:
            return None
        decoder = DECODERS.get(extension_type)
        if decoder is None:
            return raw
        try:
            return decoder(raw)
        except ConstructError as exc:
            raise AccountDataError(
                f"Malformed {extension_type.display_name} extension: {exc}", exc
            ) from exc

    def _extensions_dict(self) -> Dict[str, Any]:
        decoded = {}
        for extension_type in self.extension_types:
            value = self.get_extension(extension_type)
            decoded[extension_type.display_name] = (
                value.to_dict() if hasattr(value, "to_dict") else value.hex()
            )
        return decoded


@dataclass
class MintState(_ExtensibleState):
    mint_authority: Optional[Pubkey] = None
    supply: int = 0
    decimals: int = 0
    is_initialized: bool = False
    freeze_authority: Optional[Pubkey] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint_authority": _pubkey_str(self.mint_authority),
            "supply": self.supply,
            "decimals": self.decimals,
            "is_initialized": self.is_initialized,
            "freeze_authority": _pubkey_str(self.freeze_authority),
            "extensions": self._extensions_dict(),
        }


@dataclass
class AccountState(_ExtensibleState):
    mint: Optional[Pubkey] = None
    owner: Optional[Pubkey] = None
    amount: int = 0
    delegate: Optional[Pubkey] = None
    state: str = "uninitialized"
    is_native: Optional[int] = None
    delegated_amount: int = 0
    close_authority: Optional[Pubkey] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mint": _pubkey_str(self.mint),
            "owner": _pubkey_str(self.owner),
            "amount": self.amount,
            "delegate": _pubkey_str(self.delegate),
            "state": self.state,
            "is_native": self.is_native,
            "delegated_amount": self.delegated_amount,
            "close_authority": _pubkey_str(self.close_authority),
            "extensions": self._extensions_dict(),
        }


def unpack_mint(data: bytes) -> MintState:
    """Decode mint account data, including any extensions"""
    if len(data) < MINT_SIZE:
        raise AccountDataError(f"Account data too short for a mint: {len(data)} bytes")

    try:
        parsed = MINT_LAYOUT.parse(data[:MINT_SIZE])
    except ConstructError as exc:
        raise AccountDataError(f"Unable to decode mint: {exc}", exc) from exc

    if not parsed.is_initialized:
        raise AccountDataError("Mint is not initialized")

    return MintState(
        mint_authority=_optional_pubkey(parsed.mint_authority_option, parsed.mint_authority),
        supply=parsed.supply,
        decimals=parsed.decimals,
        is_initialized=bool(parsed.is_initialized),
        freeze_authority=_optional_pubkey(parsed.freeze_authority_option, parsed.freeze_authority),
        extensions=parse_extensions(data, MINT_SIZE, AccountType.MINT),
    )


def unpack_account(data: bytes) -> AccountState:
    """Decode token account data, including any extensions"""
    if len(data) < ACCOUNT_SIZE:
        raise AccountDataError(f"Account data too short for a token account: {len(data)} bytes")

    try:
        parsed = ACCOUNT_LAYOUT.parse(data[:ACCOUNT_SIZE])
    except ConstructError as exc:
        raise AccountDataError(f"Unable to decode token account: {exc}", exc) from exc

    if parsed.state == 0:
        raise AccountDataError("Token account is not initialized")

    return AccountState(
        mint=Pubkey.from_bytes(parsed.mint),
        owner=Pubkey.from_bytes(parsed.owner),
        amount=parsed.amount,
        delegate=_optional_pubkey(parsed.delegate_option, parsed.delegate),
        state=ACCOUNT_STATES.get(parsed.state, str(parsed.state)),
        is_native=parsed.is_native if parsed.is_native_option else None,
        delegated_amount=parsed.delegated_amount,
        close_authority=_optional_pubkey(parsed.close_authority_option, parsed.close_authority),
        extensions=parse_extensions(data, ACCOUNT_SIZE, AccountType.ACCOUNT),
    )
