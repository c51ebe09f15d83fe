"""
Instruction builders for the Token-2022 program
"""

import logging
from typing import List, Optional

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import CreateAccountParams, create_account
from spl.token.constants import TOKEN_2022_PROGRAM_ID
from spl.token.instructions import (
    MintToParams,
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    mint_to,
    transfer_checked,
)

from .amounts import U64_MAX
from .errors import InstructionBuildError
from .extensions import INITIALIZE_MINT2_LAYOUT, INITIALIZE_TRANSFER_FEE_CONFIG_LAYOUT

logger = logging.getLogger("t2022")

DEFAULT_DECIMALS = 6
DEFAULT_TRANSFER_FEE_BASIS_POINTS = 123
DEFAULT_MAXIMUM_FEE = U64_MAX
MAX_FEE_BASIS_POINTS = 10_000

INITIALIZE_MINT2 = 20
TRANSFER_FEE_EXTENSION = 26
INITIALIZE_TRANSFER_FEE_CONFIG = 0


def derive_associated_token_address(owner: Pubkey, mint: Pubkey, program_id: Pubkey = TOKEN_2022_PROGRAM_ID) -> Pubkey:
    """Derive the associated token account for (owner, mint, token program)"""
    return get_associated_token_address(owner, mint, token_program_id=program_id)


def _optional_pubkey(pubkey: Optional[Pubkey]) -> dict:
    if pubkey is None:
        return {"present": False, "pubkey": None}
    return {"present": True, "pubkey": bytes(pubkey)}


def initialize_transfer_fee_config(
    mint: Pubkey,
    transfer_fee_config_authority: Optional[Pubkey],
    withdraw_withheld_authority: Optional[Pubkey],
    transfer_fee_basis_points: int,
    maximum_fee: int,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """
    Build an InitializeTransferFeeConfig instruction.

    Must run before the mint itself is initialized.
    """
    if not 0 <= transfer_fee_basis_points <= MAX_FEE_BASIS_POINTS:
        raise InstructionBuildError(
            f"Transfer fee basis points must be between 0 and {MAX_FEE_BASIS_POINTS}, "
            f"got {transfer_fee_basis_points}"
        )
    if not 0 <= maximum_fee <= U64_MAX:
        raise InstructionBuildError(f"Maximum fee out of range: {maximum_fee}")

    data = INITIALIZE_TRANSFER_FEE_CONFIG_LAYOUT.build({
        "instruction_type": TRANSFER_FEE_EXTENSION,
        "transfer_fee_instruction_type": INITIALIZE_TRANSFER_FEE_CONFIG,
        "transfer_fee_config_authority": _optional_pubkey(transfer_fee_config_authority),
        "withdraw_withheld_authority": _optional_pubkey(withdraw_withheld_authority),
        "transfer_fee_basis_points": transfer_fee_basis_points,
        "maximum_fee": maximum_fee,
    })
    return Instruction(
        program_id=program_id,
        data=data,
        accounts=[AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )


def initialize_mint2(
    mint: Pubkey,
    decimals: int,
    mint_authority: Pubkey,
    freeze_authority: Optional[Pubkey] = None,
    program_id: Pubkey = TOKEN_2022_PROGRAM_ID,
) -> Instruction:
    """Build an InitializeMint2 instruction, which reads rent from the runtime instead of a sysvar account"""
    data = INITIALIZE_MINT2_LAYOUT.build({
        "instruction_type": INITIALIZE_MINT2,
        "decimals": decimals,
        "mint_authority": bytes(mint_authority),
        "freeze_authority": _optional_pubkey(freeze_authority),
    })
    return Instruction(
        program_id=program_id,
        data=data,
        accounts=[AccountMeta(pubkey=mint, is_signer=False, is_writable=True)],
    )


def build_create_token_instructions(
    payer: Pubkey,
    mint: Pubkey,
    lamports: int,
    space: int,
    decimals: int = DEFAULT_DECIMALS,
    transfer_fee_basis_points: int = DEFAULT_TRANSFER_FEE_BASIS_POINTS,
    maximum_fee: int = DEFAULT_MAXIMUM_FEE,
) -> List[Instruction]:
    """
    Build the instructions that create a mint carrying a transfer fee.

    Order matters: the account is created, the extension initialized, and
    only then the mint.
    """
    return [
        create_account(CreateAccountParams(
            from_pubkey=payer,
            to_pubkey=mint,
            lamports=lamports,
            space=space,
            owner=TOKEN_2022_PROGRAM_ID,
        )),
        initialize_transfer_fee_config(
            mint=mint,
            transfer_fee_config_authority=payer,
            withdraw_withheld_authority=payer,
            transfer_fee_basis_points=transfer_fee_basis_points,
            maximum_fee=maximum_fee,
        ),
        initialize_mint2(
            mint=mint,
            decimals=decimals,
            mint_authority=payer,
            freeze_authority=None,
        ),
    ]


def build_mint_to_instructions(
    payer: Pubkey,
    mint: Pubkey,
    amount: int,
    destination_exists: bool,
) -> List[Instruction]:
    """Mint ``amount`` base units into the payer's associated token account"""
    destination = derive_associated_token_address(payer, mint)

    instructions = []
    if not destination_exists:
        logger.debug(f"Associated token account {destination} does not exist, creating it")
        instructions.append(create_associated_token_account(payer, payer, mint, token_program_id=TOKEN_2022_PROGRAM_ID))

    instructions.append(mint_to(MintToParams(
        program_id=TOKEN_2022_PROGRAM_ID,
        mint=mint,
        dest=destination,
        mint_authority=payer,
        amount=amount,
    )))
    return instructions


def build_transfer_instructions(
    payer: Pubkey,
    mint: Pubkey,
    recipient: Pubkey,
    amount: int,
    decimals: int,
    destination_exists: bool,
) -> List[Instruction]:
    """Move ``amount`` base units from the payer's token account to the recipient's"""
    source = derive_associated_token_address(payer, mint)
    destination = derive_associated_token_address(recipient, mint)

    instructions = []
    if not destination_exists:
        logger.debug(f"Associated token account {destination} does not exist, creating it")
        instructions.append(create_associated_token_account(payer, recipient, mint, token_program_id=TOKEN_2022_PROGRAM_ID))

    instructions.append(transfer_checked(TransferCheckedParams(
        program_id=TOKEN_2022_PROGRAM_ID,
        source=source,
        mint=mint,
        dest=destination,
        owner=payer,
        amount=amount,
        decimals=decimals,
    )))
    return instructions
