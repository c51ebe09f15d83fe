"""
Transaction assembly and submission
"""

import logging
from typing import Sequence

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.transaction import Transaction

from .client import LedgerClient
from .errors import InstructionBuildError

logger = logging.getLogger("t2022")


def assemble_transaction(
    instructions: Sequence[Instruction],
    payer: Keypair,
    signers: Sequence[Keypair],
    recent_blockhash: Hash,
) -> Transaction:
    """
    Bundle instructions into one transaction signed by the payer and ``signers``.

    The payer is always the fee payer and always signs.
    """
    if not instructions:
        raise InstructionBuildError("A transaction needs at least one instruction")

    signing_keypairs = [payer] + [signer for signer in signers if signer.pubkey() != payer.pubkey()]
    return Transaction.new_signed_with_payer(
        list(instructions),
        payer.pubkey(),
        signing_keypairs,
        recent_blockhash,
    )


def submit_transaction(
    client: LedgerClient,
    instructions: Sequence[Instruction],
    payer: Keypair,
    signers: Sequence[Keypair] = (),
    skip_preflight: bool = True,
) -> str:
    """
    Sign and send instructions as a single transaction.

    There is no retry and no confirmation polling: the returned signature only
    means the node accepted the transaction.
    """
    recent_blockhash = client.get_latest_blockhash()
    transaction = assemble_transaction(instructions, payer, signers, recent_blockhash)

    logger.debug(
        f"Submitting transaction with {len(instructions)} instruction(s), "
        f"{len(transaction.signatures)} signature(s), skip_preflight={skip_preflight}"
    )
    signature = client.send_transaction(transaction, skip_preflight=skip_preflight)
    logger.info(f"Submitted transaction {signature}")
    return signature
