"""
Ledger client for talking to a Solana JSON RPC node
"""

import logging
import time
from typing import Callable, Optional, TypeVar

import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.api import Client
from solana.rpc.commitment import Commitment
from solana.rpc.core import RPCException
from solana.rpc.types import TxOpts
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from .errors import RemoteCallError

logger = logging.getLogger("t2022")

T = TypeVar("T")


class LedgerClient:
    """Thin synchronous wrapper around the solana-py RPC client"""

    def __init__(self, rpc_url: str, commitment: str = "confirmed", client: Optional[Client] = None):
        """Initialize the ledger client"""
        self.rpc_url = rpc_url
        self.commitment = Commitment(commitment)
        self.client = client or Client(rpc_url, commitment=self.commitment)

        logger.debug(f"Initialized ledger client for {rpc_url}")

    def _call(self, method: str, func: Callable[[], T]) -> T:
        """Run one RPC request, timing it and wrapping transport and RPC errors"""
        start_time = time.time()
        try:
            result = func()
        except RPCException as e:
            logger.error(f"{method} returned an error: {e}")
            raise RemoteCallError(f"RPC error from {method}: {e}", e) from e
        except (SolanaRpcException, httpx.HTTPError) as e:
            logger.error(f"{method} failed: {e}")
            raise RemoteCallError(f"Request to {self.rpc_url} failed ({method}): {e}", e) from e

        elapsed = time.time() - start_time
        logger.debug(f"{method} completed in {elapsed:.2f}s")
        return result

    def get_account_data(self, address: Pubkey) -> Optional[bytes]:
        """Get the raw data of an account, or None if it does not exist"""
        response = self._call("getAccountInfo", lambda: self.client.get_account_info(address))
        account = response.value
        if account is None:
            return None
        return bytes(account.data)

    def require_account_data(self, address: Pubkey) -> bytes:
        """Get the raw data of an account that must exist"""
        data = self.get_account_data(address)
        if data is None:
            raise RemoteCallError(f"Account {address} not found")
        return data

    def account_exists(self, address: Pubkey) -> bool:
        """Check whether an account exists on the ledger"""
        return self.get_account_data(address) is not None

    def get_minimum_balance_for_rent_exemption(self, size: int) -> int:
        """Get the lamports needed for an account of ``size`` bytes to be rent exempt"""
        response = self._call(
            "getMinimumBalanceForRentExemption",
            lambda: self.client.get_minimum_balance_for_rent_exemption(size),
        )
        return response.value

    def get_latest_blockhash(self) -> Hash:
        """Get a recent blockhash to reference in a transaction"""
        response = self._call("getLatestBlockhash", lambda: self.client.get_latest_blockhash())
        return response.value.blockhash

    def send_transaction(self, transaction: Transaction, skip_preflight: bool = True) -> str:
        """Submit a signed transaction and return its signature"""
        opts = TxOpts(skip_preflight=skip_preflight, preflight_commitment=self.commitment)
        response = self._call("sendTransaction", lambda: self.client.send_transaction(transaction, opts=opts))
        return str(response.value)
