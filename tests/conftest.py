"""
Pytest configuration file for t2022 CLI tests
"""

import json
import logging
import os
import sys

import pytest
from click.testing import CliRunner
from unittest.mock import MagicMock
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey

# Add the parent directory to sys.path to allow imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from t2022_cli.client import LedgerClient
from t2022_cli.extensions import (
    ACCOUNT_LAYOUT,
    ACCOUNT_SIZE,
    MINT_LAYOUT,
    MINT_SIZE,
    TLV_HEADER_LAYOUT,
    TRANSFER_FEE_CONFIG_LAYOUT,
    AccountType,
    ExtensionType,
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Point the home directory at a temporary path so no real config or logs are touched"""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers the CLI attached during a test"""
    yield
    logger = logging.getLogger("t2022")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def runner():
    """Create a CLI runner for testing"""
    return CliRunner()


@pytest.fixture
def payer():
    return Keypair()


@pytest.fixture
def keypair_file(tmp_path):
    """Write a keypair in the Solana JSON format and return (keypair, path)"""
    keypair = Keypair()
    path = tmp_path / "keypair.json"
    path.write_text(json.dumps(list(bytes(keypair))))
    return keypair, path


@pytest.fixture
def mock_client():
    """Create a mock ledger client with a usable blockhash"""
    client = MagicMock(spec=LedgerClient)
    client.get_latest_blockhash.return_value = Hash.new_unique()
    client.get_minimum_balance_for_rent_exemption.return_value = 2_825_760
    client.send_transaction.return_value = "5igNaTuRe"
    client.account_exists.return_value = True
    return client


def _tlv(extensions):
    data = b""
    for extension_type, payload in extensions.items():
        data += TLV_HEADER_LAYOUT.build({"type": int(extension_type), "length": len(payload)})
        data += payload
    return data


@pytest.fixture
def make_mint_data():
    """Build raw mint account data, optionally followed by extensions"""
    def _make(decimals=6, supply=0, mint_authority=None, freeze_authority=None, extensions=None):
        base = MINT_LAYOUT.build({
            "mint_authority_option": 1 if mint_authority is not None else 0,
            "mint_authority": bytes(mint_authority) if mint_authority is not None else bytes(32),
            "supply": supply,
            "decimals": decimals,
            "is_initialized": 1,
            "freeze_authority_option": 1 if freeze_authority is not None else 0,
            "freeze_authority": bytes(freeze_authority) if freeze_authority is not None else bytes(32),
        })
        if not extensions:
            return base
        padding = bytes(ACCOUNT_SIZE - MINT_SIZE)
        return base + padding + bytes([AccountType.MINT]) + _tlv(extensions)
    return _make


@pytest.fixture
def make_account_data():
    """Build raw token account data, optionally followed by extensions"""
    def _make(mint, owner, amount=0, extensions=None):
        base = ACCOUNT_LAYOUT.build({
            "mint": bytes(mint),
            "owner": bytes(owner),
            "amount": amount,
            "delegate_option": 0,
            "delegate": bytes(32),
            "state": 1,
            "is_native_option": 0,
            "is_native": 0,
            "delegated_amount": 0,
            "close_authority_option": 0,
            "close_authority": bytes(32),
        })
        if not extensions:
            return base
        return base + bytes([AccountType.ACCOUNT]) + _tlv(extensions)
    return _make


@pytest.fixture
def transfer_fee_config_payload():
    """Build a TransferFeeConfig extension payload"""
    def _make(authority: Pubkey, withheld_amount=0, basis_points=123, maximum_fee=2**64 - 1, epoch=0):
        fee = {"epoch": epoch, "maximum_fee": maximum_fee, "transfer_fee_basis_points": basis_points}
        return TRANSFER_FEE_CONFIG_LAYOUT.build({
            "transfer_fee_config_authority": bytes(authority),
            "withdraw_withheld_authority": bytes(authority),
            "withheld_amount": withheld_amount,
            "older_transfer_fee": fee,
            "newer_transfer_fee": fee,
        })
    return _make


@pytest.fixture
def fee_mint_data(make_mint_data, transfer_fee_config_payload, payer):
    """Mint data as produced by create-token"""
    return make_mint_data(
        decimals=6,
        mint_authority=payer.pubkey(),
        extensions={ExtensionType.TRANSFER_FEE_CONFIG: transfer_fee_config_payload(payer.pubkey())},
    )
