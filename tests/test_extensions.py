"""
Tests for Token-2022 layouts and extension decoding
"""

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from t2022_cli.errors import AccountDataError, InstructionBuildError, RemoteCallError
from t2022_cli.extensions import (
    ACCOUNT_LAYOUT,
    ACCOUNT_SIZE,
    MINT_LAYOUT,
    MINT_SIZE,
    TRANSFER_FEE_AMOUNT_LAYOUT,
    AccountType,
    ExtensionType,
    TransferFeeAmount,
    TransferFeeConfig,
    get_account_len,
    get_mint_len,
    unpack_account,
    unpack_mint,
)


def test_get_mint_len_with_transfer_fee():
    """A mint with a transfer fee config needs 278 bytes"""
    assert get_mint_len([ExtensionType.TRANSFER_FEE_CONFIG]) == 278


def test_get_mint_len_without_extensions():
    assert get_mint_len([]) == MINT_SIZE
    assert get_account_len(ACCOUNT_SIZE, []) == ACCOUNT_SIZE


def test_get_account_len_multiple_extensions():
    length = get_account_len(ACCOUNT_SIZE, [ExtensionType.TRANSFER_FEE_AMOUNT, ExtensionType.IMMUTABLE_OWNER])
    assert length == ACCOUNT_SIZE + 1 + (4 + 8) + (4 + 0)


def test_get_account_len_rejects_variable_size_extension():
    with pytest.raises(InstructionBuildError):
        get_mint_len([ExtensionType.TOKEN_METADATA])


def test_extension_display_name():
    assert ExtensionType.TRANSFER_FEE_CONFIG.display_name == "TransferFeeConfig"
    assert ExtensionType.IMMUTABLE_OWNER.display_name == "ImmutableOwner"


def test_unpack_plain_mint(make_mint_data):
    authority = Keypair().pubkey()
    mint = unpack_mint(make_mint_data(decimals=9, supply=1000, mint_authority=authority))

    assert mint.decimals == 9
    assert mint.supply == 1000
    assert mint.mint_authority == authority
    assert mint.freeze_authority is None
    assert mint.is_initialized
    assert mint.extension_types == []
    assert mint.get_extension(ExtensionType.TRANSFER_FEE_CONFIG) is None


def test_unpack_mint_with_transfer_fee_config(make_mint_data, transfer_fee_config_payload):
    authority = Keypair().pubkey()
    data = make_mint_data(
        decimals=6,
        mint_authority=authority,
        extensions={ExtensionType.TRANSFER_FEE_CONFIG: transfer_fee_config_payload(authority, withheld_amount=77)},
    )
    assert len(data) == get_mint_len([ExtensionType.TRANSFER_FEE_CONFIG])

    mint = unpack_mint(data)
    assert mint.extension_types == [ExtensionType.TRANSFER_FEE_CONFIG]

    fee_config = mint.get_extension(ExtensionType.TRANSFER_FEE_CONFIG)
    assert isinstance(fee_config, TransferFeeConfig)
    assert fee_config.transfer_fee_config_authority == authority
    assert fee_config.withdraw_withheld_authority == authority
    assert fee_config.withheld_amount == 77
    assert fee_config.newer_transfer_fee.transfer_fee_basis_points == 123
    assert fee_config.newer_transfer_fee.maximum_fee == 2**64 - 1


def test_transfer_fee_config_zero_authority_is_none(transfer_fee_config_payload):
    fee_config = TransferFeeConfig.decode(transfer_fee_config_payload(Pubkey.default()))
    assert fee_config.transfer_fee_config_authority is None
    assert fee_config.to_dict()["withdraw_withheld_authority"] is None


def test_unpack_account_without_extensions(make_account_data):
    mint, owner = Keypair().pubkey(), Keypair().pubkey()
    account = unpack_account(make_account_data(mint, owner, amount=500))

    assert account.mint == mint
    assert account.owner == owner
    assert account.amount == 500
    assert account.state == "initialized"
    assert account.delegate is None
    assert account.get_extension(ExtensionType.TRANSFER_FEE_AMOUNT) is None


def test_unpack_account_with_transfer_fee_amount(make_account_data):
    mint, owner = Keypair().pubkey(), Keypair().pubkey()
    data = make_account_data(mint, owner, extensions={
        ExtensionType.TRANSFER_FEE_AMOUNT: TRANSFER_FEE_AMOUNT_LAYOUT.build({"withheld_amount": 1234}),
        ExtensionType.IMMUTABLE_OWNER: b"",
    })

    account = unpack_account(data)
    assert account.extension_types == [ExtensionType.TRANSFER_FEE_AMOUNT, ExtensionType.IMMUTABLE_OWNER]

    fee_amount = account.get_extension(ExtensionType.TRANSFER_FEE_AMOUNT)
    assert isinstance(fee_amount, TransferFeeAmount)
    assert fee_amount.withheld_amount == 1234
    assert account.to_dict()["extensions"]["TransferFeeAmount"] == {"withheld_amount": 1234}
    assert account.to_dict()["extensions"]["ImmutableOwner"] == ""


def test_unpack_account_rejects_mint_record(make_mint_data, transfer_fee_config_payload):
    """Mint data is not a token account, even though it is long enough"""
    data = make_mint_data(extensions={
        ExtensionType.TRANSFER_FEE_CONFIG: transfer_fee_config_payload(Keypair().pubkey()),
    })
    assert data[ACCOUNT_SIZE] == AccountType.MINT

    with pytest.raises(AccountDataError):
        unpack_account(data)


def test_unpack_mint_rejects_short_data():
    with pytest.raises(AccountDataError) as excinfo:
        unpack_mint(b"\x00" * 10)
    assert "too short" in str(excinfo.value)
    # Decoding problems belong to the remote-call bucket
    assert isinstance(excinfo.value, RemoteCallError)


def test_unpack_mint_rejects_uninitialized(make_mint_data):
    data = bytearray(make_mint_data())
    data[45] = 0  # is_initialized
    with pytest.raises(AccountDataError):
        unpack_mint(bytes(data))


def test_unknown_extension_is_skipped(make_account_data):
    mint, owner = Keypair().pubkey(), Keypair().pubkey()
    data = make_account_data(mint, owner, extensions={
        ExtensionType.TRANSFER_FEE_AMOUNT: TRANSFER_FEE_AMOUNT_LAYOUT.build({"withheld_amount": 5}),
    })
    # Append an entry with a type this client does not know about
    data += (999).to_bytes(2, "little") + (2).to_bytes(2, "little") + b"\x01\x02"

    account = unpack_account(data)
    assert account.extension_types == [ExtensionType.TRANSFER_FEE_AMOUNT]


def test_truncated_extension_is_rejected(make_account_data):
    mint, owner = Keypair().pubkey(), Keypair().pubkey()
    data = make_account_data(mint, owner, extensions={
        ExtensionType.TRANSFER_FEE_AMOUNT: TRANSFER_FEE_AMOUNT_LAYOUT.build({"withheld_amount": 5}),
    })
    with pytest.raises(AccountDataError):
        unpack_account(data[:-3])


def test_base_layout_sizes():
    """The base records are the original token program's"""
    assert MINT_LAYOUT.sizeof() == MINT_SIZE
    assert ACCOUNT_LAYOUT.sizeof() == ACCOUNT_SIZE


def test_unpack_mint_reports_initialized_as_bool(make_mint_data):
    mint = unpack_mint(make_mint_data())
    assert mint.is_initialized is True
    assert mint.to_dict()["is_initialized"] is True
