"""
Conversion between human-readable token amounts and integer base units
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN, localcontext
from typing import Union

from .errors import ArgumentError, InstructionBuildError

U64_MAX = 2**64 - 1
U64_DIGITS = len(str(U64_MAX))


def parse_ui_amount(value: Union[str, Decimal]) -> Decimal:
    """Parse a human-readable amount such as ``"1.5"``"""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ArgumentError(f"Invalid amount: {value!r}", exc) from exc

    if not amount.is_finite():
        raise ArgumentError(f"Invalid amount: {value!r}")
    if amount < 0:
        raise ArgumentError(f"Amount must not be negative: {value}")
    return amount


def ui_amount_to_amount(ui_amount: Union[str, Decimal], decimals: int) -> int:
    """
    Convert a UI amount into base units for a mint with ``decimals`` places.

    Digits beyond the mint's precision are truncated.
    """
    amount = parse_ui_amount(ui_amount)

    # 10**20 base units and up can never fit in a u64
    if amount and amount.adjusted() + decimals >= U64_DIGITS:
        raise InstructionBuildError(
            f"Amount {amount} exceeds the maximum token amount for {decimals} decimals"
        )

    # Truncate on the exact input first; scaling a longer coefficient would round it
    with localcontext() as ctx:
        ctx.prec = U64_DIGITS + 1
        truncated = amount.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_DOWN)
        base_units = int(truncated.scaleb(decimals))

    if base_units > U64_MAX:
        raise InstructionBuildError(
            f"Amount {amount} exceeds the maximum token amount for {decimals} decimals"
        )
    return base_units


def amount_to_ui_amount(amount: int, decimals: int) -> Decimal:
    """Convert base units back into a UI amount"""
    return Decimal(amount).scaleb(-decimals)


def format_ui_amount(amount: int, decimals: int) -> str:
    """Format base units as a plain decimal string with the mint's precision"""
    ui_amount = amount_to_ui_amount(amount, decimals)
    return f"{ui_amount:.{decimals}f}"
