"""Processing-fee arithmetic.

Fees are ``amount * percent / 100 + fixed``. Results are rounded half-up to
the currency's minor unit and nothing else, so ``net = amount - fee`` holds
exactly at that precision.
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "ISK",
        "JPY",
        "KMF",
        "KRW",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
    }
)

THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})


def minor_unit_exponent(currency: str) -> int:
    """Number of decimal places in the currency's minor unit."""
    code = (currency or "").upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return 0
    if code in THREE_DECIMAL_CURRENCIES:
        return 3
    return 2


def _quantum(currency: str) -> Decimal:
    return Decimal(1).scaleb(-minor_unit_exponent(currency))


def _to_decimal(value) -> Decimal:
    # str() first so 2.9 stays 2.9 instead of its binary expansion
    return Decimal(str(value or 0))


def round_to_minor_unit(amount, currency: str) -> float:
    return float(_to_decimal(amount).quantize(_quantum(currency), rounding=ROUND_HALF_UP))


def calculate_processing_fee(amount, fee_percent, fee_fixed, currency: str = "KES") -> float:
    """Fee charged by a gateway for ``amount``, rounded to the currency's minor unit."""
    fee = _to_decimal(amount) * _to_decimal(fee_percent) / Decimal(100) + _to_decimal(fee_fixed)
    return float(fee.quantize(_quantum(currency), rounding=ROUND_HALF_UP))


def calculate_net_amount(amount, processing_fee, currency: str = "KES") -> float:
    net = _to_decimal(amount) - _to_decimal(processing_fee)
    return float(net.quantize(_quantum(currency), rounding=ROUND_HALF_UP))
