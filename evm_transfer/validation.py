"""
Transfer Validation

Field-level checks that turn extracted strings into TransferParams.
Checks run in field order (chain, amount, destination) and stop at the first failure.
"""

from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Tuple

from .chains import ChainConfig, SupportedChain, resolve_chain, validate_address
from .models import TransferParams, ValidationError

# EVM values are uint256
MAX_SMALLEST_UNIT = 2 ** 256 - 1
MAX_SMALLEST_UNIT_DIGITS = len(str(MAX_SMALLEST_UNIT))


def to_smallest_unit(amount: str, decimals: int = 18) -> int:
    """
    Convert a decimal amount string to the chain's smallest integer unit

    The conversion is exact: amounts with more fractional digits than
    `decimals` are rejected rather than rounded.

    Args:
        amount: Decimal string in the native unit (e.g. "1.5")
        decimals: Native unit decimals (18 for wei)

    Returns:
        Integer amount in the smallest unit

    Raises:
        ValueError: If the amount is malformed, negative, not finite, lossy
            or larger than uint256
    """
    if not isinstance(amount, str) or not amount.strip():
        raise ValueError("amount must be a non-empty decimal string")

    try:
        value = Decimal(amount.strip())
    except InvalidOperation:
        raise ValueError(f"'{amount}' is not a decimal number") from None

    if not value.is_finite():
        raise ValueError("amount must be finite")

    sign, digits, exponent = value.as_tuple()

    # Drop trailing zeros so the exponent reflects the real precision
    significant = len(digits)
    while significant > 1 and digits[significant - 1] == 0:
        significant -= 1
    exponent += len(digits) - significant
    digits = digits[:significant]

    if not any(digits):
        return 0

    if sign:
        raise ValueError("amount must not be negative")

    # Bounds are checked on exponents before any power is computed
    if exponent < -decimals:
        raise ValueError(f"amount has more than {decimals} decimal places")
    if value.adjusted() + decimals >= MAX_SMALLEST_UNIT_DIGITS:
        raise ValueError("amount exceeds the chain's maximum transferable value")

    coefficient = int("".join(str(d) for d in digits))
    result = coefficient * 10 ** (exponent + decimals)
    if result > MAX_SMALLEST_UNIT:
        raise ValueError("amount exceeds the chain's maximum transferable value")
    return result


def validate_transfer(
    source_chain,
    amount,
    to_address,
    chains: Dict[SupportedChain, ChainConfig],
    payload: bytes = b""
) -> Tuple[Optional[TransferParams], Optional[ValidationError]]:
    """
    Validate raw transfer fields

    Pure function: the same inputs always produce the same verdict.

    Args:
        source_chain: Chain name
        amount: Decimal amount string
        to_address: Destination address
        chains: Available chain configs
        payload: Optional transaction data

    Returns:
        Tuple of (params, error); exactly one is None
    """
    # 1. Chain
    try:
        chain = chains[resolve_chain(source_chain)]
    except ValueError as e:
        return None, ValidationError("source_chain", str(e))
    except KeyError:
        return None, ValidationError("source_chain", f"chain '{source_chain}' is not configured")

    # 2. Amount
    try:
        to_smallest_unit(amount, chain.decimals)
    except ValueError as e:
        return None, ValidationError("amount", str(e))

    # 3. Destination
    is_valid, error = validate_address(to_address, chain)
    if not is_valid:
        return None, ValidationError("to_address", error)

    # 4. Payload
    if not isinstance(payload, (bytes, bytearray)):
        return None, ValidationError("payload", "payload must be bytes")

    params = TransferParams(
        source_chain=chain,
        amount=amount.strip(),
        destination_address=to_address,
        payload=bytes(payload),
    )
    return params, None
