"""Token amount and epoch formatting."""

TOKEN_DECIMALS = 18

STAKE_UNIT = "MIND"
REWARD_UNIT = "PMIND"


def format_units(raw: int, decimals: int = TOKEN_DECIMALS) -> str:
    """
    Render a fixed-point integer as a decimal string.

    Trailing zeros of the fraction are dropped but one digit is always kept,
    so 5 * 10**18 renders as "5.0" and 1 renders as "0.000000000000000001".
    """
    sign = "-" if raw < 0 else ""
    whole, fraction = divmod(abs(int(raw)), 10**decimals)
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
    return f"{sign}{whole}.{fraction_str}"


def format_token_amount(raw: int, unit: str) -> str:
    """Format a raw 18-decimal balance with a unit suffix, e.g. "1.5 MIND"."""
    return f"{format_units(raw)} {unit}"


def decode_epoch(value: str | int | bytes) -> str:
    """Decode a hex-encoded epoch ("0x1a" or "1a") into a base-10 string."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid epoch value: {value!r}")
    if isinstance(value, int):
        epoch = value
    elif isinstance(value, (bytes, bytearray)):
        epoch = int.from_bytes(value, "big")
    else:
        text = value.strip()
        if not text:
            raise ValueError("Empty epoch value")
        epoch = int(text, 16)
    if epoch < 0:
        raise ValueError(f"Negative epoch value: {value!r}")
    return str(epoch)
