"""Display formatting with es-AR conventions ("." thousands, "," decimals)"""


def format_number(number: float, decimals: int = 2) -> str:
    """1234.5 -> '1.234,50'"""
    text = f"{number:,.{decimals}f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(amount: float, decimals: int = 2) -> str:
    """1234.5 -> '$ 1.234,50', -1234.5 -> '-$ 1.234,50'"""
    sign = "-" if amount < 0 and round(abs(amount), decimals) != 0 else ""
    return f"{sign}$ {format_number(abs(amount), decimals)}"


def format_compact_currency(amount: float) -> str:
    if amount >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"${amount / 1_000:.1f}K"
    return format_currency(amount)


def format_percentage(rate: float, decimals: int = 2, show_sign: bool = False) -> str:
    """Format a fraction as a percentage: 0.035 -> '3,50%'"""
    sign = "+" if show_sign and rate > 0 else ""
    return f"{sign}{format_number(rate * 100, decimals)}%"


def format_percentage_from_whole(value: float, decimals: int = 2, show_sign: bool = False) -> str:
    """Format a value already in percent: 3.5 -> '3,50%'"""
    return format_percentage(value / 100, decimals, show_sign)
