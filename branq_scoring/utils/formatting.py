"""Display formatting for factor summaries"""


def format_amount(value: float) -> str:
    """1234 -> '1.2k', 3.51 -> '3.5', 0.0042 -> '0.004'"""
    if abs(value) >= 1000:
        return f"{value / 1000:.1f}k"
    if abs(value) >= 1:
        return f"{value:.1f}"
    return f"{value:.3f}"


def format_duration(days: float) -> str:
    if days >= 365:
        return f"{days / 365:.1f} years"
    if days >= 30:
        return f"{days / 30:.1f} months"
    return f"{round(days)} days"


def format_usd(amount: float) -> str:
    return f"${amount:,.2f}"


def format_percent(value: float) -> str:
    return f"{round(value)}%"
