"""Default display formatting for minor-unit amounts."""

from decimal import Decimal

from subscription_billing.core.config import settings

# Currencies whose amounts are already expressed in major units
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
        "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
    }
)


class DefaultCurrencyFormatter:
    """Format amounts as "<CODE> <amount>", e.g. "USD 1,234.50"."""

    def format(self, amount: int, currency: str) -> str:
        code = (currency or settings.DEFAULT_CURRENCY).upper()
        if code in ZERO_DECIMAL_CURRENCIES:
            return f"{code} {amount:,}"
        val = Decimal(amount) / 100
        return f"{code} {val:,.2f}"
