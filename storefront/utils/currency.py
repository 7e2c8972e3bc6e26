"""Price conversion and locale-aware currency formatting.

Prices are stored as integers in minor currency units (cents), except for
JPY which has no minor unit.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union
from storefront.data.schemas import FormattedPrice

Number = Union[int, float, Decimal]

# Currency symbol mapping
CURRENCY_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "CAD": "C$",
    "AUD": "A$",
    "JPY": "¥",
}

CURRENCY_NAMES: Dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "JPY": "Japanese Yen",
}

# Default locale and fraction digits per currency
CURRENCY_CONFIG: Dict[str, Dict[str, Union[str, int]]] = {
    "USD": {"locale": "en-US", "fraction_digits": 2},
    "EUR": {"locale": "de-DE", "fraction_digits": 2},
    "GBP": {"locale": "en-GB", "fraction_digits": 2},
    "CAD": {"locale": "en-CA", "fraction_digits": 2},
    "AUD": {"locale": "en-AU", "fraction_digits": 2},
    "JPY": {"locale": "ja-JP", "fraction_digits": 0},
}

# Separators and symbol placement per locale
LOCALE_FORMATS: Dict[str, Dict[str, str]] = {
    "en-US": {"group": ",", "decimal": ".", "pattern": "{sign}{symbol}{number}"},
    "en-GB": {"group": ",", "decimal": ".", "pattern": "{sign}{symbol}{number}"},
    "en-CA": {"group": ",", "decimal": ".", "pattern": "{sign}{symbol}{number}"},
    "en-AU": {"group": ",", "decimal": ".", "pattern": "{sign}{symbol}{number}"},
    "ja-JP": {"group": ",", "decimal": ".", "pattern": "{sign}{symbol}{number}"},
    "de-DE": {"group": ".", "decimal": ",", "pattern": "{sign}{number}\u00a0{symbol}"},
}

# Symbols a locale uses for its own currency when they differ from the defaults
LOCAL_SYMBOLS: Dict[str, Dict[str, str]] = {
    "en-CA": {"CAD": "$"},
    "en-AU": {"AUD": "$"},
    "ja-JP": {"JPY": "￥"},
}

DEFAULT_LOCALE = "en-US"


def _code(currency) -> str:
    return str(getattr(currency, "value", currency))


def _fraction_digits(currency: str) -> int:
    return int(CURRENCY_CONFIG.get(currency, CURRENCY_CONFIG["USD"])["fraction_digits"])


def cents_to_price(cents: Number, currency="USD") -> Decimal:
    """Convert a price from minor units to currency units."""
    amount = Decimal(str(cents))
    if _code(currency) == "JPY":
        return amount
    return amount / 100


def price_to_cents(price: Number, currency="USD") -> int:
    """Convert a price from currency units to minor units."""
    amount = Decimal(str(price))
    if _code(currency) != "JPY":
        amount = amount * 100
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _format_number(amount: Decimal, digits: int, locale: str) -> str:
    fmt = LOCALE_FORMATS.get(locale, LOCALE_FORMATS[DEFAULT_LOCALE])
    quantum = Decimal(1).scaleb(-digits)
    rounded = abs(amount).quantize(quantum, rounding=ROUND_HALF_UP)
    text = f"{rounded:,.{digits}f}"
    return text.replace(",", "\0").replace(".", fmt["decimal"]).replace("\0", fmt["group"])


def format_price(
    price_in_cents: Number,
    currency="USD",
    show_symbol: bool = True,
    show_code: bool = False,
    locale: Optional[str] = None
) -> str:
    """
    Format a price with proper currency formatting.

    Args:
        price_in_cents: Price in minor units
        currency: Currency code
        show_symbol: Whether to include the currency symbol
        show_code: Whether to append the ISO currency code
        locale: Locale to format for (defaults to the currency's home locale)

    Returns:
        Formatted price string
    """
    code = _code(currency)
    if locale is None:
        locale = str(CURRENCY_CONFIG.get(code, {}).get("locale", DEFAULT_LOCALE))
    if locale not in LOCALE_FORMATS:
        locale = DEFAULT_LOCALE

    amount = cents_to_price(price_in_cents, code)
    number = _format_number(amount, _fraction_digits(code), locale)
    sign = "-" if amount < 0 else ""

    if show_symbol and not show_code:
        # Full locale currency style
        symbol = LOCAL_SYMBOLS.get(locale, {}).get(code, CURRENCY_SYMBOLS.get(code, code))
        return LOCALE_FORMATS[locale]["pattern"].format(sign=sign, symbol=symbol, number=number)

    # Custom formatting with symbol and/or code
    result = f"{sign}{number}"
    if show_symbol:
        result = f"{sign}{get_currency_symbol(code)}{number}"
    if show_code:
        result = f"{result} {code}"
    return result


def format_price_range(min_price_in_cents: Number, max_price_in_cents: Number, currency="USD") -> str:
    """Format a price range as 'min - max' (symbol on the lower bound only)."""
    min_formatted = format_price(min_price_in_cents, currency, show_symbol=True)
    max_formatted = format_price(max_price_in_cents, currency, show_symbol=False)
    return f"{min_formatted} - {max_formatted}"


def calculate_discount_percentage(original_price: Number, sale_price: Number) -> int:
    """Whole-number discount percentage, 0 when there is no valid discount."""
    if original_price <= 0 or sale_price >= original_price:
        return 0
    ratio = (Decimal(str(original_price)) - Decimal(str(sale_price))) / Decimal(str(original_price)) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_complete_price(price: Number, currency="USD", sale_price: Optional[Number] = None) -> FormattedPrice:
    """Format a price together with its sale price and discount."""
    original = format_price(price, currency)

    if not sale_price or sale_price >= price:
        return FormattedPrice(original=original, has_discount=False)

    return FormattedPrice(
        original=original,
        sale=format_price(sale_price, currency),
        has_discount=True,
        discount_percentage=calculate_discount_percentage(price, sale_price)
    )


def get_currency_symbol(currency) -> str:
    code = _code(currency)
    return CURRENCY_SYMBOLS.get(code, code)


def is_valid_currency(currency) -> bool:
    return _code(currency) in CURRENCY_SYMBOLS


def get_available_currencies() -> List[Dict[str, str]]:
    """Supported currencies with their symbol and display name."""
    return [
        {"code": code, "symbol": symbol, "name": CURRENCY_NAMES[code]}
        for code, symbol in CURRENCY_SYMBOLS.items()
    ]


def convert_currency(amount: Number, from_currency, to_currency, exchange_rate: Number) -> int:
    """
    Convert a minor-unit amount between currencies with a given rate.

    Args:
        amount: Amount in minor units of from_currency
        from_currency: Source currency code
        to_currency: Target currency code
        exchange_rate: Units of to_currency per unit of from_currency

    Returns:
        Amount in minor units of to_currency
    """
    converted = cents_to_price(amount, from_currency) * Decimal(str(exchange_rate))
    return price_to_cents(converted, to_currency)


def format_card_price(price: Number, currency="USD", sale_price: Optional[Number] = None) -> str:
    """Short price text for product cards."""
    if sale_price and sale_price < price:
        sale_formatted = format_price(sale_price, currency)
        original_formatted = format_price(price, currency, show_symbol=False)
        return f"{sale_formatted} (was {original_formatted})"

    return format_price(price, currency)


def get_price_comparison_text(price: Number, sale_price: Number, currency="USD") -> str:
    """Savings line, e.g. 'Save $5.00 (25%)'."""
    savings = price - sale_price
    percentage = calculate_discount_percentage(price, sale_price)
    return f"Save {format_price(savings, currency)} ({percentage}%)"
