# decimals.py
"""
Arbitrary-precision handling of exchange price strings.

Exchange prices arrive as plain decimal strings ("0.01234", "65000.50").
They are parsed into Decimal at a fixed working precision, multiplied, and
rendered back with as many fractional digits as the two inputs carried
together, then stripped of superfluous trailing zeros.
"""
import math
import re
from decimal import MAX_EMAX, MIN_EMIN, Context, DecimalException, ROUND_HALF_EVEN, localcontext

from price_oracle.errors import ComputationError, FormattingError, InvalidFieldError

# Significand width used for every parse and product
WORKING_PRECISION_BITS = 256
WORKING_PRECISION_DIGITS = math.ceil(WORKING_PRECISION_BITS * math.log10(2))

# ASCII digits with at most one decimal point, no sign, no exponent
DECIMAL_STRING = re.compile(r"[0-9]*\.?[0-9]*")


def working_context():
    """Scoped decimal context at working precision.

    Use as ``with working_context() as ctx:``; the previous context is
    restored on every exit path.
    """
    return localcontext(Context(
        prec=WORKING_PRECISION_DIGITS,
        rounding=ROUND_HALF_EVEN,
        Emax=MAX_EMAX,
        Emin=MIN_EMIN,
    ))


def is_decimal_string(literal):
    return DECIMAL_STRING.fullmatch(literal) is not None


def fractional_digits(literal):
    """Number of characters after the decimal point, 0 without one."""
    point = literal.find(".")
    if point < 0:
        return 0
    return len(literal) - point - 1


def parse_price(literal, ctx, not_numeric, invalid):
    """Parse a validated price literal into a strictly positive Decimal.

    ``not_numeric`` and ``invalid`` are the messages raised when the literal
    holds foreign characters or does not parse to a positive number.
    """
    if not is_decimal_string(literal):
        raise InvalidFieldError(not_numeric)
    try:
        value = ctx.create_decimal(literal)
    except DecimalException as e:
        raise InvalidFieldError(invalid) from e
    if value <= 0:
        raise InvalidFieldError(invalid)
    return value


def render_fixed(value, fraction_digits):
    """Fixed-point string with exactly ``fraction_digits`` digits after the point."""
    try:
        with localcontext() as ctx:
            ctx.rounding = ROUND_HALF_EVEN
            return format(value, f".{fraction_digits}f")
    except (ArithmeticError, ValueError) as e:
        raise FormattingError(f"rendering price with {fraction_digits} fractional digits failed") from e


def canonicalize(rendered):
    """Drop trailing fractional zeros and a dangling point.

    Only the fractional part is touched: "200" stays "200", "1.00" becomes "1".
    """
    if rendered == "0" or "." not in rendered:
        return rendered
    return rendered.rstrip("0").rstrip(".")


def compose_price(price_a, price_b, precision, ctx):
    """Multiply two positive prices and render the canonical product string."""
    try:
        product = ctx.multiply(price_a, price_b)
    except DecimalException as e:
        raise ComputationError("multiplication failed") from e
    if product <= 0:
        raise ComputationError("non-positive result")
    return canonicalize(render_fixed(product, precision))
