'''
Rendering of results: digit grouping, cents, and a rough magnitude.

Two conventions exist. The regular one groups digits by three and speaks of
thousands, millions and billions; the Indian one groups the last three
digits, then by two, and speaks of thousands, lakhs and crores. Only amounts
in the Indian currency use the latter.
'''

from decimal import Decimal, ROUND_HALF_UP
import math


INDIAN_CURRENCY = 'INR'

SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'INR': '₹',
}

# (divisor, label), largest first
REGULAR_SCALES = [
    (1e9, 'B'),
    (1e6, 'M'),
    (1e3, 'K'),
]
INDIAN_SCALES = [
    (1e7, 'Cr'),
    (1e5, 'Lac'),
    (1e3, 'K'),
]


def group_regular(n):
    '''
    1234567 -> 1,234,567
    '''
    return '{:,}'.format(n)


def group_indian(n):
    '''
    12345678 -> 1,23,45,678
    '''
    digits = str(n)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ','.join(groups + [tail])


def _split(magnitude):
    '''
    Split a non-negative number into integral part and cents, half-up.
    '''
    integral = math.floor(magnitude)
    cents = int(Decimal((magnitude - integral) * 100)
                .quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if cents == 100:
        integral, cents = integral + 1, 0
    return integral, cents


def format_with_separator(value, indian=False):
    '''
    Group digits of value, appending cents only when there are any.
    '''
    if not math.isfinite(value):
        return str(value)
    integral, cents = _split(abs(value))
    grouped = group_indian(integral) if indian else group_regular(integral)
    sign = '-' if value < 0 else ''
    if cents:
        return '{}{}.{:02d}'.format(sign, grouped, cents)
    return sign + grouped


def estimate_number(value, indian=False):
    '''
    Return a short magnitude like '5.5 K', or None below a thousand.
    '''
    magnitude = abs(value)
    if not math.isfinite(magnitude) or magnitude < 1e3:
        return None
    for divisor, label in INDIAN_SCALES if indian else REGULAR_SCALES:
        if magnitude >= divisor:
            quotient = '{:.1f}'.format(magnitude / divisor)
            if quotient.endswith('.0'):
                quotient = quotient[:-2]
            return '{} {}'.format(quotient, label)


def _with_estimate(value, indian):
    formatted = format_with_separator(value, indian)
    estimate = estimate_number(value, indian)
    if estimate is None:
        return formatted
    return '{} ({})'.format(formatted, estimate)


def format_number(value):
    return _with_estimate(value, indian=False)


def format_currency(value, currency):
    '''
    Format value as an amount of currency, symbol first.

    Codes without a known symbol are printed as their own symbol.
    '''
    symbol = SYMBOLS.get(currency, currency)
    return '{} {}'.format(symbol,
                          _with_estimate(value,
                                         indian=currency == INDIAN_CURRENCY))
