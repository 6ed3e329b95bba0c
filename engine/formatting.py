"""
Display formatting for results, stored inputs and constant values.
"""

import json
import math

# SI prefix table
_SI_PREFIXES = [
    (1e-15, 'f'),
    (1e-12, 'p'),
    (1e-9,  'n'),
    (1e-6,  'µ'),
    (1e-3,  'm'),
    (1e0,   ''),
    (1e3,   'k'),
    (1e6,   'M'),
    (1e9,   'G'),
]

MAX_FRACTION_DIGITS = 6


def _strip_zeros(text: str) -> str:
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def format_value(value: float) -> str:
    """
    Format a numeric result for display.

    Examples:
        format_value(20)            → '20'
        format_value(0.5)           → '0.5'
        format_value(1/3)           → '0.333333'
        format_value(0.00001)       → '1e-5'
        format_value(299792458)     → '2.997925e+8'
    """
    if not math.isfinite(value):
        return str(value)
    if value == 0:
        return '0'

    magnitude = abs(value)
    if magnitude < 1e-4 or magnitude >= 1e6:
        mantissa, exponent = f"{value:.{MAX_FRACTION_DIGITS}e}".split('e')
        return f"{_strip_zeros(mantissa)}e{int(exponent):+d}"

    return _strip_zeros(f"{value:.{MAX_FRACTION_DIGITS}f}")


def format_inputs(inputs_json: str) -> str:
    """Render stored bindings as ``'I=2, R=10'``; unparseable text is returned as-is."""
    try:
        inputs = json.loads(inputs_json)
    except (TypeError, ValueError):
        return inputs_json
    if not isinstance(inputs, dict):
        return inputs_json
    return ', '.join(f"{key}={format_value(value) if isinstance(value, (int, float)) else value}"
                     for key, value in inputs.items())


def engineering_notation(value: float, unit: str = '', precision: int = 3) -> str:
    """
    Format a value in engineering notation with SI prefix.

    Examples:
        engineering_notation(1000, 'Ω')          → '1kΩ'
        engineering_notation(8.854e-12, 'F/m')   → '8.85pF/m'
        engineering_notation(299792458, 'm/s')   → '300Mm/s'
    """
    if value == 0:
        return f"0{unit}"

    abs_value = abs(value)
    sign = '-' if value < 0 else ''

    for scale, prefix in reversed(_SI_PREFIXES):
        if abs_value >= scale:
            scaled = abs_value / scale
            if scaled == int(scaled):
                return f"{sign}{int(scaled)}{prefix}{unit}"
            return f"{sign}{scaled:.{precision}g}{prefix}{unit}"

    # Below the smallest prefix
    return f"{value:.{precision}g}{unit}"
