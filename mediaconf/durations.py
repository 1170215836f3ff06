"""Durations and byte sizes written as strings, such as "10s" or "50M"."""

from __future__ import annotations

import re

from mediaconf.params import ConfError

_MAX_U63 = 1 << 63

_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

SECOND = 1_000_000_000


def _leading_int(s: str, orig: str) -> tuple[int, str]:
    value = 0
    i = 0
    while i < len(s) and s[i].isascii() and s[i].isdigit():
        if value > _MAX_U63 // 10:
            raise ConfError(f'time: invalid duration "{orig}"')
        value = value * 10 + int(s[i])
        if value > _MAX_U63:
            raise ConfError(f'time: invalid duration "{orig}"')
        i += 1
    return value, s[i:]


def _leading_fraction(s: str) -> tuple[int, float, str]:
    value = 0
    scale = 1.0
    overflow = False
    i = 0
    while i < len(s) and s[i].isascii() and s[i].isdigit():
        if not overflow:
            if value > (_MAX_U63 - 1) // 10:
                overflow = True
            else:
                candidate = value * 10 + int(s[i])
                if candidate >= _MAX_U63:
                    overflow = True
                else:
                    value = candidate
                    scale *= 10
        i += 1
    return value, scale, s[i:]


def _is_num_char(c: str) -> bool:
    return c == "." or (c.isascii() and c.isdigit())


def parse_duration(text: str) -> int:
    """Parse a duration such as "1h30m" or "200ms" into nanoseconds."""
    if not isinstance(text, str):
        raise ConfError(f"expected a string, got {text!r}")
    orig = text
    s = text
    neg = False
    if s and s[0] in "+-":
        neg = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ConfError(f'time: invalid duration "{orig}"')

    total = 0
    while s:
        if not _is_num_char(s[0]):
            raise ConfError(f'time: invalid duration "{orig}"')
        before = len(s)
        value, s = _leading_int(s, orig)
        pre = before != len(s)

        frac, scale, post = 0, 1.0, False
        if s.startswith("."):
            s = s[1:]
            before = len(s)
            frac, scale, s = _leading_fraction(s)
            post = before != len(s)
        if not pre and not post:
            raise ConfError(f'time: invalid duration "{orig}"')

        i = 0
        while i < len(s) and not _is_num_char(s[i]):
            i += 1
        if i == 0:
            raise ConfError(f'time: missing unit in duration "{orig}"')
        unit_name, s = s[:i], s[i:]
        unit = _UNITS.get(unit_name)
        if unit is None:
            raise ConfError(f'time: unknown unit "{unit_name}" in duration "{orig}"')

        if value > _MAX_U63 // unit:
            raise ConfError(f'time: invalid duration "{orig}"')
        value *= unit
        if frac > 0:
            value += int(float(frac) * (float(unit) / scale))
            if value > _MAX_U63:
                raise ConfError(f'time: invalid duration "{orig}"')
        total += value
        if total > _MAX_U63:
            raise ConfError(f'time: invalid duration "{orig}"')

    if neg:
        return -total
    if total > _MAX_U63 - 1:
        raise ConfError(f'time: invalid duration "{orig}"')
    return total


def _fraction(value: int, precision: int) -> str:
    whole, frac = divmod(value, 10**precision)
    digits = f"{frac:0{precision}d}".rstrip("0") if precision else ""
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(nanoseconds: int) -> str:
    """Format nanoseconds the way durations are written, e.g. "1h2m3.5s"."""
    u = abs(nanoseconds)
    sign = "-" if nanoseconds < 0 else ""
    if u == 0:
        return "0s"
    if u < SECOND:
        if u < 1_000:
            precision, unit = 0, "ns"
        elif u < 1_000_000:
            precision, unit = 3, "\u00b5s"
        else:
            precision, unit = 6, "ms"
        return sign + _fraction(u, precision) + unit

    whole, frac = divmod(u, SECOND)
    digits = f"{frac:09d}".rstrip("0")
    text = f"{whole % 60}{'.' + digits if digits else ''}s"
    minutes = whole // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


_BYTE_UNITS = {
    "E": 1 << 60,
    "P": 1 << 50,
    "T": 1 << 40,
    "G": 1 << 30,
    "M": 1 << 20,
    "K": 1 << 10,
}

_INVALID_SIZE = (
    "byte quantity must be a positive integer with a unit of measurement "
    "like M, MB, MiB, G, GiB, or GB"
)

_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_byte_size(text: str) -> int:
    """Parse a size such as "50M", "1.5KB" or "2GiB" into bytes."""
    if not isinstance(text, str):
        raise ConfError(f"expected a string, got {text!r}")
    s = text.strip().upper()
    index = next((i for i, c in enumerate(s) if c.isalpha()), -1)
    if index == -1:
        raise ConfError(_INVALID_SIZE)
    number, multiple = s[:index], s[index:]
    if not _NUMBER_RE.fullmatch(number):
        raise ConfError(_INVALID_SIZE)
    amount = float(number)
    if amount < 0 or amount == float("inf"):
        raise ConfError(_INVALID_SIZE)

    if multiple == "B":
        factor = 1
    else:
        letter, suffix = multiple[0], multiple[1:]
        if letter not in _BYTE_UNITS or suffix not in ("", "B", "IB"):
            raise ConfError(_INVALID_SIZE)
        factor = _BYTE_UNITS[letter]
    result = int(amount * factor)
    if result >= 1 << 64:
        raise ConfError(_INVALID_SIZE)
    return result


def format_byte_size(size: int) -> str:
    """Format a byte count with a binary unit letter, e.g. "50M"."""
    if size == 0:
        return "0B"
    for letter, factor in _BYTE_UNITS.items():
        if size >= factor:
            unit, value = letter, size / factor
            break
    else:
        unit, value = "B", float(size)
    result = f"{value:.1f}"
    if result.endswith(".0"):
        result = result[:-2]
    return result + unit