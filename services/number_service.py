"""
Number service for resolving locale-formatted numeric cell values.

Regional price lists mix "1.234,56" and "102.800" style numbers in text
cells. This module turns such values into plain Python numbers.
"""

import math
import re
from decimal import Decimal
from typing import Any, Optional, Union

Number = Union[int, float, Decimal]


class NumberNormalizer:
    """Resolve numeric cell values written with local separators."""

    # Anything that is not a digit, dot, comma or minus sign
    NON_NUMERIC_PATTERN = re.compile(r'[^0-9.,\-]')
    WHITESPACE_PATTERN = re.compile(r'\s')
    INTEGER_PATTERN = re.compile(r'^-?\d+$')

    @staticmethod
    def normalize(raw: Any) -> Optional[Number]:
        """
        Convert a cell value or raw string into a number.

        Separator rules:
            both '.' and ','  -> '.' is thousands, ',' is decimal
                                 "1.234.567,89" → 1234567.89
            only '.'          -> every '.' is thousands
                                 "102.800" → 102800
            only ','          -> ',' is decimal
                                 "102,80" → 102.8

        A lone-dot decimal such as "123.45" is read as 12345. Existing
        datasets were loaded with that rule, so it must not change.

        Args:
            raw: Native number, string, or any value with a text form

        Returns:
            int for integral results, float otherwise, the value itself for
            native numbers, or None if the value cannot be resolved
        """
        if raw is None:
            return None

        if isinstance(raw, (int, float, Decimal)) and not isinstance(raw, bool):
            if isinstance(raw, float) and not math.isfinite(raw):
                return None
            return raw

        text = str(raw).strip()
        if not text:
            return None

        text = NumberNormalizer.WHITESPACE_PATTERN.sub('', text)
        text = NumberNormalizer.NON_NUMERIC_PATTERN.sub('', text)
        if not text:
            return None

        has_dot = '.' in text
        has_comma = ',' in text

        if has_dot and has_comma:
            text = text.replace('.', '').replace(',', '.', 1)
        elif has_dot:
            text = text.replace('.', '')
        elif has_comma:
            text = text.replace(',', '.', 1)

        return NumberNormalizer.parse_plain(text)

    @staticmethod
    def parse_plain(text: str) -> Optional[Number]:
        """
        Parse a cleaned numeric string that uses '.' as decimal point.

        Returns:
            int when the value is integral, float otherwise, None when the
            string is not a number (e.g. "1.2.3", "-", "5-")
        """
        if not text:
            return None

        try:
            if NumberNormalizer.INTEGER_PATTERN.match(text):
                # Digit strings past the interpreter's conversion limit raise
                return int(text)
            value = float(text)
        except ValueError:
            return None

        if not math.isfinite(value):
            return None

        if value.is_integer():
            return int(value)
        return value

    @staticmethod
    def is_resolvable(raw: Any) -> bool:
        """Check whether a value resolves to a number."""
        return NumberNormalizer.normalize(raw) is not None


def normalize_number(raw: Any) -> Optional[Number]:
    """Module-level shortcut for NumberNormalizer.normalize()."""
    return NumberNormalizer.normalize(raw)
