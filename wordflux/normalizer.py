"""
Line normalisation: raw text line -> lowercase word tokens.
"""

import re
import unicodedata
from typing import List

# Anything that is not a word character (letters of any script, digits,
# underscore), a combining mark or whitespace becomes a separator. Combining
# marks only survive when attached to a preceding word character.
_NON_WORD = re.compile(
    r'[^\w\s\u0300-\u036f]'
    r'|(?<![\w\u0300-\u036f])[\u0300-\u036f]+'
)


def normalize_line(line: str) -> List[str]:
    """
    Split a line of text into normalised tokens.

    Args:
        line: Raw text line (trailing newline allowed)

    Returns:
        Tokens in the order they appear in the line
    """
    # Lowercasing can decompose ("İ" -> "i" + U+0307), so compose afterwards
    text = unicodedata.normalize('NFC', line.lower())
    return _NON_WORD.sub(' ', text).split()
