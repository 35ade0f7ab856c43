"""Transliteration of non-Latin text into Latin tokens for identifiers."""

from typing import Callable, List

from pypinyin import Style, lazy_pinyin

Transliterator = Callable[[str], List[str]]


def pinyin_tokens(text: str) -> List[str]:
    """Split text into toneless Latin tokens.

    Han characters become one pinyin syllable each; any other run is kept
    as a single token.

    Args:
        text: Text possibly containing Han characters

    Returns:
        List of tokens, e.g. "你好" -> ["ni", "hao"]
    """
    return lazy_pinyin(text, style=Style.NORMAL)
