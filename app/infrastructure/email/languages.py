"""
Supported email languages and the language selection policy.
"""

from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union


class Lang(str, Enum):
    DE = "de"
    EN = "en"


LangLike = Union[Lang, str]


def to_lang(value: Optional[LangLike]) -> Optional[Lang]:
    """Coerce a string to Lang; unknown or empty values give None."""
    if value is None or value == "":
        return None
    if isinstance(value, Lang):
        return value
    try:
        return Lang(str(value).lower())
    except ValueError:
        return None


def merge_languages(*groups: Optional[Iterable[LangLike]]) -> List[Lang]:
    """Union of language groups, keeping first-seen order."""
    merged: List[Lang] = []
    for group in groups:
        for value in group or ():
            lang = to_lang(value)
            if lang is not None and lang not in merged:
                merged.append(lang)
    return merged


def resolve_language(
    requested: Optional[LangLike],
    allowed: Sequence[Lang],
    fallback: LangLike,
) -> Lang:
    """
    Pick the language to render.

    The requested language wins when allowed, then the fallback, then the
    first allowed language. ``allowed`` must not be empty.
    """
    wanted = to_lang(requested)
    if wanted is not None and wanted in allowed:
        return wanted

    default = to_lang(fallback)
    if default is not None and default in allowed:
        return default

    return allowed[0]
