"""
keys.py

Key normalizers.

A key normalizer maps a key to its canonical form. Two keys are the same
key for an insensitive container exactly when their canonical forms are
equal.

Every normalizer here is:
- Pure and deterministic
- Total (keys it does not understand are returned unchanged)
- Idempotent: normalize(normalize(k)) == normalize(k)
"""

import unicodedata
from typing import Any, Callable, Dict, Union

from insensitive_access.errors import UnknownNormalizerError

KeyNormalizer = Callable[[Any], Any]


def casefold_key(key: Any) -> Any:
    """
    Default normalizer.

    Strings are casefolded (so "Straße" and "STRASSE" match), bytes are
    ASCII-lowered, every other key is returned as-is.
    """
    if isinstance(key, str):
        return key.casefold()
    if isinstance(key, bytes):
        return key.lower()
    return key


def lower_key(key: Any) -> Any:
    """Lowercase strings and bytes, leave every other key untouched."""
    if isinstance(key, (str, bytes)):
        return key.lower()
    return key


def nfkc_casefold_key(key: Any) -> Any:
    """
    Unicode-aware normalizer.

    Folds compatibility forms together as well as case, so full-width
    "ＦＯＯ" and the "ﬁ" ligature match "foo" and "fi".
    """
    if isinstance(key, str):
        folded = unicodedata.normalize("NFKC", key).casefold()
        return unicodedata.normalize("NFKC", folded)
    if isinstance(key, bytes):
        return key.lower()
    return key


_NORMALIZERS: Dict[str, KeyNormalizer] = {
    "casefold": casefold_key,
    "lower": lower_key,
    "nfkc": nfkc_casefold_key,
}


def get_normalizer(normalizer: Union[str, KeyNormalizer]) -> KeyNormalizer:
    """
    Resolve a key normalizer by name, or pass a callable through.

    Args:
        normalizer: One of "casefold", "lower", "nfkc", or a callable

    Returns:
        The normalizer function

    Raises:
        UnknownNormalizerError: If the name is not registered
    """
    if callable(normalizer):
        return normalizer
    try:
        return _NORMALIZERS[normalizer]
    except KeyError:
        raise UnknownNormalizerError(normalizer, _NORMALIZERS) from None
