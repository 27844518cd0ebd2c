"""
access.py

Insensitive access for mappings.

InsensitiveAccess makes a mapping treat keys that differ only by case as
the same key. Every key is passed through a key normalizer before it
reaches the underlying store, and every value is processed before it is
stored so that nested mappings (directly, or inside lists) gain the same
behavior.

One unique feature is that insensitive access spreads into nested
mappings *in place*, without copying them and without changing the class
of every other instance of their type:

- A ``dict`` subclass that keeps dict's own storage methods has its
  ``__class__`` switched to a cached subclass that mixes InsensitiveAccess
  in front of the original type. ``isinstance(value, OriginalType)`` still
  holds and identity is kept.
- Everything else is re-keyed in place and wrapped in an InsensitiveView
  that writes through to it: built-in mappings (``dict``, ``OrderedDict``,
  ``defaultdict``) that refuse class assignment, subclasses with their own
  storage (``OrderedDict`` and ``Counter`` subclasses) and other mutable
  mappings.

Example:
    class Settings(dict):
        pass

    settings = Settings({"Timeout": 30})
    inject(settings)

    assert settings["TIMEOUT"] == 30
    assert isinstance(settings, Settings)
    assert not hasattr(Settings(), "supports_insensitive_access")
"""

import copy
import logging
from collections.abc import Mapping, MutableMapping, MutableSequence
from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple, Union

from insensitive_access.errors import KeyNotFoundError, NotConvertibleError
from insensitive_access.keys import KeyNormalizer, casefold_key, get_normalizer

logger = logging.getLogger(__name__)

# Distinguishes "no default given" from a default of None
_ABSENT = object()

# One injection pass: id(original) -> (original, processed value)
_Seen = Dict[int, Tuple[Any, Any]]

# (host type, normalizer) -> retrofit class. Entries live as long as the
# process, so normalizers should be module-level functions, not lambdas.
_RETROFIT_CLASSES: Dict[Tuple[type, Callable], type] = {}

# dict types that refuse __class__ assignment
_FIXED_CLASS_HOSTS: Set[type] = set()

# A host may be retrofitted only if it inherits all of these from dict
_DICT_STORAGE_METHODS = (
    "__getitem__",
    "__setitem__",
    "__delitem__",
    "__contains__",
    "__iter__",
    "keys",
    "get",
    "pop",
    "popitem",
    "setdefault",
    "update",
    "clear",
)


# =============================================================================
# Capability Query
# =============================================================================

def supports_insensitive_access(value: Any) -> bool:
    """
    Return True if value already provides insensitive access.

    True for InsensitiveDict and friends, for injected instances, for views,
    and for any object whose own ``supports_insensitive_access()`` returns
    a true value. False for plain mappings and everything else.
    """
    if isinstance(value, type):
        return False
    probe = getattr(value, "supports_insensitive_access", None)
    if not callable(probe):
        return False
    return bool(probe())


def _lacks_insensitive_access(value: Any) -> bool:
    return isinstance(value, MutableMapping) and not supports_insensitive_access(value)


def _is_mutable_sequence(value: Any) -> bool:
    return isinstance(value, MutableSequence) and not isinstance(value, bytearray)


def _iter_pairs(other: Any) -> List[Tuple[Any, Any]]:
    """Snapshot the key/value pairs of a mapping, keys() object or pair iterable."""
    if isinstance(other, Mapping):
        return list(other.items())
    if hasattr(other, "keys"):
        return [(key, other[key]) for key in other.keys()]
    return [(key, value) for key, value in other]


# =============================================================================
# InsensitiveAccess — the operation set
# =============================================================================

class InsensitiveAccess:
    """
    Mixin that gives a dict-based mapping case-insensitive keys.

    Place it in front of the host type::

        class InsensitiveDict(InsensitiveAccess, dict):
            ...

    The ``_regular_*`` methods reach the host store directly with keys
    that are already canonical. Everything public normalizes first.
    """

    __slots__ = ()

    key_normalizer = staticmethod(casefold_key)

    # =========================================================================
    # Host Store Primitives
    # =========================================================================

    # Hosts are dict itself or subclasses that inherit dict's storage
    # methods unchanged (see _has_dict_storage), so dict's are the raw ones.

    def _regular_setitem(self, key: Any, value: Any) -> None:
        dict.__setitem__(self, key, value)

    def _regular_getitem(self, key: Any) -> Any:
        return dict.__getitem__(self, key)

    def _regular_delitem(self, key: Any) -> None:
        dict.__delitem__(self, key)

    def _regular_contains(self, key: Any) -> bool:
        return dict.__contains__(self, key)

    def _regular_keys(self) -> List[Any]:
        return list(dict.keys(self))

    def _regular_missing(self, key: Any) -> Any:
        """
        The host's own default behavior for a missing key.

        A host without ``__missing__`` raises KeyError. A host that stores
        a value while producing the default (defaultdict) goes through
        __setitem__, so the stored value is the processed one and that is
        what gets returned.
        """
        missing = getattr(super(), "__missing__", None)
        if missing is None:
            raise KeyError(key)
        value = missing(key)
        canonical = self.convert_key(key)
        if self._regular_contains(canonical):
            return self._regular_getitem(canonical)
        return value

    # =========================================================================
    # Normalization
    # =========================================================================

    def convert_key(self, key: Any) -> Any:
        """Return the canonical form of key."""
        return self.key_normalizer(key)

    def supports_insensitive_access(self) -> bool:
        return True

    def convert(self, _seen: Optional[_Seen] = None) -> "InsensitiveAccess":
        """
        Re-key every entry to its canonical form and process every value.

        Entries are re-inserted in their current order, so when two keys
        collide after normalization the later one wins.

        Returns:
            self
        """
        if _seen is None:
            _seen = {}
        pairs = [(key, self._regular_getitem(key)) for key in self._regular_keys()]
        for key, _ in pairs:
            self._regular_delitem(key)
        for key, value in pairs:
            self._regular_setitem(
                self.convert_key(key),
                self._insensitive_value(value, _seen),
            )
        return self

    def _insensitive_value(self, value: Any, _seen: Optional[_Seen] = None) -> Any:
        """
        Process a value before it is stored.

        - Mutable mappings without insensitive access are injected in place
          using this container's key normalizer.
        - Lists (and other mutable sequences) have their elements processed
          in place; the list itself is kept.
        - Everything else is returned unchanged.

        A structure met twice in the same pass resolves to the same result,
        so self-referencing mappings and lists terminate.
        """
        if _seen is None:
            _seen = {}
        if id(value) in _seen:
            return _seen[id(value)][1]
        if _lacks_insensitive_access(value):
            return _inject(value, self.key_normalizer, _seen)
        if _is_mutable_sequence(value):
            _seen[id(value)] = (value, value)
            value[:] = [self._insensitive_value(item, _seen) for item in value]
        return value

    # =========================================================================
    # Write Operations
    # =========================================================================

    def __setitem__(self, key: Any, value: Any) -> None:
        self._regular_setitem(self.convert_key(key), self._insensitive_value(value))

    def store(self, key: Any, value: Any) -> Any:
        """
        Set key to value and return the stored value.

        The stored value is value itself unless value was a built-in
        mapping, in which case it is the view wrapping it.
        """
        canonical = self.convert_key(key)
        self._regular_setitem(canonical, self._insensitive_value(value))
        return self._regular_getitem(canonical)

    def setdefault(self, key: Any, default: Any = None) -> Any:
        canonical = self.convert_key(key)
        if not self._regular_contains(canonical):
            self._regular_setitem(canonical, self._insensitive_value(default))
        return self._regular_getitem(canonical)

    def __delitem__(self, key: Any) -> None:
        canonical = self.convert_key(key)
        if not self._regular_contains(canonical):
            raise KeyError(key)
        self._regular_delitem(canonical)

    def pop(self, key: Any, *default: Any) -> Any:
        if len(default) > 1:
            raise TypeError(f"pop expected at most 2 arguments, got {len(default) + 1}")
        canonical = self.convert_key(key)
        if not self._regular_contains(canonical):
            if default:
                return default[0]
            raise KeyError(key)
        value = self._regular_getitem(canonical)
        self._regular_delitem(canonical)
        return value

    def delete(self, key: Any) -> Any:
        """Remove key and return its value, or None if nothing matched."""
        return self.pop(key, None)

    def update(self, *args: Any, **kwargs: Any) -> "InsensitiveAccess":
        """
        Merge another mapping (or iterable of pairs) and keyword arguments.

        When the other mapping already provides insensitive access with the
        same key normalizer, its entries are copied straight into the store:
        their keys are canonical and their values were processed when they
        were stored there. Otherwise every pair goes through __setitem__.

        Returns:
            self
        """
        if len(args) > 1:
            raise TypeError(f"update expected at most 1 positional argument, got {len(args)}")
        if args:
            self._merge(args[0])
        if kwargs:
            self._merge(kwargs)
        return self

    def _merge(self, other: Any) -> None:
        if self._shares_normalization(other):
            logger.debug("Fast-path merge of %d entries from %s", len(other), type(other).__name__)
            for key, value in list(other.items()):
                self._regular_setitem(key, value)
            return
        for key, value in _iter_pairs(other):
            self[key] = value

    def _shares_normalization(self, other: Any) -> bool:
        return (
            isinstance(other, Mapping)
            and supports_insensitive_access(other)
            and getattr(other, "key_normalizer", None) is self.key_normalizer
        )

    def replace(self, other: Any) -> "InsensitiveAccess":
        """
        Replace the contents with those of other.

        Keys whose canonical form does not occur in other are removed
        first, then every pair of other is set in other's order.

        Returns:
            self
        """
        pairs = _iter_pairs(other)
        wanted = {self.convert_key(key) for key, _ in pairs}
        for canonical in self._regular_keys():
            if canonical not in wanted:
                self._regular_delitem(canonical)
        for key, value in pairs:
            self[key] = value
        return self

    def __ior__(self, other: Any) -> "InsensitiveAccess":
        return self.update(other)

    def __or__(self, other: Any) -> Any:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.copy().update(other)

    # =========================================================================
    # Read Operations
    # =========================================================================

    def __getitem__(self, key: Any) -> Any:
        canonical = self.convert_key(key)
        if self._regular_contains(canonical):
            return self._regular_getitem(canonical)
        return self.__missing__(key)

    def __missing__(self, key: Any) -> Any:
        return self.default_for(key)

    def default_for(self, key: Any) -> Any:
        """
        Resolve the value for key[...] when a lookup misses.

        Returns the stored value if the canonical key is present, otherwise
        whatever the host store does for a missing key (a defaultdict
        host calls its factory, a plain dict host raises KeyError).
        """
        canonical = self.convert_key(key)
        if self._regular_contains(canonical):
            return self._regular_getitem(canonical)
        return self._regular_missing(key)

    def get(self, key: Any, default: Any = None) -> Any:
        canonical = self.convert_key(key)
        if self._regular_contains(canonical):
            return self._regular_getitem(canonical)
        return default

    def fetch(
        self,
        key: Any,
        default: Any = _ABSENT,
        on_missing: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        """
        Get a value by key, with an explicit fallback.

        Args:
            key: The key to look up
            default: Returned when the key is absent
            on_missing: Called with the key as given (not normalized) when
                the key is absent and no default was supplied

        Returns:
            The stored value, the default, or on_missing's result

        Raises:
            KeyNotFoundError: If the key is absent and neither fallback
                was supplied
        """
        canonical = self.convert_key(key)
        if self._regular_contains(canonical):
            return self._regular_getitem(canonical)
        if default is not _ABSENT:
            return default
        if on_missing is not None:
            return on_missing(key)
        raise KeyNotFoundError(key)

    def key_exists(self, key: Any) -> bool:
        return self._regular_contains(self.convert_key(key))

    __contains__ = include = member = has_key = key_exists

    def values_at(self, *keys: Any) -> List[Any]:
        """Look up each key in the order given; misses come back as None."""
        return [self.get(key) for key in keys]

    def copy(self) -> Any:
        """Shallow copy that keeps insensitive access."""
        return copy.copy(self)


# =============================================================================
# InsensitiveView — write-through wrapper
# =============================================================================

class InsensitiveView(InsensitiveAccess, MutableMapping):
    """
    Insensitive access over a mapping whose class cannot be changed.

    The view keeps a reference to the wrapped mapping. Keys are re-keyed in
    the wrapped mapping itself and every write goes straight through, so
    other holders of the mapping see the same (canonical) contents.

    Use inject() rather than constructing views directly.
    """

    __slots__ = ("_data", "key_normalizer")

    def __init__(
        self,
        data: MutableMapping,
        key_normalizer: KeyNormalizer = casefold_key,
        *,
        convert: bool = True,
    ):
        self._data = data
        self.key_normalizer = key_normalizer
        if convert:
            self.convert()

    @property
    def data(self) -> MutableMapping:
        """The wrapped mapping."""
        return self._data

    def _regular_setitem(self, key: Any, value: Any) -> None:
        self._data[key] = value

    def _regular_getitem(self, key: Any) -> Any:
        return self._data[key]

    def _regular_delitem(self, key: Any) -> None:
        del self._data[key]

    def _regular_contains(self, key: Any) -> bool:
        return key in self._data

    def _regular_keys(self) -> List[Any]:
        return list(self._data.keys())

    def _regular_missing(self, key: Any) -> Any:
        missing = getattr(self._data, "__missing__", None)
        if missing is None:
            raise KeyError(key)
        canonical = self.convert_key(key)
        value = missing(canonical)
        if canonical in self._data:
            # the wrapped mapping stored the raw default
            self[canonical] = self._data[canonical]
            return self._data[canonical]
        return value

    def __iter__(self) -> Iterator[Any]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def copy(self) -> "InsensitiveView":
        return InsensitiveView(
            copy.copy(self._data),
            key_normalizer=self.key_normalizer,
            convert=False,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"


# =============================================================================
# Injection
# =============================================================================

def _retrofit_class(host: type, key_normalizer: KeyNormalizer) -> type:
    """Return the cached InsensitiveAccess subclass of host for key_normalizer."""
    cache_key = (host, key_normalizer)
    retrofit = _RETROFIT_CLASSES.get(cache_key)
    if retrofit is None:
        retrofit = type(
            f"Insensitive{host.__name__}",
            (InsensitiveAccess, host),
            {
                "__slots__": (),
                "__module__": host.__module__,
                "key_normalizer": staticmethod(key_normalizer),
            },
        )
        _RETROFIT_CLASSES[cache_key] = retrofit
        logger.debug("Created retrofit class %s for %s", retrofit.__name__, host.__qualname__)
    return retrofit


def _has_dict_storage(host: type) -> bool:
    """True if host stores, iterates and merges exactly the way dict does."""
    return all(getattr(host, name) is getattr(dict, name) for name in _DICT_STORAGE_METHODS)


def _retrofit(value: dict, key_normalizer: KeyNormalizer) -> bool:
    """Switch value to its retrofit class. False if its type does not allow it."""
    host = type(value)
    if host in _FIXED_CLASS_HOSTS:
        return False
    if not _has_dict_storage(host):
        _FIXED_CLASS_HOSTS.add(host)
        logger.debug("%s has its own storage methods, using InsensitiveView", host.__qualname__)
        return False
    try:
        value.__class__ = _retrofit_class(host, key_normalizer)
    except TypeError:
        _RETROFIT_CLASSES.pop((host, key_normalizer), None)
        _FIXED_CLASS_HOSTS.add(host)
        logger.debug("%s does not allow class assignment, using InsensitiveView", host.__qualname__)
        return False
    return True


def _inject(value: MutableMapping, key_normalizer: KeyNormalizer, seen: _Seen) -> Any:
    if isinstance(value, dict) and _retrofit(value, key_normalizer):
        target = value
    else:
        target = InsensitiveView(value, key_normalizer, convert=False)
    seen[id(value)] = (value, target)
    return target.convert(seen)


def inject(value: Any, key_normalizer: Union[str, KeyNormalizer] = casefold_key) -> Any:
    """
    Give an existing mapping insensitive access, in place.

    Idempotent: a value that already supports insensitive access is
    returned untouched. Nested mappings and lists are processed too.

    Each (type, normalizer) pair creates one cached class for the life of
    the process, so pass a module-level normalizer or a registered name
    rather than a fresh lambda per call.

    Args:
        value: The mapping to inject
        key_normalizer: Normalizer (or its registered name) to use

    Returns:
        value itself for dict subclasses that keep dict's storage methods,
        otherwise an InsensitiveView wrapping value

    Raises:
        NotConvertibleError: If value is not a mutable mapping
    """
    if supports_insensitive_access(value):
        return value
    if not isinstance(value, MutableMapping):
        raise NotConvertibleError(value)
    return _inject(value, get_normalizer(key_normalizer), {})


def inject_copy(value: Any, key_normalizer: Union[str, KeyNormalizer] = casefold_key) -> Any:
    """
    Inject insensitive access into a shallow copy of value.

    The original mapping is left as it was. Nested values are shared with
    the original, as with any shallow copy, and are injected in place.
    """
    if not isinstance(value, MutableMapping):
        raise NotConvertibleError(value)
    if supports_insensitive_access(value):
        return value.copy()
    return inject(copy.copy(value), key_normalizer)
