"""
records.py

Insensitive construction for dataclass records.

A dataclass opts in with an explicit registration call; afterwards it can
be built from a mapping whose keys match its field names in any case.

Example:
    @insensitive_record
    @dataclass(frozen=True)
    class Endpoint:
        host: str
        port: int = 80

    Endpoint.from_mapping({"HOST": "example.org", "Port": 8080})
"""

import dataclasses
import logging
from collections.abc import Mapping
from typing import Any, Dict, Optional, Type, TypeVar, Union

from insensitive_access.access import inject
from insensitive_access.errors import (
    NotConvertibleError,
    RecordRegistrationError,
    UnknownRecordFieldError,
)
from insensitive_access.keys import KeyNormalizer, casefold_key, get_normalizer

logger = logging.getLogger(__name__)

R = TypeVar("R")

_RECORD_TYPES: Dict[type, KeyNormalizer] = {}


def register_record_type(
    record_type: Type[R],
    key_normalizer: Union[str, KeyNormalizer] = casefold_key,
) -> Type[R]:
    """
    Register a dataclass for insensitive construction.

    Args:
        record_type: A dataclass type
        key_normalizer: Normalizer (or its registered name) matching keys
            to field names

    Returns:
        record_type, unchanged

    Raises:
        RecordRegistrationError: If record_type is not a dataclass type
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise RecordRegistrationError(record_type, "is not a dataclass type")
    _RECORD_TYPES[record_type] = get_normalizer(key_normalizer)
    logger.debug("Registered insensitive record type %s", record_type.__qualname__)
    return record_type


def is_registered_record_type(record_type: Any) -> bool:
    return record_type in _RECORD_TYPES


def build_record(record_type: Type[R], data: Any) -> R:
    """
    Build a registered record from a mapping, matching keys to fields in
    any case.

    The mapping is copied; nested mappings in it gain insensitive access.

    Raises:
        RecordRegistrationError: If record_type was never registered
        NotConvertibleError: If data is not a mapping
        UnknownRecordFieldError: If a key matches no init field
        TypeError: If a required field is missing (raised by the dataclass)
    """
    try:
        key_normalizer = _RECORD_TYPES[record_type]
    except KeyError:
        raise RecordRegistrationError(
            record_type, "is not registered as an insensitive record"
        ) from None
    if not isinstance(data, Mapping):
        raise NotConvertibleError(data)

    source = inject(dict(data), key_normalizer)
    fields = {
        key_normalizer(field.name): field.name
        for field in dataclasses.fields(record_type)
        if field.init
    }
    unknown = [key for key in source if key not in fields]
    if unknown:
        raise UnknownRecordFieldError(record_type, unknown)

    return record_type(**{fields[key]: value for key, value in source.items()})


def insensitive_record(
    record_type: Optional[type] = None,
    *,
    key_normalizer: Union[str, KeyNormalizer] = casefold_key,
) -> Any:
    """
    Class decorator form of register_record_type.

    Also attaches a ``from_mapping(data)`` classmethod. Apply it above
    ``@dataclass``. Usable bare or as ``@insensitive_record(key_normalizer=...)``.
    """
    def decorate(cls: type) -> type:
        register_record_type(cls, key_normalizer)
        cls.from_mapping = classmethod(build_record)
        return cls

    if record_type is None:
        return decorate
    return decorate(record_type)
