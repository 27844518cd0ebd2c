"""
insensitive_access — Case-Insensitive Mappings
===============================================

insensitive_access gives mappings case-insensitive keys: ``d["Foo"]``,
``d["FOO"]`` and ``d["foo"]`` all reach the same entry. Nested mappings
stored in a container (directly or inside lists) become insensitive too,
in place, without copying them.

Stability Guarantees (v1.x)
---------------------------
All symbols exported from this module are part of the **public API**
and follow semantic versioning. Anything prefixed with an underscore,
and the ``_regular_*`` host store primitives, are internal.

Example
-------
::

    from insensitive_access import InsensitiveDict, inject

    config = InsensitiveDict({"Database": {"Host": "db.local"}})
    assert config["DATABASE"]["host"] == "db.local"

    class Payload(dict):
        pass

    payload = inject(Payload({"ID": 7}))
    assert payload["id"] == 7
    assert isinstance(payload, Payload)
"""

__version__ = "1.0.0"

# =============================================================================
# PUBLIC API — All symbols below are stable for v1.x
# =============================================================================

__all__ = [
    # --- Package Metadata ---
    "__version__",

    # --- Containers ---
    "InsensitiveAccess",
    "InsensitiveDict",
    "InsensitiveDefaultDict",
    "InsensitiveView",

    # --- Conversion ---
    "inject",
    "inject_copy",
    "try_convert",
    "supports_insensitive_access",

    # --- Key Normalizers ---
    "KeyNormalizer",
    "casefold_key",
    "lower_key",
    "nfkc_casefold_key",
    "get_normalizer",

    # --- Records ---
    "register_record_type",
    "is_registered_record_type",
    "build_record",
    "insensitive_record",

    # --- Logging ---
    "set_logging_level",
    "enable_console_logging",

    # --- Exceptions ---
    "InsensitiveAccessError",
    "KeyNotFoundError",
    "NotConvertibleError",
    "UnknownNormalizerError",
    "RecordRegistrationError",
    "UnknownRecordFieldError",
]

# =============================================================================
# IMPORTS
# =============================================================================

from insensitive_access.logger import enable_console_logging, set_logging_level
from insensitive_access.errors import (
    InsensitiveAccessError,
    KeyNotFoundError,
    NotConvertibleError,
    RecordRegistrationError,
    UnknownNormalizerError,
    UnknownRecordFieldError,
)
from insensitive_access.keys import (
    KeyNormalizer,
    casefold_key,
    get_normalizer,
    lower_key,
    nfkc_casefold_key,
)
from insensitive_access.access import (
    InsensitiveAccess,
    InsensitiveView,
    inject,
    inject_copy,
    supports_insensitive_access,
)
from insensitive_access.containers import (
    InsensitiveDefaultDict,
    InsensitiveDict,
    try_convert,
)
from insensitive_access.records import (
    build_record,
    insensitive_record,
    is_registered_record_type,
    register_record_type,
)
