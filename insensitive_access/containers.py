"""
containers.py

Ready-made insensitive containers.

InsensitiveDict is a ``dict`` whose keys are case-insensitive; it accepts
every argument ``dict`` accepts. InsensitiveDefaultDict does the same for
``collections.defaultdict``.

Example:
    headers = InsensitiveDict({"Content-Type": "text/plain"}, Accept="*/*")

    assert headers["content-type"] == "text/plain"
    assert headers.values_at("ACCEPT", "missing") == ["*/*", None]
"""

from collections import defaultdict
from collections.abc import Mapping
from typing import Any, Optional

from insensitive_access.access import InsensitiveAccess


def _convert(cls: type, candidate: Any) -> Any:
    if not isinstance(candidate, Mapping):
        return None
    converted = cls()
    converted.update(candidate)
    return converted


class InsensitiveDict(InsensitiveAccess, dict):
    """
    A dict with case-insensitive keys.

    Keys are stored in canonical (casefolded) form. Nested dicts and lists
    of dicts stored in it become insensitive too.

    A nested plain dict is stored as an InsensitiveView over that dict, not
    as the dict itself. ``json.dumps`` does not accept views; serialize
    ``view.data`` or pass ``default=lambda view: view.data``.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.convert()

    @classmethod
    def try_convert(cls, candidate: Any) -> Optional["InsensitiveDict"]:
        """
        Build a new container from candidate if it is a mapping.

        Returns:
            A new instance of cls, or None if candidate is not a mapping
        """
        return _convert(cls, candidate)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"


class InsensitiveDefaultDict(InsensitiveAccess, defaultdict):
    """
    A defaultdict with case-insensitive keys.

    Missing keys are filled in by ``default_factory`` under their canonical
    form, and the stored default is processed like any other value.
    """

    def __init__(self, default_factory: Any = None, *args: Any, **kwargs: Any):
        super().__init__(default_factory, *args, **kwargs)
        self.convert()

    @classmethod
    def try_convert(cls, candidate: Any) -> Optional["InsensitiveDefaultDict"]:
        """Like InsensitiveDict.try_convert; the result has no default_factory."""
        return _convert(cls, candidate)


def try_convert(candidate: Any) -> Optional[InsensitiveDict]:
    """
    Convert candidate to an InsensitiveDict, or return None.

    Never raises for non-mapping input.
    """
    return InsensitiveDict.try_convert(candidate)
