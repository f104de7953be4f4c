"""Field lookup on structured reference records."""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Tuple
import pandas as pd

FieldLookup = Tuple[bool, Any]


class FieldAccessor(ABC):
    """Base class for looking up named fields on a reference record."""

    @abstractmethod
    def get_field(self, name: str) -> FieldLookup:
        """
        Look up a field by name.

        Args:
            name: Field name (matched case-insensitively)

        Returns:
            Tuple[bool, Any]: Whether the field exists, and its value
        """
        pass

    def get_text(self, name: str) -> Tuple[bool, str]:
        """Look up a field and project its value to text."""
        found, value = self.get_field(name)
        if not found:
            return False, ''
        if value is None or (not isinstance(value, str) and _is_scalar_null(value)):
            return True, ''
        return True, str(value)


def _is_scalar_null(value: Any) -> bool:
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _find_key(keys, name: str):
    """Return the first key equal to name ignoring case, else None."""
    if name in keys:
        return name
    lowered = name.lower()
    for key in keys:
        if isinstance(key, str) and key.lower() == lowered:
            return key
    return None


class MappingAccessor(FieldAccessor):
    """Fields of a dict-like record."""

    def __init__(self, record: Mapping[str, Any]):
        self.record = record

    def get_field(self, name: str) -> FieldLookup:
        key = _find_key(list(self.record.keys()), name)
        if key is None:
            return False, None
        return True, self.record[key]


class SeriesAccessor(FieldAccessor):
    """Fields of a pandas row."""

    def __init__(self, row: pd.Series):
        self.row = row

    def get_field(self, name: str) -> FieldLookup:
        key = _find_key(list(self.row.index), name)
        if key is None:
            return False, None
        return True, self.row[key]


class AttributeAccessor(FieldAccessor):
    """Public attributes and properties of an arbitrary object."""

    def __init__(self, obj: Any):
        self.obj = obj

    def get_field(self, name: str) -> FieldLookup:
        names = [n for n in dir(self.obj) if not n.startswith('_')]
        key = _find_key(names, name)
        if key is None:
            return False, None
        value = getattr(self.obj, key)
        if callable(value):
            return False, None
        return True, value


def accessor_for(reference: Any) -> FieldAccessor:
    """
    Pick a field accessor for a reference record.

    Args:
        reference: FieldAccessor, mapping, pandas Series or plain object

    Returns:
        FieldAccessor: Accessor wrapping the record
    """
    if isinstance(reference, FieldAccessor):
        return reference
    if isinstance(reference, pd.Series):
        return SeriesAccessor(reference)
    if isinstance(reference, Mapping):
        return MappingAccessor(reference)
    return AttributeAccessor(reference)
