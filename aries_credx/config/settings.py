"""Settings implementation."""

from typing import Mapping

from .base import BaseSettings

DEFAULT_SETTINGS = {
    "encoding.backend": "field_element",
    "encoding.digest": "sha256",
    "encoding.int_bits": 64,
}


class Settings(BaseSettings):
    """Mutable settings implementation."""

    def __init__(self, values: Mapping[str, object] = None):
        """Initialize a Settings object.

        Args:
            values: An optional dictionary of settings
        """
        self._values = dict(DEFAULT_SETTINGS)
        if values:
            self._values.update(values)

    def get_value(self, *var_names, default=None):
        """Fetch a setting, trying each name in turn."""
        for k in var_names:
            if k in self._values:
                return self._values[k]
        return default

    def set_value(self, var_name: str, value):
        """Add a setting.

        Args:
            var_name: The name of the setting
            value: The value to assign
        """
        if not isinstance(var_name, str):
            raise TypeError("Setting name must be a string")
        if not var_name:
            raise ValueError("Setting name must be non-empty")
        self._values[var_name] = value

    def __contains__(self, index):
        """Define 'in' operator."""
        return index in self._values

    def __iter__(self):
        """Iterate settings keys."""
        return iter(self._values)

    def __setitem__(self, index, value):
        """Implement update operator for array index."""
        self.set_value(index, value)

    def __len__(self):
        """Fetch the length of the mapping."""
        return len(self._values)
