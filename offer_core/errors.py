from __future__ import annotations
from typing import Iterable, List


class ValidationError(ValueError):
    """Input failed the completeness check; nothing was scored."""

    def __init__(self, message: str = "incomplete input", fields: Iterable[str] = ()):
        self.fields: List[str] = list(fields)
        detail = f"{message}: {', '.join(self.fields)}" if self.fields else message
        super().__init__(detail)
        self.message = message


class ConfigurationDefect(LookupError):
    """An enumerated value has no entry in a category table. Build defect, never user input."""

    def __init__(self, table: str, value: object):
        self.table = table
        self.value = value
        super().__init__(f"{table}: no entry for {value!r}")
