from __future__ import annotations

from dataclasses import dataclass, field

from ..exceptions import ConfigurationError
from .sheet import Sheet
from .validation import ValidationRule

"""StatementBook: the set of statement definitions a report is built from.

An alias names an additional resolution pass over an existing definition
(e.g. ``income_statement_ytd`` resolves the income statement template with
year-to-date figures). Rules may reference sheets by name or alias.
"""

__all__ = [
    "StatementBook",
]


@dataclass(frozen=True)
class StatementBook:
    sheets: dict[str, Sheet]
    rules: tuple[ValidationRule, ...] = ()
    aliases: dict[str, str] = field(default_factory=dict)  # alias -> sheet name

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(self.rules))
        for alias, target in self.aliases.items():
            if target not in self.sheets:
                raise ConfigurationError(f"alias '{alias}' points at unknown sheet '{target}'")
            if alias in self.sheets:
                raise ConfigurationError(f"alias '{alias}' shadows a sheet of the same name")
        seen: set[str] = set()
        for rule in self.rules:
            if rule.id in seen:
                raise ConfigurationError(f"duplicate validation rule id '{rule.id}'")
            seen.add(rule.id)

    def sheet_for(self, name: str) -> Sheet | None:
        """Definition used to resolve ``name`` (a sheet name or an alias)."""
        if name in self.sheets:
            return self.sheets[name]
        target = self.aliases.get(name)
        return self.sheets[target] if target else None

    @property
    def pass_names(self) -> list[str]:
        """Every name a resolution pass can be stored under, sheets first."""
        return list(self.sheets) + list(self.aliases)
