"""Formula registry.

A formula binds a package name to the sanity check that decides whether
an installed version directory is functional.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from broth.core.errors import FormulaNotFoundError
from broth.formulas.probes import SanityCheck, binary_probe


@dataclass(frozen=True)
class Formula:
    """How to validate one package."""

    name: str
    sanity_check: SanityCheck


class FormulaRegistry:
    """Maps package names to formulas."""

    def __init__(self, formulas: Optional[Sequence[Formula]] = None) -> None:
        self._formulas: Dict[str, Formula] = {}
        for formula in formulas or ():
            self.register(formula)

    def register(self, formula: Formula) -> None:
        """Register a formula, replacing any previous one with the same name."""
        self._formulas[formula.name] = formula

    def register_binary(self, name: str, binary: str, args: Sequence[str] = ()) -> Formula:
        """Register a formula whose sanity check runs ``binary args``."""
        formula = Formula(name=name, sanity_check=binary_probe(binary, *args))
        self.register(formula)
        return formula

    def get(self, name: str) -> Formula:
        """Look up the formula of a package.

        Raises:
            FormulaNotFoundError: If no formula is registered for the name.
        """
        try:
            return self._formulas[name]
        except KeyError:
            raise FormulaNotFoundError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._formulas

    def names(self) -> List[str]:
        return sorted(self._formulas)

    def copy(self) -> "FormulaRegistry":
        return FormulaRegistry(list(self._formulas.values()))


def default_registry() -> FormulaRegistry:
    """Registry holding the built-in formulas."""
    from broth.formulas.builtin import BUILTIN_FORMULAS

    return FormulaRegistry(BUILTIN_FORMULAS)


__all__ = [
    "Formula",
    "FormulaRegistry",
    "SanityCheck",
    "binary_probe",
    "default_registry",
]
