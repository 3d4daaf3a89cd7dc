"""Built-in formulas."""

from __future__ import annotations

from broth.formulas import Formula
from broth.formulas.probes import binary_probe

BUILTIN_FORMULAS = [
    Formula(name="butler", sanity_check=binary_probe("butler", "-V")),
    Formula(name="itch-setup", sanity_check=binary_probe("itch-setup", "--version")),
]
