"""
Formula Registry - Explicit formula registration.

All formulae are registered here explicitly. No decorators, no
auto-discovery. If it's not in ALL_FORMULAE, it's not registered.

Registration Process:
    1. Create your formula class in formulae/your_formula.py
    2. Import it at the top of this file
    3. Add entry to ALL_FORMULAE dict, keyed by the formula name
    4. Done

Exports:
    ALL_FORMULAE: Dict mapping formula name to formula class
    FormulaBase: Abstract base class for formulae
    get_formula_class: Look up a formula class by name
    validate_formula_registry: Check every registered class on startup
    build_order: Registered formulae ordered dependencies-first
"""

from typing import Iterable, List, Optional

from exceptions import ContractViolationError, ResourceNotFoundError

from .base import FormulaBase
from .postgresql_at_16 import PostgresqlAt16
from .postgis_at_16 import PostgisAt16


ALL_FORMULAE = {
    "postgresql@16": PostgresqlAt16,
    "postgis@16": PostgisAt16,
}


def validate_formula_registry():
    """
    Validate all formulae in registry.

    Validates:
        1. Registry key equals the class's formula name
        2. Required metadata attributes are present
        3. install/test are implemented (no abstract methods left)

    Raises:
        ContractViolationError: If a formula class breaks the contract
    """
    REQUIRED_ATTRIBUTES = ['package', 'desc', 'homepage', 'license', 'source']

    for name, formula_class in ALL_FORMULAE.items():
        missing = [attr for attr in REQUIRED_ATTRIBUTES if not hasattr(formula_class, attr)]
        if missing:
            raise ContractViolationError(
                f"Formula {name} ({formula_class.__name__}) missing required "
                f"attributes: {', '.join(missing)}"
            )

        if formula_class.formula_name() != name:
            raise ContractViolationError(
                f"Formula registered as {name!r} but declares {formula_class.formula_name()!r}"
            )

        abstract = getattr(formula_class, '__abstractmethods__', frozenset())
        if abstract:
            raise ContractViolationError(
                f"Formula {name} does not implement: {', '.join(sorted(abstract))}"
            )

    return True


def get_formula_class(name: str):
    """
    Get formula class by name.

    Args:
        name: Formula name, e.g. "postgis@16"

    Returns:
        Formula class

    Raises:
        ResourceNotFoundError: If name is not registered
    """
    if name not in ALL_FORMULAE:
        available = ', '.join(sorted(ALL_FORMULAE))
        raise ResourceNotFoundError(f"Unknown formula: {name}. Available: {available}")
    return ALL_FORMULAE[name]


def build_order(names: Optional[Iterable[str]] = None, platform: str = "macos") -> List[str]:
    """
    Order formulae so every registered dependency comes first.

    Only dependencies that are themselves registered take part; everything
    else is the Installer's business. Requested formulae pull in their
    registered dependencies.

    Raises:
        ResourceNotFoundError: Unknown formula name
        ContractViolationError: Dependency cycle among registered formulae
    """
    requested = list(ALL_FORMULAE) if names is None else list(names)
    ordered: List[str] = []
    visiting: List[str] = []

    def visit(name: str) -> None:
        if name in ordered:
            return
        if name in visiting:
            cycle = " -> ".join(visiting[visiting.index(name):] + [name])
            raise ContractViolationError(f"Dependency cycle: {cycle}")
        formula_class = get_formula_class(name)
        visiting.append(name)
        for dep in formula_class.active_dependencies(platform):
            if dep.name in ALL_FORMULAE:
                visit(dep.name)
        visiting.pop()
        ordered.append(name)

    for name in requested:
        visit(name)
    return ordered


__all__ = [
    'ALL_FORMULAE',
    'FormulaBase',
    'PostgresqlAt16',
    'PostgisAt16',
    'get_formula_class',
    'validate_formula_registry',
    'build_order',
]
