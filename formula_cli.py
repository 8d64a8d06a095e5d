"""
Formula CLI.

Inspect and exercise the registered formulae without the Installer:

    formula-cli plan postgis@16 --platform linux
    formula-cli livecheck
    formula-cli service postgresql@16 --format systemd
    formula-cli test postgresql@16 postgis@16
    formula-cli validate-env

`plan` prints JSON (layout overrides, environment changes, build commands);
the other commands print tables. Exit status is 1 when anything failed.
"""

import argparse
import json
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config import get_config
from config.env_validation import validate_environment
from core.models.enums import BuildPhase
from exceptions import BusinessLogicError
from formulae import ALL_FORMULAE, build_order, get_formula_class, validate_formula_registry
from infrastructure.build_environment import BuildEnvironment
from infrastructure.installer_context import InstallerContext
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.CLI, "formula_cli")

console = Console()


def _context(args) -> InstallerContext:
    installer = get_config().installer
    if getattr(args, "platform", None):
        installer = installer.model_copy(update={"host_platform": args.platform})
    return InstallerContext(installer, head=getattr(args, "head", False))


def build_plan(name: str, context: InstallerContext) -> dict:
    """Everything install() would do for name, without running it."""
    formula_class = get_formula_class(name)
    formula = formula_class(context, env=BuildEnvironment({}))
    formula.prepare_environment()

    layouts = {}
    if hasattr(formula, "layout"):
        layouts = {
            phase.value: formula.layout(phase).as_dict() for phase in BuildPhase
        }
    elif hasattr(formula, "install_layout"):
        layouts = {BuildPhase.INSTALL.value: formula.install_layout().as_dict()}

    return {
        "formula": name,
        "version": formula.package.version,
        "pkg_version": formula.package.pkg_version,
        "keg": str(formula.prefix),
        "platform": context.host_platform,
        "head": context.head,
        "dependencies": formula.dependency_names(),
        "build_order": build_order([name], context.host_platform),
        "layout": layouts,
        "environment": formula.env.to_dict(),
        "commands": [[str(a) for a in argv] for argv in formula.build_commands()],
    }


def cmd_plan(args) -> int:
    context = _context(args)
    plan = build_plan(args.formula, context)
    console.print_json(json.dumps(plan))
    return 0


def cmd_livecheck(args) -> int:
    from services.livecheck_service import LivecheckService

    names = args.formulae or list(ALL_FORMULAE)
    table = Table(title="Livecheck")
    table.add_column("Formula")
    table.add_column("Current")
    table.add_column("Latest")
    table.add_column("Status")

    failed = False
    with LivecheckService() as service:
        for name in names:
            formula_class = get_formula_class(name)
            try:
                result = service.check(formula_class)
            except BusinessLogicError as e:
                failed = True
                table.add_row(name, formula_class.package.version, "-", f"[red]{escape(str(e))}[/]")
                continue
            status = "[yellow]outdated[/]" if result.outdated else "[green]up to date[/]"
            table.add_row(name, result.current, result.latest or "-", status)

    console.print(table)
    return 1 if failed else 0


def cmd_service(args) -> int:
    formula = get_formula_class(args.formula)(_context(args))
    descriptor = formula.service()
    if descriptor is None:
        console.print(f"[red]{args.formula} does not define a service[/]")
        return 1
    if args.format == "launchd":
        sys.stdout.write(descriptor.to_launchd_plist(formula.name).decode("utf-8"))
    else:
        sys.stdout.write(descriptor.to_systemd_unit(formula.name))
    return 0


def cmd_test(args) -> int:
    from services.formula_builder import run_smoke_tests

    outcomes = run_smoke_tests(args.formulae or None, _context(args))
    table = Table(title="Smoke tests")
    table.add_column("Formula")
    table.add_column("Result")
    table.add_column("Error")
    for outcome in outcomes:
        result = "[green]passed[/]" if outcome.passed else "[red]failed[/]"
        table.add_row(outcome.formula, result, escape(outcome.error or ""))
    console.print(table)
    return 0 if all(o.passed for o in outcomes) else 1


def cmd_validate_env(args) -> int:
    results = validate_environment(include_warnings=not args.errors_only)
    errors = [r for r in results if r.is_error]

    if not results:
        console.print("[green]Environment OK[/]")
        return 0

    table = Table(title="Environment")
    table.add_column("Variable")
    table.add_column("Severity")
    table.add_column("Value")
    table.add_column("Fix")
    for result in results:
        colour = "red" if result.is_error else "yellow"
        table.add_row(
            result.var_name,
            f"[{colour}]{result.severity}[/]",
            escape(result.display_value or ""),
            result.fix_suggestion,
        )
    console.print(table)
    return 1 if errors else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-cli",
        description="Inspect the postgresql@16 / postgis@16 formulae",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    plan = sub.add_parser("plan", help="Print layout overrides and build commands as JSON")
    plan.add_argument("formula", choices=sorted(ALL_FORMULAE))
    plan.add_argument("--platform", choices=["macos", "linux"], default=None,
                      help="Host platform to plan for (default: detected)")
    plan.add_argument("--head", action="store_true", help="Plan a development-branch build")
    plan.set_defaults(func=cmd_plan)

    livecheck = sub.add_parser("livecheck", help="Look for newer upstream releases")
    livecheck.add_argument("formulae", nargs="*", help="Formula names (default: all)")
    livecheck.set_defaults(func=cmd_livecheck)

    service = sub.add_parser("service", help="Render a formula's service definition")
    service.add_argument("formula", choices=sorted(ALL_FORMULAE))
    service.add_argument("--format", choices=["launchd", "systemd"], default="launchd")
    service.set_defaults(func=cmd_service)

    test = sub.add_parser("test", help="Run smoke tests against installed kegs")
    test.add_argument("formulae", nargs="*", help="Formula names (default: all)")
    test.set_defaults(func=cmd_test)

    validate = sub.add_parser("validate-env", help="Check HOMEBREW_* / FORMULA_* variables")
    validate.add_argument("--errors-only", action="store_true", help="Hide default-value warnings")
    validate.set_defaults(func=cmd_validate_env)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    validate_formula_registry()
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except BusinessLogicError as e:
        logger.error(f"{args.command} failed: {e}")
        console.print(f"[red]{escape(str(e))}[/]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
