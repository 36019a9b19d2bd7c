"""Main CLI entry point for csnav."""

import json
import logging
import sys
from typing import Callable

import click
from rich.console import Console

from .config import Config
from .errors import NavigatorError
from .models import Record
from .navigator import Navigator


def _configure_logging(config: Config, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _emit(record: Record, pretty: bool) -> None:
    payload = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
    if pretty:
        Console().print_json(payload)
    else:
        click.echo(payload)


def _run(command: str, pretty: bool, verbose: bool, query: Callable[[Navigator], Record]) -> None:
    """Run one query and write its record, or an error record with exit code 1."""
    config = Config.from_env()
    _configure_logging(config, verbose)
    navigator = Navigator(config=config)
    try:
        result = query(navigator)
    except NavigatorError as exc:
        _emit(exc.to_result(f"{command.replace('-', '_')}_error"), pretty)
        sys.exit(1)
    _emit(result, pretty)


def output_options(func):
    func = click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")(func)
    func = click.option("--pretty", is_flag=True, help="Highlight JSON output")(func)
    return func


def solution_option(func):
    return click.option(
        "--solution", "-s", required=True, type=click.Path(), help="Path to a .sln, .csproj or source directory"
    )(func)


@click.group()
@click.version_option(package_name="csnav")
def cli():
    """csnav - Semantic navigation for C# solutions."""
    pass


@cli.command("find-symbol")
@solution_option
@click.option("--name", "-n", required=True, help="Symbol name to find")
@click.option("--kind", "-k", help="class, struct, interface, record, enum, method, property, field or any")
@output_options
def find_symbol(solution: str, name: str, kind: str | None, pretty: bool, verbose: bool):
    """Locate every declaration with a given name."""
    _run("find-symbol", pretty, verbose, lambda nav: nav.find_symbol(solution, name, kind))


@cli.command("find-usages")
@solution_option
@click.option("--symbol", required=True, help="Symbol name, e.g. ClassName.MethodName")
@click.option("--pattern", "-p", help="Only keep usages whose source line contains this text")
@output_options
def find_usages(solution: str, symbol: str, pattern: str | None, pretty: bool, verbose: bool):
    """Find where a method, property or class is referenced."""
    _run("find-usages", pretty, verbose, lambda nav: nav.find_usages(solution, symbol, pattern))


@cli.command("find-callers")
@solution_option
@click.option("--symbol", required=True, help="Method name, e.g. ClassName.MethodName")
@output_options
def find_callers(solution: str, symbol: str, pretty: bool, verbose: bool):
    """Find call sites of a method."""
    _run("find-callers", pretty, verbose, lambda nav: nav.find_callers(solution, symbol))


@cli.command("find-instantiations")
@solution_option
@click.option("--class", "class_name", required=True, help="Class name")
@output_options
def find_instantiations(solution: str, class_name: str, pretty: bool, verbose: bool):
    """Find where a type is constructed with new."""
    _run("find-instantiations", pretty, verbose, lambda nav: nav.find_instantiations(solution, class_name))


@cli.command("find-implementations")
@solution_option
@click.option("--interface", "interface", required=True, help="Interface name")
@output_options
def find_implementations(solution: str, interface: str, pretty: bool, verbose: bool):
    """Find classes, structs and records implementing an interface."""
    _run("find-implementations", pretty, verbose, lambda nav: nav.find_implementations(solution, interface))


@cli.command("get-hierarchy")
@solution_option
@click.option("--class", "class_name", required=True, help="Class name")
@output_options
def get_hierarchy(solution: str, class_name: str, pretty: bool, verbose: bool):
    """Show base types, interfaces and derived types of a class."""
    _run("get-hierarchy", pretty, verbose, lambda nav: nav.get_hierarchy(solution, class_name))


@cli.command("find-by-attribute")
@solution_option
@click.option("--attribute", "-a", required=True, help="Attribute name, with or without the Attribute suffix")
@click.option("--pattern", "-p", help="Text the attribute must contain")
@output_options
def find_by_attribute(solution: str, attribute: str, pattern: str | None, pretty: bool, verbose: bool):
    """Find declarations carrying an attribute."""
    _run("find-by-attribute", pretty, verbose, lambda nav: nav.find_by_attribute(solution, attribute, pattern))


@cli.command("find-step-definition")
@solution_option
@click.option("--pattern", "-p", required=True, help="Text the step expression must contain")
@output_options
def find_step_definition(solution: str, pattern: str, pretty: bool, verbose: bool):
    """Find Given/When/Then step bindings."""
    _run("find-step-definition", pretty, verbose, lambda nav: nav.find_step_definitions(solution, pattern))


@cli.command("get-constructor-deps")
@solution_option
@click.option("--class", "class_name", required=True, help="Class name")
@output_options
def get_constructor_deps(solution: str, class_name: str, pretty: bool, verbose: bool):
    """List constructor parameters and typed members of a class."""
    _run("get-constructor-deps", pretty, verbose, lambda nav: nav.get_constructor_deps(solution, class_name))


@cli.command("find-interface-consumers")
@solution_option
@click.option("--interface", "interface", required=True, help="Interface name")
@output_options
def find_interface_consumers(solution: str, interface: str, pretty: bool, verbose: bool):
    """Find implementations of an interface and where it is injected."""
    _run(
        "find-interface-consumers", pretty, verbose, lambda nav: nav.find_interface_consumers(solution, interface)
    )


@cli.command("list-feature-scenarios")
@click.option("--path", "path", required=True, type=click.Path(), help="Directory to scan for feature files")
@output_options
def list_feature_scenarios(path: str, pretty: bool, verbose: bool):
    """List features and scenarios in BDD feature files."""
    _run("list-feature-scenarios", pretty, verbose, lambda nav: nav.list_feature_scenarios(path))


@cli.command("list-class")
@solution_option
@click.option("--file", "file_path", required=True, help="Path to the .cs file")
@click.option("--class", "class_name", required=True, help="Class name")
@output_options
def list_class(solution: str, file_path: str, class_name: str, pretty: bool, verbose: bool):
    """Show the members of a class in a file."""
    _run("list-class", pretty, verbose, lambda nav: nav.list_class(solution, file_path, class_name))


@cli.command("get-method")
@solution_option
@click.option("--method", "-m", required=True, help="Method name")
@click.option("--class", "class_name", help="Containing class name")
@click.option("--file", "file_path", help="Path to the .cs file")
@output_options
def get_method(
    solution: str, method: str, class_name: str | None, file_path: str | None, pretty: bool, verbose: bool
):
    """Read one method's signature and source."""
    _run("get-method", pretty, verbose, lambda nav: nav.get_method(solution, method, class_name, file_path))


@cli.command("get-methods")
@solution_option
@click.option("--class", "class_name", required=True, help="Class name")
@click.option("--methods", required=True, help="Comma-separated method names")
@output_options
def get_methods(solution: str, class_name: str, methods: str, pretty: bool, verbose: bool):
    """Read several methods of one class."""
    _run("get-methods", pretty, verbose, lambda nav: nav.get_methods(solution, class_name, methods))


@cli.command("list-classes")
@solution_option
@click.option("--namespace", "namespace", required=True, help="Namespace, including nested namespaces")
@output_options
def list_classes(solution: str, namespace: str, pretty: bool, verbose: bool):
    """List the types in a namespace."""
    _run("list-classes", pretty, verbose, lambda nav: nav.list_classes(solution, namespace))


@cli.command("get-namespace-structure")
@solution_option
@click.option("--project", required=True, help="Project name")
@output_options
def get_namespace_structure(solution: str, project: str, pretty: bool, verbose: bool):
    """Show a project's namespaces and their types."""
    _run("get-namespace-structure", pretty, verbose, lambda nav: nav.get_namespace_structure(solution, project))


@cli.command("check-overridable")
@solution_option
@click.option("--class", "class_name", required=True, help="Class name")
@click.option("--method", "-m", required=True, help="Method name")
@output_options
def check_overridable(solution: str, class_name: str, method: str, pretty: bool, verbose: bool):
    """Check whether a method can be overridden."""
    _run("check-overridable", pretty, verbose, lambda nav: nav.check_overridable(solution, class_name, method))


if __name__ == "__main__":
    cli()
