"""Command line interface for linktag."""

from __future__ import annotations

import difflib
import re
import shlex
import subprocess
from copy import deepcopy
from dataclasses import dataclass
from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from linktag.collection import LinkCollection
from linktag.config import (
    ConfigError,
    ConfigManager,
    LinktagConfig,
    env_key,
    resolve_with_precedence,
)
from linktag.logging_config import configure_logging
from linktag.scanning import MissingRootError, ScanningError, display_name
from linktag.tagging import AppliedMutation, SkippedMutation, TaggingError

console = Console()


@dataclass(slots=True)
class _Options:
    """Global options captured by the `linktag` group."""

    source: str | None
    tags: str | None
    verbose: bool


def _error_code(exc: Exception) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(exc).__name__).lower()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """
    message = display_name(message)
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool) -> None:
    """Print output unless quiet mode suppresses it (errors always print)."""
    if quiet and mode != "error":
        return
    console.print(display_name(message) if isinstance(message, str) else message)


def _load_config(options: _Options) -> LinktagConfig:
    overrides: dict[str, Any] = {}
    if options.source:
        overrides["roots.source"] = options.source
    if options.tags:
        overrides["roots.tags"] = options.tags
    config = ConfigManager().load(cli_overrides=overrides)
    configure_logging(config.logging, verbose=options.verbose)
    return config


def _open_collection(ctx: click.Context) -> tuple[LinktagConfig, LinkCollection]:
    """Load configuration and bind the configured roots.

    Raises:
        ConfigError: If the configuration is invalid.
        MissingRootError: If a root is missing from options, environment, and config.
        ScanningError: If the roots cannot be resolved or overlap.
    """
    config = _load_config(ctx.find_object(_Options))
    for key, option, value in (
        ("source", "--source", config.roots.source),
        ("tags", "--tags", config.roots.tags),
    ):
        if not value:
            raise MissingRootError(
                f"No {key} root given; pass {option}, set roots.{key}, "
                f"or export {env_key('roots', key)}."
            )
    collection = LinkCollection(config.roots.source, config.roots.tags, config.scan)
    return config, collection


def _fail(exc: Exception, *, json_output: bool) -> None:
    _handle_cli_error(str(exc), code=_error_code(exc), json_output=json_output, original=exc)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="linktag")
@click.option(
    "-s",
    "--source",
    type=click.Path(file_okay=False, path_type=str),
    help="Directory holding the items to tag.",
)
@click.option(
    "-t",
    "--tags",
    "tags_root",
    type=click.Path(file_okay=False, path_type=str),
    help="Directory holding one subdirectory per tag.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, source: str | None, tags_root: str | None, verbose: bool) -> None:
    """linktag organizes files into overlapping tags using symbolic links.

    Each tag is a directory under the tags root; an item carries a tag when
    that directory holds a symlink pointing back at it.

    Item paths may be absolute or relative. A relative path names the entry
    under the source root when one exists, otherwise the entry under the
    current directory.
    """
    ctx.obj = _Options(source=source, tags=tags_root, verbose=verbose)


@cli.command()
@click.option("--json", "json_output", is_flag=True, help="Emit the item listing as JSON.")
@click.pass_context
def items(ctx: click.Context, json_output: bool) -> None:
    """List the items under the source root and the tags they carry."""
    try:
        _, collection = _open_collection(ctx)
        listed = collection.list_items()
        memberships = collection.memberships(listed)
    except (ConfigError, ScanningError) as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={
                "items": [
                    {
                        "name": item.name,
                        "path": display_name(item.path),
                        "is_dir": item.is_dir,
                        "tags": [tag.name for tag in memberships[item.path]],
                    }
                    for item in listed
                ]
            }
        )
        return

    table = Table(title=escape(f"Items in {display_name(collection.source_root)}"))
    table.add_column("Item")
    table.add_column("Tags")
    for item in listed:
        name = f"{item.name}/" if item.is_dir else item.name
        tags = ", ".join(tag.name for tag in memberships[item.path])
        table.add_row(escape(name), escape(tags))
    console.print(table)


@cli.command("tags")
@click.option("--json", "json_output", is_flag=True, help="Emit the tag listing as JSON.")
@click.pass_context
def tags_command(ctx: click.Context, json_output: bool) -> None:
    """List the tags under the tags root."""
    try:
        _, collection = _open_collection(ctx)
        listed = collection.list_tags()
    except (ConfigError, ScanningError) as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={"tags": [{"name": tag.name, "path": display_name(tag.path)} for tag in listed]}
        )
        return

    if not listed:
        console.print("[yellow]No tags yet; create one with `linktag new-tag NAME`.[/yellow]")
        return
    for tag in listed:
        console.print(tag.name, markup=False)


@cli.command()
@click.argument("paths", nargs=-1, required=True)
@click.option("--tag", "tag_names", multiple=True, help="Only report these tags.")
@click.option("--json", "json_output", is_flag=True, help="Emit tag states as JSON.")
@click.pass_context
def status(
    ctx: click.Context,
    paths: tuple[str, ...],
    tag_names: tuple[str, ...],
    json_output: bool,
) -> None:
    """Show whether all, none, or some of the selected items carry each tag.

    [X] every item is tagged, [ ] no item is tagged, [?] the selection is mixed.
    """
    try:
        _, collection = _open_collection(ctx)
        selection = collection.select(paths)
        if tag_names:
            tags = [collection.tag(name) for name in tag_names]
            states = collection.aggregator.aggregate_all(selection, tags)
        else:
            states = collection.aggregate_all(selection)
    except (ConfigError, ScanningError) as exc:
        _fail(exc, json_output=json_output)
        return

    if json_output:
        console.print_json(
            data={
                "selection": [item.name for item in selection],
                "tags": {tag.name: state.value for tag, state in states.items()},
            }
        )
        return

    for tag, state in states.items():
        console.print(f"{state.marker} {tag.name}", markup=False)


@cli.command()
@click.argument("tag_name", metavar="TAG")
@click.argument("paths", nargs=-1, required=True)
@click.option("--json", "json_output", is_flag=True, help="Emit the outcome as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def toggle(
    ctx: click.Context,
    tag_name: str,
    paths: tuple[str, ...],
    json_output: bool,
    quiet: bool,
) -> None:
    """Tag the selected items with TAG, or untag them if they all carry it.

    A mixed selection, where only some items carry TAG, is left unchanged.
    """
    if json_output and quiet:
        raise click.ClickException("--json cannot be combined with --quiet.")

    try:
        config, collection = _open_collection(ctx)
        selection = collection.select(paths)
        tag = collection.tag(tag_name)
        result = collection.toggle(selection, tag)
    except (ConfigError, ScanningError) as exc:
        _fail(exc, json_output=json_output)
        return

    quiet = quiet or config.cli.quiet_default
    failed = isinstance(result, AppliedMutation) and not result.ok

    if json_output:
        console.print_json(data=result.json_payload)
    elif isinstance(result, SkippedMutation):
        _emit_message(
            f"[yellow]Only some of the selected items carry '{escape(tag.name)}'; "
            "nothing changed. Narrow the selection so every item is in the same state.[/yellow]",
            mode="warning",
            quiet=quiet,
        )
    else:
        for item in result.created:
            _emit_message(
                f"[green]+[/green] {escape(tag.name)}/{escape(display_name(item.path.name))}",
                mode="detail",
                quiet=quiet,
            )
        for item in result.removed:
            _emit_message(
                f"[red]-[/red] {escape(tag.name)}/{escape(display_name(item.path.name))}",
                mode="detail",
                quiet=quiet,
            )
        if result.failed:
            _emit_message("[red]Errors encountered:[/red]", mode="error", quiet=quiet)
            for failure in result.failed:
                _emit_message(f"  - {escape(str(failure.error))}", mode="error", quiet=quiet)
        verb = "Tagged" if result.action == "tag" else "Untagged"
        changed = len(result.created) + len(result.removed)
        _emit_message(
            f"[green]{verb} {changed} item(s) with '{escape(tag.name)}' "
            f"({len(result.unchanged)} unchanged, {len(result.failed)} failed).[/green]",
            mode="summary",
            quiet=quiet,
        )

    if failed:
        ctx.exit(1)


@cli.command("new-tag")
@click.argument("name")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def new_tag(ctx: click.Context, name: str, quiet: bool) -> None:
    """Create a new, empty tag directory called NAME."""
    try:
        config, collection = _open_collection(ctx)
        tag = collection.create_tag(name)
    except (ConfigError, ScanningError, TaggingError) as exc:
        _fail(exc, json_output=False)
        return

    _emit_message(
        f"[green]Created tag '{escape(tag.name)}' at {escape(str(tag.path))}.[/green]",
        mode="summary",
        quiet=quiet or config.cli.quiet_default,
    )


@cli.command("open")
@click.argument("paths", nargs=-1, required=True)
@click.option("--with", "command", type=str, help="Command to open each item with.")
@click.pass_context
def open_items(ctx: click.Context, paths: tuple[str, ...], command: str | None) -> None:
    """Open each selected item with a command, one process per item."""
    try:
        config, collection = _open_collection(ctx)
        selection = collection.select(paths)
    except (ConfigError, ScanningError) as exc:
        _fail(exc, json_output=False)
        return

    command = command or config.cli.open_command
    if not command:
        raise click.ClickException("No command given; pass --with or set cli.open_command.")
    argv = shlex.split(command)

    errors: list[str] = []
    for item in selection:
        try:
            # Detached: the opener outlives linktag and is never waited on.
            subprocess.Popen([*argv, str(item.path)], start_new_session=True)
        except OSError as exc:
            errors.append(escape(f"{item.name}: {exc}"))

    if errors:
        _emit_message("[red]Errors encountered:[/red]", mode="error", quiet=False)
        for entry in errors:
            _emit_message(f"  - {entry}", mode="error", quiet=False)
        ctx.exit(1)


@cli.group()
def config() -> None:
    """Manage linktag configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        loaded = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    before = manager.read_text().splitlines()
    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise click.ClickException("KEY must specify a dotted path such as 'scan.recursive'.")

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    file_data = manager.load_file_overrides()
    previous = deepcopy(file_data)
    node = file_data
    for segment in segments[:-1]:
        existing = node.setdefault(segment, {})
        if not isinstance(existing, dict):
            raise click.ClickException(
                f"Cannot assign into '{segment}' because it is not a mapping in the config file."
            )
        node = existing
    node[segments[-1]] = parsed_value

    try:
        resolve_with_precedence(defaults=LinktagConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if file_data == previous:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    manager.save(file_data)
    after = manager.read_text().splitlines()

    diff = difflib.unified_diff(
        before,
        after,
        fromfile="config.yaml (before)",
        tofile="config.yaml (after)",
        lineterm="",
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {'.'.join(segments)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Open the configuration file in an interactive editor session.

    Raises:
        click.ClickException: If edited content is invalid or cannot be saved.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None:
        console.print("[yellow]Edit cancelled; no changes applied.[/yellow]")
        return

    if edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc

    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    try:
        resolve_with_precedence(defaults=LinktagConfig(), file_overrides=parsed)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(parsed)
    console.print("[green]Configuration updated successfully.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
