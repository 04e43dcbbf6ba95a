"""
Main CLI entry point for skillselect.

Provides the command-line interface using Click: load the skill tree,
inspect it, and ask which skills a request activates.
"""

import json as _json
import logging as _logging
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.logging as _rich_logging
import rich.markdown as _rich_markdown
import yaml as _yaml

import skillselect
import skillselect.config as config
import skillselect.constants as constants
import skillselect.skills as skills

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def configure_logging(level: str | int) -> None:
    """Send log records to stderr through rich at the given level."""
    root = _logging.getLogger("skillselect")
    for handler in list(root.handlers):
        if isinstance(handler, _rich_logging.RichHandler):
            root.removeHandler(handler)
    handler = _rich_logging.RichHandler(
        console=_rich_console.Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    root.addHandler(handler)
    root.setLevel(level)


def _build_registry(ctx: _click.Context) -> skills.SkillRegistry:
    """Load the registry described by global options and settings."""
    settings: config.Settings = ctx.obj["settings"]
    skills_dirs: tuple[_pathlib.Path, ...] = ctx.obj["skills_dirs"]
    include_builtin: bool = ctx.obj["include_builtin"]

    if skills_dirs:
        search_paths = [p.expanduser().resolve() for p in skills_dirs]
    else:
        search_paths = skills.get_skill_search_paths(
            settings.project_root,
            include_builtin=include_builtin,
        )
        search_paths.extend(settings.get_search_paths())

    return skills.SkillRegistry.load(
        settings.project_root,
        search_paths,
        document_name=settings.discovery.document_name,
    )


def _echo_skipped(registry: skills.SkillRegistry) -> None:
    if not registry.skipped:
        return
    _click.echo()
    _click.echo(f"Skipped ({len(registry.skipped)}):")
    for entry in registry.skipped:
        _click.echo(f"  {entry.path}: [{entry.error_type}] {entry.reason}")


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(skillselect.__version__, "-v", "--version", prog_name="skillselect")
@_click.option(
    "--skills-dir",
    "skills_dirs",
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    multiple=True,
    help="Skill search root (repeatable). Replaces the default locations.",
)
@_click.option(
    "--no-builtin",
    is_flag=True,
    help="Leave the bundled skills out of the default locations.",
)
@_click.option(
    "-V",
    "--verbose",
    is_flag=True,
    help="Enable debug logging",
)
@_click.pass_context
def cli(
    ctx: _click.Context,
    skills_dirs: tuple[_pathlib.Path, ...],
    no_builtin: bool,
    verbose: bool,
) -> None:
    """skillselect - pick the instructional skills a request needs."""
    ctx.ensure_object(dict)

    try:
        settings = config.Settings()
    except (config.ConfigFileError, _pydantic.ValidationError) as e:
        raise _click.ClickException(str(e)) from e

    configure_logging("DEBUG" if verbose else settings.logging.level)

    ctx.obj["settings"] = settings
    ctx.obj["skills_dirs"] = skills_dirs
    ctx.obj["include_builtin"] = settings.discovery.include_builtin and not no_builtin


# =============================================================================
# Skill Commands
# =============================================================================


@cli.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def list_command(ctx: _click.Context, json_output: bool) -> None:
    """List all loaded skills and anything that was skipped."""
    registry = _build_registry(ctx)

    if json_output:
        _click.echo(_json.dumps(registry.to_dict(), indent=2))
        return

    _click.echo("Skill Search Paths:")
    for path in registry.search_paths:
        exists = "✓" if path.exists() else "(not found)"
        _click.echo(f"  {path} {exists}")
    _click.echo()

    skill_list = registry.list_skills()
    if not skill_list:
        _click.echo("No skills found.")
    else:
        _click.echo(f"Skills ({len(skill_list)}):")
        _click.echo(f"{'Name':<32} {'Source':<8} {'Triggers'}")
        _click.echo("-" * 78)
        for s in skill_list:
            triggers = ", ".join(s.trigger_keywords)
            _click.echo(f"{s.name:<32} {s.source:<8} {triggers}")

    _echo_skipped(registry)


@cli.command(name="show")
@_click.argument("name")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--body", is_flag=True, help="Show full skill body")
@_click.option("--render", is_flag=True, help="Render the body as markdown")
@_click.pass_context
def show_command(
    ctx: _click.Context, name: str, json_output: bool, body: bool, render: bool
) -> None:
    """Show details for a specific skill."""
    registry = _build_registry(ctx)
    skill = registry.get_skill(name)

    if skill is None:
        if json_output:
            _click.echo(_json.dumps({"error": f"Skill not found: {name}"}))
        else:
            _click.echo(f"Error: Skill '{name}' not found", err=True)
        ctx.exit(1)

    if json_output:
        data = skill.to_dict()
        if body or render:
            data["body"] = skill.body
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Skill: {skill.name}")
    _click.echo(f"  Description: {skill.description}")
    _click.echo(f"  Triggers: {', '.join(skill.trigger_keywords)}")
    _click.echo(f"  Path: {skill.path}")
    _click.echo(f"  Source: {skill.source}")
    _click.echo(f"  Body lines: {skill.body_line_count}")
    if skill.exceeds_soft_limit:
        _click.echo(f"  ⚠ Exceeds recommended limit of {constants.SKILL_BODY_SOFT_LIMIT} lines")
    if skill.license:
        _click.echo(f"  License: {skill.license}")
    if skill.allowed_tools:
        _click.echo(f"  Allowed tools: {', '.join(skill.allowed_tools)}")

    refs = skill.list_reference_files()
    if refs:
        _click.echo()
        _click.echo("Reference files:")
        for ref in refs:
            _click.echo(f"  - {ref.name}")

    scripts = skill.list_scripts()
    if scripts:
        _click.echo()
        _click.echo("Scripts:")
        for script in scripts:
            _click.echo(f"  - {script.name}")

    if render:
        _click.echo()
        _rich_console.Console().print(_rich_markdown.Markdown(skill.body))
    elif body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(skill.body)


@cli.command(name="validate")
@_click.argument("path", type=_click.Path(path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def validate_command(ctx: _click.Context, path: _pathlib.Path, json_output: bool) -> None:
    """Validate a single skill directory."""
    settings: config.Settings = ctx.obj["settings"]

    result: dict[str, _typing.Any] = {
        "path": str(path),
        "valid": False,
        "warnings": [],
        "error": None,
    }

    try:
        skill = skills.load_skill(path, document_name=settings.discovery.document_name)
        skills.validate_skills([skill], strict=True)
    except (OSError, ValueError) as e:
        result["error"] = str(e)
    else:
        result["valid"] = True
        result["name"] = skill.name
        result["trigger_keywords"] = list(skill.trigger_keywords)
        result["body_lines"] = skill.body_line_count
        if skill.exceeds_soft_limit:
            result["warnings"].append(
                f"Body exceeds recommended limit "
                f"({skill.body_line_count} > {constants.SKILL_BODY_SOFT_LIMIT} lines)"
            )

    if json_output:
        _click.echo(_json.dumps(result, indent=2))
    else:
        _click.echo(f"Skill: {path}")
        if result["error"]:
            _click.echo("  Status: ✗ invalid")
            _click.echo(f"  Error: {result['error']}")
        elif result["warnings"]:
            _click.echo("  Status: ⚠ valid with warnings")
            for warning in result["warnings"]:
                _click.echo(f"  Warning: {warning}")
        else:
            _click.echo("  Status: ✓ valid")
        if result.get("name"):
            _click.echo(f"  Name: {result['name']}")
            _click.echo(f"  Triggers: {', '.join(result['trigger_keywords'])}")
            _click.echo(f"  Body lines: {result['body_lines']}")

    if not result["valid"]:
        ctx.exit(1)


@cli.command(name="select")
@_click.argument("intent", nargs=-1)
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--limit", type=_click.IntRange(min=0), default=None, help="Maximum skills to return")
@_click.option(
    "--mode",
    "match_mode",
    type=_click.Choice(list(skills.MATCH_MODES)),
    default=None,
    help="Keyword matching mode (default from config)",
)
@_click.option("--context", "show_context", is_flag=True, help="Print the activated skill bodies")
@_click.pass_context
def select_command(
    ctx: _click.Context,
    intent: tuple[str, ...],
    json_output: bool,
    limit: int | None,
    match_mode: str | None,
    show_context: bool,
) -> None:
    """Show which skills a request activates, best match first."""
    settings: config.Settings = ctx.obj["settings"]
    registry = _build_registry(ctx)

    selection = settings.selection
    selector = skills.SkillSelector(
        match_mode or selection.match_mode,  # type: ignore[arg-type]
        min_hits=selection.min_hits,
        max_results=limit if limit is not None else selection.max_results,
    )
    intent_text = " ".join(intent)
    matches = selector.match(intent_text, registry)

    if json_output:
        data: dict[str, _typing.Any] = {
            "intent": intent_text,
            "match_mode": selector.match_mode,
            "matches": [m.to_dict() for m in matches],
        }
        if show_context:
            data["context"] = registry.loader.render_context(m.skill for m in matches)
        _click.echo(_json.dumps(data, indent=2))
        return

    if not matches:
        _click.echo("No matching skills.")
        return

    for rank, m in enumerate(matches, start=1):
        _click.echo(f"{rank}. {m.name} ({m.score} hit{'s' if m.score != 1 else ''}: {', '.join(m.hits)})")

    if show_context:
        _click.echo()
        _click.echo(registry.loader.render_context(m.skill for m in matches))


@cli.command(name="paths")
@_click.pass_context
def paths_command(ctx: _click.Context) -> None:
    """Show the skill search roots in priority order (lowest first)."""
    settings: config.Settings = ctx.obj["settings"]
    include_builtin: bool = ctx.obj["include_builtin"]

    paths = list(ctx.obj["skills_dirs"]) or (
        skills.get_skill_search_paths(settings.project_root, include_builtin=include_builtin)
        + settings.get_search_paths()
    )
    for path in paths:
        exists = "✓" if path.exists() else "(not found)"
        _click.echo(f"{path} {exists}")


# =============================================================================
# Config Commands
# =============================================================================


@cli.group(name="config")
def config_group() -> None:
    """Configuration commands."""
    pass


@config_group.command(name="show")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def config_show(ctx: _click.Context, json_output: bool) -> None:
    """Show the effective configuration."""
    settings: config.Settings = ctx.obj["settings"]
    data = settings.to_dict()

    if json_output:
        _click.echo(_json.dumps(data, indent=2))
    else:
        _click.echo(_yaml.safe_dump(data, sort_keys=False).rstrip())

    unknown = settings.collect_all_extra_fields()
    if unknown and not json_output:
        _click.echo()
        _click.echo("Unknown config keys (possible typos):")
        for key in sorted(unknown):
            _click.echo(f"  {key}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
