"""
Command line interface for the gitmoji_msg tool.

This module defines the ``main`` click group used as the entry point of
the ``gitmoji-msg`` command. The ``generate`` and ``run`` commands drive
the pipeline: configuration check, change analysis, one request to the
language model, candidate selection, and (optionally) the commit, which
is always the last action. Each failure class maps to its own exit code.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import click

from gitmoji_msg import __version__
from gitmoji_msg.analysis.change_analyzer import ChangeAnalyzer, NoChangesError
from gitmoji_msg.analysis.fact_sheet import ChangeFactSheet
from gitmoji_msg.config.loader import (
    SETTABLE_KEYS,
    ConfigError,
    ResolvedConfig,
    apply_overrides,
    get_api_key,
    load_config,
    parse_setting,
    reset_config,
    save_config,
    validate_config,
)
from gitmoji_msg.gitmojis import GITMOJIS, UnknownCategoryError, filter_by_category, search_gitmojis
from gitmoji_msg.llm.models import Candidate
from gitmoji_msg.llm.providers import PROVIDERS, LLMError, get_client
from gitmoji_msg.llm.suggestion_requester import SuggestionRequester
from gitmoji_msg.selection.formatter import format_commit_command, format_commit_message, format_title
from gitmoji_msg.selection.selector import SelectionCancelled, prompt_for_candidate, select_candidate
from gitmoji_msg.vcs.git_client import GitClient, GitError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_GENERIC_ERROR = 1
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_NO_CHANGES = 4
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6
EXIT_LLM_FAILURE = 7
EXIT_CANCELLED = 8

# Number of files shown when listing repository status.
MAX_LISTED_FILES = 10


# ---------------------------------------------------------------------------
# Status display utilities
# ---------------------------------------------------------------------------

class ProgressIndicator:
    """Print a start line and a completion line with the elapsed time."""

    def __init__(self, message: str):
        self.message = message
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.time()
        click.echo(f"{self.message}...")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            elapsed = time.time() - self.start_time
            click.echo(f"  ✓ Done ({elapsed:.1f}s)")
        return False


def print_info(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}")


def print_success(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✓ {message}")


def print_warning(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}")


def print_error(message: str, indent: int = 0):
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


# ---------------------------------------------------------------------------
# Pipeline steps shared by ``generate`` and ``run``
# ---------------------------------------------------------------------------

def _flag_override(name: str, value):
    """Return ``value`` only if the flag was given on the command line."""
    ctx = click.get_current_context()
    source = ctx.get_parameter_source(name)
    if source is None or source == click.core.ParameterSource.DEFAULT:
        return None
    return value


def resolve_config(
    provider: Optional[str],
    model: Optional[str],
    scope: Optional[str],
    interactive: Optional[bool],
    auto_commit: Optional[bool] = None,
) -> ResolvedConfig:
    """Load the configuration, apply flag overrides, and validate it.

    Exits with ``EXIT_CONFIG_ERROR`` listing every problem when the result
    cannot be used.
    """
    try:
        config = load_config()
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    config = apply_overrides(
        config,
        provider=provider,
        model=model,
        scope=scope,
        interactive=interactive,
        auto_commit=auto_commit,
    )
    errors = validate_config(config)
    if errors:
        print_error("Configuration error:")
        for error in errors:
            print_error(error, indent=1)
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
    return config


def open_repository(start: Path) -> GitClient:
    repo_root = GitClient.find_repo_root(start)
    if repo_root is None:
        print_error("Not a git repository. Initialize git first with `git init`.")
        raise click.exceptions.Exit(EXIT_NO_REPO)
    logger.debug("Repository root: %s", repo_root)
    return GitClient(repo_root)


def analyze_changes(analyzer: ChangeAnalyzer, diff: Optional[str] = None) -> ChangeFactSheet:
    try:
        fact_sheet = analyzer.analyze(diff)
    except NoChangesError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_NO_CHANGES)
    except GitError as exc:
        print_error(f"Failed to get staged changes: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    click.echo(
        f"📊 Found changes in {len(fact_sheet.file_paths)} file(s): "
        f"{', '.join(fact_sheet.file_types) or 'no extensions'}"
    )
    print_info(fact_sheet.summary, indent=1)
    return fact_sheet


def suggest_and_select(config: ResolvedConfig, fact_sheet: ChangeFactSheet) -> Candidate:
    """Request candidates for ``fact_sheet`` and return the selected one."""
    try:
        with ProgressIndicator("🤖 Generating gitmoji suggestions"):
            client = get_client(config.provider, config.model, get_api_key(config))
            candidates = SuggestionRequester(client).request(fact_sheet)
    except LLMError as exc:
        print_error(str(exc))
        raise click.exceptions.Exit(EXIT_LLM_FAILURE)

    try:
        return select_candidate(
            candidates,
            interactive=config.interactive,
            chooser=lambda items: prompt_for_candidate(items, config.scope),
        )
    except SelectionCancelled:
        print_warning("Selection cancelled; nothing committed.")
        raise click.exceptions.Exit(EXIT_CANCELLED)


def show_candidate(candidate: Candidate, scope: Optional[str]) -> None:
    click.echo("\n✨ Generated commit message:")
    click.echo(f"   Title: {format_title(candidate, scope)}")
    if candidate.description:
        click.echo(f"   Description: {candidate.description}")
    click.echo(f"   Confidence: {candidate.confidence}%")


def commit_candidate(client: GitClient, candidate: Candidate, scope: Optional[str]) -> None:
    try:
        client.commit(format_commit_message(candidate, scope))
        short_hash, _ = client.get_last_commit()
    except GitError as exc:
        print_error(f"Failed to commit changes: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    print_success("Changes committed successfully!")
    click.echo(f'📋 Commit: {short_hash} "{format_title(candidate, scope)}"')


def _pipeline_options(func):
    """Attach the flags shared by ``generate`` and ``run``."""
    decorators = [
        click.option(
            "-i",
            "--interactive/--no-interactive",
            default=True,
            help="Choose between multiple suggestions (defaults to the configured value).",
        ),
        click.option("-s", "--scope", help='Scope to add to the commit message (e.g. "api", "ui").'),
        click.option("-p", "--provider", type=click.Choice(sorted(PROVIDERS)), help="AI provider to use."),
        click.option("-m", "--model", help="AI model to use."),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

class _MainGroup(click.Group):
    """Click group that reports unexpected exceptions with ``EXIT_GENERIC_ERROR``."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except (click.exceptions.Exit, click.ClickException, click.Abort):
            raise
        except Exception as exc:
            logging.exception("Unhandled error: %s", exc)
            print_error(f"Unexpected error: {exc}")
            raise click.exceptions.Exit(EXIT_GENERIC_ERROR)


@click.group(cls=_MainGroup)
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
@click.version_option(version=__version__, prog_name="gitmoji-msg")
def main(verbose: bool) -> None:
    """🎨 Generate gitmoji commit messages from your staged changes using AI."""
    # force=True so repeated invocations (tests) reconfigure handlers.
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


@main.command()
@click.option("-c", "--commit/--no-commit", default=False, help="Commit with the generated message.")
@click.option("-d", "--dry-run", is_flag=True, help="Never commit; print the git command instead.")
@_pipeline_options
def generate(
    commit: bool,
    dry_run: bool,
    interactive: bool,
    scope: Optional[str],
    provider: Optional[str],
    model: Optional[str],
) -> None:
    """Generate a gitmoji commit message for the staged changes."""
    config = resolve_config(
        provider,
        model,
        scope,
        _flag_override("interactive", interactive),
        _flag_override("commit", commit),
    )
    client = open_repository(Path.cwd())

    click.echo("🔍 Analyzing staged changes...")
    fact_sheet = analyze_changes(ChangeAnalyzer(client))

    candidate = suggest_and_select(config, fact_sheet)
    show_candidate(candidate, config.scope)

    if config.auto_commit and not dry_run:
        click.echo("\n🚀 Committing changes...")
        commit_candidate(client, candidate, config.scope)
    else:
        click.echo("\n💡 To commit with this message, run:")
        click.echo(f"   {format_commit_command(candidate, config.scope)}")


@main.command()
@click.option("-d", "--dry-run", is_flag=True, help="Show what would be committed without committing.")
@click.option("-y", "--yes", is_flag=True, help="Stage all changes without asking for confirmation.")
@_pipeline_options
def run(
    dry_run: bool,
    yes: bool,
    interactive: bool,
    scope: Optional[str],
    provider: Optional[str],
    model: Optional[str],
) -> None:
    """Stage all changes, generate a gitmoji commit message, and commit."""
    config = resolve_config(provider, model, scope, _flag_override("interactive", interactive))
    client = open_repository(Path.cwd())

    click.echo("📋 Checking repository status...")
    try:
        changes = client.get_changes()
    except GitError as exc:
        print_error(f"Failed to read repository status: {exc}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)

    if not changes:
        print_success("No changes detected. Repository is clean.")
        return

    staged = [change for change in changes if change.is_staged]
    if staged:
        click.echo(f"📁 Found {len(staged)} staged file(s):")
        for change in staged[:MAX_LISTED_FILES]:
            click.echo(f"   ✅ {change.path}")
        if len(staged) > MAX_LISTED_FILES:
            click.echo(f"   ... and {len(staged) - MAX_LISTED_FILES} more files")
        click.echo("🎯 Using existing staged changes")
    else:
        click.echo(f"📁 Found {len(changes)} changed file(s):")
        for change in changes[:MAX_LISTED_FILES]:
            click.echo(f"   {change.indicator} {change.path}")
        if len(changes) > MAX_LISTED_FILES:
            click.echo(f"   ... and {len(changes) - MAX_LISTED_FILES} more files")

        if dry_run:
            click.echo("🏃 Dry run mode - simulating git add .")
        else:
            if not yes and not click.confirm("Add all changes and proceed with commit?", default=True):
                print_warning("Operation cancelled")
                raise click.exceptions.Exit(EXIT_CANCELLED)
            click.echo("➕ Adding all changes...")
            try:
                client.add_all()
            except GitError as exc:
                print_error(f"Failed to stage changes: {exc}")
                raise click.exceptions.Exit(EXIT_VCS_FAILURE)

    click.echo("🔍 Analyzing changes...")
    analyzer = ChangeAnalyzer(client)
    if dry_run and not staged:
        # Nothing was actually staged, so look at the working tree instead.
        try:
            diff = client.get_working_diff()
        except GitError as exc:
            print_error(f"Failed to read working tree diff: {exc}")
            raise click.exceptions.Exit(EXIT_VCS_FAILURE)
        if not diff.strip():
            print_error("No changes to analyze")
            raise click.exceptions.Exit(EXIT_NO_CHANGES)
        fact_sheet = analyze_changes(analyzer, diff)
    else:
        fact_sheet = analyze_changes(analyzer)

    candidate = suggest_and_select(config, fact_sheet)
    show_candidate(candidate, config.scope)

    if dry_run:
        click.echo("\n🏃 Dry run mode - would execute:")
        click.echo(f"   {format_commit_command(candidate, config.scope)}")
        return

    click.echo("\n🚀 Committing changes...")
    commit_candidate(client, candidate, config.scope)


@main.command(name="list")
@click.option("-s", "--search", help="Search gitmojis by description, code or name.")
@click.option("-c", "--category", help="Filter by category (feature, bug, docs, etc.).")
@click.option("--codes", is_flag=True, help="Show gitmoji codes instead of emojis.")
def list_gitmojis(search: Optional[str], category: Optional[str], codes: bool) -> None:
    """List available gitmojis with their descriptions."""
    selected = GITMOJIS
    if search:
        selected = search_gitmojis(search, selected)
    if category:
        try:
            selected = filter_by_category(category, selected)
        except UnknownCategoryError as exc:
            print_error(str(exc))
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    if not selected:
        click.echo("No gitmojis found matching your criteria.")
        return

    click.echo(f"📋 Available Gitmojis ({len(selected)}/{len(GITMOJIS)}):\n")
    width = max(len(g.code) for g in selected)
    for gitmoji in selected:
        display = gitmoji.code if codes else gitmoji.emoji
        click.echo(f"{display} {gitmoji.code.ljust(width)} - {gitmoji.description}")

    if search or category:
        click.echo("\n💡 Tip: Remove filters to see all available gitmojis")
    else:
        click.echo("\n💡 Tip: Use --search or --category to filter results")
        click.echo("   Examples: --search bug, --category feature")


def _show_config(config: ResolvedConfig) -> None:
    click.echo("📋 Current Configuration:")
    click.echo(f"   Provider: {config.provider}")
    click.echo(f"   Model: {config.model}")
    click.echo(f"   Interactive: {str(config.interactive).lower()}")
    click.echo(f"   Auto-commit: {str(config.auto_commit).lower()}")
    if config.scope:
        click.echo(f"   Default scope: {config.scope}")
    click.echo(f"   API Key: {'✅ Set' if get_api_key(config) else '❌ Not set'}")
    click.echo("\n💡 Tip: Use --interactive to change settings or set individual values:")
    click.echo("   gitmoji-msg config provider openai")


def _interactive_config(current: ResolvedConfig) -> ResolvedConfig:
    provider = click.prompt(
        "AI Provider", type=click.Choice(sorted(PROVIDERS)), default=current.provider
    )
    model = click.prompt("AI Model", default=current.model)
    interactive = click.confirm("Enable interactive mode by default?", default=current.interactive)
    auto_commit = click.confirm("Auto-commit generated messages?", default=current.auto_commit)
    scope = click.prompt("Default scope (optional)", default=current.scope or "", show_default=False)
    return save_config(
        {
            "provider": provider,
            "model": model,
            "interactive": interactive,
            "autoCommit": auto_commit,
            "scope": scope.strip() or None,
        }
    )


@main.command()
@click.argument("key", required=False, type=click.Choice(SETTABLE_KEYS))
@click.argument("value", required=False)
@click.option("-i", "--interactive", is_flag=True, help="Configure settings interactively.")
@click.option("-l", "--list", "list_", is_flag=True, help="List current configuration.")
@click.option("-r", "--reset", is_flag=True, help="Reset configuration to defaults.")
def config(key: Optional[str], value: Optional[str], interactive: bool, list_: bool, reset: bool) -> None:
    """Manage gitmoji-msg configuration settings."""
    try:
        if reset:
            if click.confirm("Are you sure you want to reset all configuration to defaults?", default=False):
                reset_config()
                print_success("Configuration reset to defaults")
            else:
                print_warning("Reset cancelled")
        elif interactive:
            _interactive_config(load_config())
            print_success("Configuration updated successfully!")
        elif list_ or key is None:
            _show_config(load_config())
        elif value is None:
            current = load_config().to_dict()
            if key not in current:
                print_error(f"Configuration key '{key}' is not set")
                raise click.exceptions.Exit(EXIT_CONFIG_ERROR)
            shown = "********" if key == "apiKey" else current[key]
            if isinstance(shown, bool):
                shown = str(shown).lower()
            click.echo(f"{key}: {shown}")
        else:
            save_config(parse_setting(key, value))
            print_success(f"Set {key} to {'********' if key == 'apiKey' else value}")
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


if __name__ == "__main__":
    main(prog_name="gitmoji-msg")
