"""CLI entrypoints."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

import click
from langchain.chat_models import init_chat_model
from langsmith import traceable
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from tqdm import tqdm

from airenamer.log_sink import JsonlLogSink, read_log_entries
from airenamer.models.config import (
    DEFAULT_MAX_CONTENT_CHARS,
    DEFAULT_MAX_PROMPT_CHARS,
    DEFAULT_MODEL_IDENTIFIER,
    CaseStyle,
    PitchDeckFocus,
    PitchDeckMode,
    RenameConfig,
)
from airenamer.models.rename import FileOutcome, Outcome
from airenamer.processors.model_client import ModelClient
from airenamer.processors.rename_coordinator import RenameCoordinator
from airenamer.processors.revert import revert_entries


console = Console()

DEFAULT_LOG_FILE = Path.home() / ".airenamer" / "renames.jsonl"

OUTCOME_STYLES = {
    Outcome.RENAMED: "green",
    Outcome.SKIPPED: "yellow",
    Outcome.UNSUPPORTED: "yellow",
    Outcome.NO_CONTENT: "red",
    Outcome.ERROR: "bold red",
}


def _parse_case_style(ctx: click.Context, param: click.Parameter, value: str) -> CaseStyle:
    try:
        return CaseStyle(value)
    except ValueError as e:
        choices = ", ".join(style.value for style in CaseStyle)
        raise click.BadParameter(f"'{value}' is not a known case style. Choose from: {choices}.") from e


def discover_files(input_path: Path, include_subdirectories: bool = False) -> list[Path]:
    """List the files to rename. Hidden files and directories are ignored when walking."""
    if input_path.is_file():
        return [input_path]

    pattern = "**/*" if include_subdirectories else "*"
    files = []
    for path in sorted(input_path.glob(pattern)):
        relative_parts = path.relative_to(input_path).parts
        if any(part.startswith(".") for part in relative_parts):
            continue
        if path.is_file():
            files.append(path)
    return files


def _run_concurrently(coordinator: RenameCoordinator, files: list[Path], root: Path, workers: int) -> list[FileOutcome]:
    outcomes: list[FileOutcome | None] = [None] * len(files)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(coordinator.process_file, path, root): ix for ix, path in enumerate(files)}
        for future in tqdm(as_completed(futures), desc="Renaming files...", total=len(futures)):
            outcomes[futures[future]] = future.result()
    return [outcome for outcome in outcomes if outcome is not None]


def _print_outcomes(outcomes: list[FileOutcome]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("File", style="cyan")
    table.add_column("Outcome")
    table.add_column("Detail", style="dim")

    for result in outcomes:
        style = OUTCOME_STYLES[result.outcome]
        if result.outcome is Outcome.RENAMED and result.new_path is not None:
            detail = result.new_path.name
        elif result.skip_reason is not None:
            detail = result.skip_reason.value.replace("_", " ")
        else:
            detail = result.message
        detail = detail[:60] + "..." if len(detail) > 60 else detail
        table.add_row(
            escape(result.relative_path),
            f"[{style}]{result.outcome.value}[/{style}]",
            escape(detail),
        )

    console.print(table)


@click.group(context_settings=dict(show_default=True, auto_envvar_prefix="AIRENAMER"))
def cli() -> None:
    """airenamer - Give files descriptive names with the help of LLMs."""
    pass


@cli.command("rename")
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--case",
    "case_style",
    type=str,
    default=CaseStyle.KEBAB.value,
    callback=_parse_case_style,
    help="Case style for new names (e.g. kebabCase, snakeCase, camelCase).",
)
@click.option("-x", "--chars", type=int, default=20, help="Maximum characters in a new filename.")
@click.option("-l", "--language", type=str, default="English", help="Language of the new names.")
@click.option("-m", "--model-identifier", type=str, default=DEFAULT_MODEL_IDENTIFIER, help="LLM model to use.")
@click.option("-f", "--frames", type=int, default=3, help="Number of frames sampled from each video.")
@click.option("-p", "--custom-prompt", type=str, default=None, help="Extra instructions for the model.")
@click.option("--convert-binary", is_flag=True, default=False, help="Extract printable text from binary files.")
@click.option(
    "-s", "--include-subdirectories", is_flag=True, default=False, help="Also rename files in subdirectories."
)
@click.option("--force-change", is_flag=True, default=False, help="Apply renames without asking for confirmation.")
@click.option(
    "--metadata-hints/--no-metadata-hints", default=True, help="Share file dates, size and tags with the model."
)
@click.option(
    "--filename-hint/--no-filename-hint",
    "use_filename_hint",
    default=True,
    help="Share the current filename with the model.",
)
@click.option("--append-tags", is_flag=True, default=False, help="Append OS (Finder) tags to new names.")
@click.option(
    "--append-date",
    is_flag=True,
    default=False,
    help="Append the creation (or modification) date to names that contain no year.",
)
@click.option(
    "--pitch-deck",
    type=click.Choice([mode.value for mode in PitchDeckMode]),
    default=PitchDeckMode.OFF.value,
    help="Name detected investor pitch decks with a dedicated template ('only' skips everything else).",
)
@click.option(
    "--pitch-deck-focus",
    type=click.Choice([focus.value for focus in PitchDeckFocus]),
    default=PitchDeckFocus.COMPANY.value,
    help="What a pitch deck name should contain besides the company.",
)
@click.option(
    "--max-prompt-content-chars",
    type=int,
    default=DEFAULT_MAX_CONTENT_CHARS,
    help="Maximum characters of extracted content included in the prompt.",
)
@click.option(
    "--max-prompt-chars", type=int, default=DEFAULT_MAX_PROMPT_CHARS, help="Maximum characters in the whole prompt."
)
@click.option(
    "--concurrency", type=int, default=1, help="Files processed in parallel (requires --force-change above 1)."
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_LOG_FILE,
    help="JSON Lines file that records every applied rename and how to revert it.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print diagnostic details for every file.")
@click.option("--show-token-usage", is_flag=True, default=False, help="Display token usage statistics.")
@traceable
def rename(
    input_path: Path,
    case_style: CaseStyle,
    chars: int,
    language: str,
    model_identifier: str,
    frames: int,
    custom_prompt: str | None,
    convert_binary: bool,
    include_subdirectories: bool,
    force_change: bool,
    metadata_hints: bool,
    use_filename_hint: bool,
    append_tags: bool,
    append_date: bool,
    pitch_deck: str,
    pitch_deck_focus: str,
    max_prompt_content_chars: int,
    max_prompt_chars: int,
    concurrency: int,
    log_file: Path,
    verbose: bool,
    show_token_usage: bool,
) -> None:
    """Rename files after their content using an LLM.

    INPUT_PATH may be a single file or a directory. Every applied rename is
    appended to the log file together with a command that reverts it.

    Examples:

        airenamer rename ~/Downloads --case snakeCase --chars 40

        airenamer rename deck.pdf --pitch-deck auto --pitch-deck-focus round
    """
    try:
        config = RenameConfig(
            case_style=case_style,
            chars=chars,
            language=language,
            model_identifier=model_identifier,
            frames=frames,
            custom_prompt=custom_prompt,
            convert_binary=convert_binary,
            include_subdirectories=include_subdirectories,
            force_change=force_change,
            metadata_hints=metadata_hints,
            use_filename_hint=use_filename_hint,
            append_tags=append_tags,
            append_date=append_date,
            pitch_deck=PitchDeckMode(pitch_deck),
            pitch_deck_focus=PitchDeckFocus(pitch_deck_focus),
            max_prompt_content_chars=max_prompt_content_chars,
            max_prompt_chars=max_prompt_chars,
            concurrency=concurrency,
            log_file=log_file,
            verbose=verbose,
        )
    except ValidationError as e:
        errors = "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())
        raise click.UsageError(f"Invalid options: {errors}") from e

    if config.concurrency > 1 and not config.force_change:
        raise click.UsageError("--concurrency above 1 requires --force-change, since prompts cannot run in parallel.")

    files = discover_files(input_path, include_subdirectories=config.include_subdirectories)
    if not files:
        console.print("[yellow]No files found.[/yellow]")
        return

    root = input_path if input_path.is_dir() else input_path.parent
    console.print(
        f"Renaming [bold cyan]{len(files)}[/bold cyan] file(s) "
        f"using model [bold magenta]{escape(config.model_identifier)}[/bold magenta]..."
    )

    llm = init_chat_model(model=config.model_identifier)
    model = ModelClient(llm=llm)
    coordinator = RenameCoordinator(
        config=config,
        model=model,
        log_sink=JsonlLogSink(config.log_file) if config.log_file else None,
    )

    if config.concurrency > 1:
        outcomes = _run_concurrently(coordinator, files, root, config.concurrency)
    else:
        outcomes = [coordinator.process_file(path, root) for path in files]

    console.print()
    _print_outcomes(outcomes)

    renamed = sum(1 for result in outcomes if result.outcome is Outcome.RENAMED)
    errors = sum(1 for result in outcomes if result.outcome is Outcome.ERROR)
    console.print(f"[bold green]Renamed {renamed} of {len(outcomes)} file(s).[/bold green]")
    if renamed and config.log_file:
        console.print(f"Rename log: [bold cyan]{escape(str(config.log_file))}[/bold cyan]")

    if show_token_usage:
        console.print()
        console.print(escape(model.usage.summary(detailed=config.verbose)))

    if errors:
        raise SystemExit(1)


@cli.command("revert")
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--dry-run", is_flag=True, default=False, help="Print the revert commands without renaming anything.")
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    default=False,
    help="Revert without asking for confirmation.",
)
@traceable
def revert(log_file: Path, dry_run: bool, yes: bool) -> None:
    """Undo the renames recorded in LOG_FILE, newest first."""
    entries = read_log_entries(log_file, output=console)
    if not entries:
        console.print("[yellow]No renames recorded in the log.[/yellow]")
        return

    console.print(f"[bold]{len(entries)} rename(s) recorded:[/bold]")
    for entry in reversed(entries):
        console.print(f"  {escape(entry.revert_command)}")

    if dry_run:
        return

    if not yes and not click.confirm("Revert these renames?", default=False):
        console.print("[yellow]Aborted. No files were renamed.[/yellow]")
        return

    restored, failures = revert_entries(entries)
    for failure in failures:
        console.print(f"[bold red]Error:[/bold red] {escape(str(failure))}")

    console.print(f"[bold green]Reverted {len(restored)} rename(s).[/bold green]")
    if failures:
        raise SystemExit(1)
