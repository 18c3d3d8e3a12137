"""Per-file rename pipeline: probe, extract, name, confirm, apply and log."""

import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from airenamer.case import change_case
from airenamer.errors import (
    CleanupError,
    MetadataProbeError,
    ModelInvocationError,
    NoExtractableContentError,
    UnsupportedFileError,
)
from airenamer.log_sink import LogSink, build_revert_command
from airenamer.models.classification import ClassificationResult
from airenamer.models.config import CaseStyle, PitchDeckMode, RenameConfig
from airenamer.models.metadata import FileMetadata
from airenamer.models.prompts import AssembledPrompt
from airenamer.models.rename import FileOutcome, NameContext, Outcome, RenameLogEntry, SkipReason
from airenamer.processors.content_source import ContentKind, ContentSource, FileContentSource
from airenamer.processors.metadata_probe import probe_metadata, read_os_tags
from airenamer.processors.model_client import ModelClient
from airenamer.processors.pitch_deck import classify_pitch_deck
from airenamer.processors.prompt_budget import PromptBudgeter
from airenamer.processors.response_resolver import Resolution, ResponseResolver


# Console for rich output
console = Console()

RESPONSE_PREVIEW_CHARS = 280
PROMPT_PREVIEW_CHARS = 500

NON_INTERACTIVE_MESSAGE = (
    "Skipping rename for {path} because confirmations are required but no interactive "
    "terminal is available. Use --force-change to bypass prompts."
)


class Stage(str, Enum):
    """Non-terminal states of the per-file pipeline, in the order they run."""

    METADATA_PROBE = "metadata_probe"
    TAG_PROBE = "tag_probe"
    CONTENT_ACQUISITION = "content_acquisition"
    NAME_SYNTHESIS = "name_synthesis"
    CONFIRMATION = "confirmation"
    APPLY = "apply"
    LOG_APPEND = "log_append"


def _ask(question: str) -> str:
    return click.prompt(question, default="", show_default=False, prompt_suffix=" ")


def _stdin_is_interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


class ConfirmationGate:
    """Decides whether a proposed rename may be applied."""

    def __init__(
        self,
        force_change: bool = False,
        is_interactive: Callable[[], bool] = _stdin_is_interactive,
        ask: Callable[[str], str] = _ask,
        output: Console | None = None,
    ) -> None:
        self.force_change = force_change
        self.is_interactive = is_interactive
        self.ask = ask
        self.console = output or console

    def confirm(self, question: str, relative_path: str) -> bool:
        """Return True only for --force-change or an explicit `y`/`yes` answer."""
        if self.force_change:
            return True

        if not self.is_interactive():
            self.console.print(f"[yellow]{escape(NON_INTERACTIVE_MESSAGE.format(path=relative_path))}[/yellow]")
            return False

        answer = self.ask(question) or ""
        return answer.strip().lower() in ("y", "yes")


def unique_target(source: Path, name: str, ext: str) -> Path:
    """Path for `name` next to `source`, suffixed with a counter if already taken."""
    target = source.with_name(f"{name}{ext}")
    separator = "_" if "_" in name and "-" not in name else "-"
    counter = 2
    while target.exists() and not _same_file(target, source):
        target = source.with_name(f"{name}{separator}{counter}{ext}")
        counter += 1
    return target


def _same_file(a: Path, b: Path) -> bool:
    try:
        return a.samefile(b)
    except OSError:
        return False


def format_rename_preview(original: str, updated: str) -> str:
    """Rich markup showing `dir/old -> new`, with the shared directory dimmed."""
    original_dir, original_name = os.path.split(original)
    updated_dir, updated_name = os.path.split(updated)
    prefix = f"[dim]{escape(original_dir + os.sep)}[/dim]" if original_dir else ""
    if updated_dir != original_dir:
        updated_name = updated
    return f"{prefix}[red]{escape(original_name)}[/red] [dim]→[/dim] [green]{escape(updated_name)}[/green]"


@dataclass
class _FileRun:
    """Mutable working state for one file. Never shared between files."""

    path: Path
    relative_path: str
    metadata: FileMetadata | None = None
    tags: list[str] = field(default_factory=list)
    kind: ContentKind | None = None
    content: str | None = None
    images: list[Path] = field(default_factory=list)
    video_summary: str | None = None
    frames_dir: Path | None = None
    context: NameContext | None = None
    proposed_name: str | None = None
    new_path: Path | None = None
    confirmation: str | None = None


class RenameCoordinator:
    """Runs the rename pipeline for one file at a time.

    Every file moves through the stages in `Stage` and ends in exactly one `Outcome`.
    Failures in one file never affect another; the only state shared between files
    is the log sink.
    """

    def __init__(
        self,
        config: RenameConfig,
        model: ModelClient,
        content_source: ContentSource | None = None,
        log_sink: LogSink | None = None,
        confirmation: ConfirmationGate | None = None,
        case_transform: Callable[[str, CaseStyle], str] = change_case,
        frames_root: Path | None = None,
        output: Console | None = None,
    ) -> None:
        self.config = config
        self.model = model
        self.content_source = content_source or FileContentSource(convert_binary=config.convert_binary)
        self.log_sink = log_sink
        self.console = output or console
        self.confirmation = confirmation or ConfirmationGate(force_change=config.force_change, output=self.console)
        self.case_transform = case_transform
        self.frames_root = frames_root
        self.budgeter = PromptBudgeter(
            max_content_chars=config.max_prompt_content_chars,
            max_prompt_chars=config.max_prompt_chars,
        )
        self._handlers: dict[Stage, Callable[[_FileRun], Stage | FileOutcome]] = {
            Stage.METADATA_PROBE: self._probe_metadata,
            Stage.TAG_PROBE: self._probe_tags,
            Stage.CONTENT_ACQUISITION: self._acquire_content,
            Stage.NAME_SYNTHESIS: self._synthesize_name,
            Stage.CONFIRMATION: self._confirm,
            Stage.APPLY: self._apply,
            Stage.LOG_APPEND: self._append_log,
        }

    def _verbose(self, message: str) -> None:
        if self.config.verbose:
            self.console.print(f"[dim]{message}[/dim]")

    def process_file(self, path: Path, root: Path | None = None) -> FileOutcome:
        """Run the pipeline for `path`.

        Args:
            path: File to rename.
            root: Directory the run started from; used for relative paths in output
                  and in the log.

        Returns:
            The terminal outcome. This method does not raise for per-file failures.
        """
        path = Path(path)
        run = _FileRun(path=path, relative_path=self._relative_path(path, root))

        stage = Stage.METADATA_PROBE
        try:
            while True:
                result = self._handlers[stage](run)
                if isinstance(result, FileOutcome):
                    break
                stage = result
        except click.Abort:
            raise
        except Exception as e:
            result = self._outcome(run, Outcome.ERROR, message=f"{stage.value} failed: {e}")
        finally:
            try:
                self._remove_frames(run)
            except CleanupError as e:
                self.console.print(f"[red]{escape(str(e))}[/red]")

        self._report(result)
        return result

    @staticmethod
    def _relative_path(path: Path, root: Path | None) -> str:
        if root is None or Path(root).resolve() == path.resolve():
            return path.name
        relative = os.path.relpath(path, root)
        return path.name if relative.startswith("..") else relative

    def _outcome(
        self,
        run: _FileRun,
        outcome: Outcome,
        skip_reason: SkipReason | None = None,
        message: str = "",
        log_entry: RenameLogEntry | None = None,
    ) -> FileOutcome:
        return FileOutcome(
            path=run.path,
            relative_path=run.relative_path,
            outcome=outcome,
            skip_reason=skip_reason,
            message=message,
            new_path=run.new_path,
            context=run.context,
            log_entry=log_entry,
        )

    def _report(self, result: FileOutcome) -> None:
        path = escape(result.relative_path)
        if result.outcome is Outcome.RENAMED:
            preview = format_rename_preview(
                result.relative_path, result.log_entry.new_relative_path if result.log_entry else ""
            )
            self.console.print(f"[bold green]Renamed:[/bold green] {preview}")
        elif result.outcome is Outcome.SKIPPED:
            reason = result.skip_reason.value.replace("_", " ") if result.skip_reason else "skipped"
            self.console.print(f"[yellow]Skipped rename:[/yellow] {path} [dim]({reason})[/dim]")
        elif result.outcome is Outcome.UNSUPPORTED:
            self.console.print(f"[yellow]Unsupported file:[/yellow] {path} [dim]{escape(result.message)}[/dim]")
        elif result.outcome is Outcome.NO_CONTENT:
            self.console.print(f"[red]No content:[/red] {path} [dim]{escape(result.message)}[/dim]")
        else:
            self.console.print(f"[bold red]Error:[/bold red] {escape(result.message)} ({path})")

    # Stages

    def _probe_metadata(self, run: _FileRun) -> Stage:
        self._verbose(f"Processing file: {escape(run.relative_path)}")
        try:
            run.metadata = probe_metadata(run.path)
        except MetadataProbeError as e:
            self._verbose(f"Metadata unavailable for {escape(run.relative_path)}: {escape(str(e))}")
            return Stage.TAG_PROBE

        self._verbose(
            f"Metadata: size {run.metadata.size_label or 'unknown'}, "
            f"created {run.metadata.created_at or 'n/a'}, modified {run.metadata.modified_at or 'n/a'}"
        )
        return Stage.TAG_PROBE

    def _probe_tags(self, run: _FileRun) -> Stage:
        if not (self.config.append_tags or self.config.metadata_hints):
            return Stage.CONTENT_ACQUISITION

        try:
            tags = read_os_tags(run.path)
        except (OSError, subprocess.SubprocessError) as e:
            self._verbose(f"Unable to read tags for {escape(run.relative_path)}: {escape(str(e))}")
            return Stage.CONTENT_ACQUISITION

        if tags:
            run.tags = tags
            run.metadata = (
                run.metadata.model_copy(update={"tags": tags}) if run.metadata else FileMetadata(tags=tags)
            )
            self._verbose(f"Tags: {escape(', '.join(tags))}")
        return Stage.CONTENT_ACQUISITION

    def _acquire_content(self, run: _FileRun) -> Stage | FileOutcome:
        try:
            run.kind = self.content_source.detect_kind(run.path)
            if run.kind is ContentKind.IMAGE:
                run.images = [run.path]
            elif run.kind is ContentKind.VIDEO:
                run.frames_dir = Path(tempfile.mkdtemp(prefix="airenamer-frames-", dir=self.frames_root))
                frames = self.content_source.extract_frames(run.path, run.frames_dir, self.config.frames)
                run.images = frames.images
                run.video_summary = frames.video_summary
                self._verbose(f"Extracted {len(run.images)} frame(s) from {escape(run.relative_path)}")
            else:
                run.content = self.content_source.read_text(run.path)
                self._verbose(f"Extracted {len(run.content)} characters from {escape(run.relative_path)}")
        except UnsupportedFileError as e:
            return self._outcome(run, Outcome.UNSUPPORTED, message=str(e))
        except NoExtractableContentError as e:
            return self._outcome(run, Outcome.NO_CONTENT, message=str(e))
        return Stage.NAME_SYNTHESIS

    def _synthesize_name(self, run: _FileRun) -> Stage | FileOutcome:
        config = self.config

        classification = None
        pitch_deck_focus = None
        if config.pitch_deck is not PitchDeckMode.OFF:
            if run.content:
                classification = classify_pitch_deck(run.content)
                self._verbose(f"Pitch deck check ({classification.confidence.value}): {classification.summary}")
                if classification.is_pitch_deck:
                    pitch_deck_focus = config.pitch_deck_focus
            if pitch_deck_focus is None and config.pitch_deck is PitchDeckMode.ONLY:
                return self._outcome(run, Outcome.SKIPPED, SkipReason.NOT_PITCH_DECK)

        assembled = self.budgeter.assemble(
            case_style=config.case_style,
            chars=config.chars,
            language=config.language,
            content=run.content,
            video_summary=run.video_summary,
            metadata=run.metadata,
            metadata_hints=config.metadata_hints,
            original_filename=run.path.name,
            use_filename_hint=config.use_filename_hint,
            classification=classification,
            pitch_deck_focus=pitch_deck_focus,
            custom_prompt=config.custom_prompt,
        )

        try:
            reply = self.model.generate(assembled.prompt, run.images, description=run.relative_path)
        except ModelInvocationError as e:
            return self._outcome(run, Outcome.ERROR, message=str(e))

        resolver = ResponseResolver(
            case_style=config.case_style,
            chars=config.chars,
            pitch_deck_mode=pitch_deck_focus is not None,
            tags=run.tags if config.append_tags else None,
            fallback_date=run.metadata.fallback_date() if config.append_date and run.metadata else None,
            case_transform=self.case_transform,
        )
        resolution = resolver.resolve(reply)
        run.context = self._build_context(
            run, assembled, reply, resolution, classification, pitch_deck_mode=pitch_deck_focus is not None
        )

        if resolution.skipped:
            return self._outcome(run, Outcome.SKIPPED, SkipReason.MODEL_DECLINED)
        if not resolution.filename:
            return self._outcome(run, Outcome.SKIPPED, SkipReason.NO_NAME)

        self.console.print(f"[dim]{escape(run.context.summary)}[/dim]")
        run.proposed_name = resolution.filename
        if f"{resolution.filename}{run.path.suffix.lower()}" == run.path.name:
            return self._outcome(run, Outcome.SKIPPED, SkipReason.UNCHANGED)
        return Stage.CONFIRMATION

    def _confirm(self, run: _FileRun) -> Stage | FileOutcome:
        ext = run.path.suffix.lower()
        proposed = os.path.join(os.path.dirname(run.relative_path), f"{run.proposed_name}{ext}")
        question = f"? Rename {run.relative_path} → {proposed}? (y/N):"

        if not self.confirmation.confirm(question, run.relative_path):
            interactive = self.confirmation.force_change or self.confirmation.is_interactive()
            reason = SkipReason.CONFIRMATION_DECLINED if interactive else SkipReason.NON_INTERACTIVE
            return self._outcome(run, Outcome.SKIPPED, reason)

        run.confirmation = "force-change" if self.confirmation.force_change else "user confirmed"
        return Stage.APPLY

    def _apply(self, run: _FileRun) -> Stage:
        if not run.path.exists():
            raise FileNotFoundError(f"Source file not found: {run.path}")

        target = unique_target(run.path, run.proposed_name, run.path.suffix.lower())
        run.path.rename(target)
        run.new_path = target
        return Stage.LOG_APPEND

    def _append_log(self, run: _FileRun) -> FileOutcome:
        original_absolute = str(run.path.resolve())
        new_absolute = str(run.new_path.resolve())
        new_relative = os.path.join(os.path.dirname(run.relative_path), run.new_path.name)

        entry = RenameLogEntry(
            original_path=original_absolute,
            new_path=new_absolute,
            original_name=run.path.name,
            new_name=run.new_path.name,
            original_relative_path=run.relative_path,
            new_relative_path=new_relative,
            accepted_at=datetime.now(timezone.utc).isoformat(),
            confirmation=run.confirmation,
            context=run.context,
            file_metadata=run.metadata,
            tags=run.tags,
            revert_command=build_revert_command(new_absolute, original_absolute),
            revert_command_relative=build_revert_command(new_relative, run.relative_path),
        )
        if self.log_sink is not None:
            self.log_sink.append(entry)
        return self._outcome(run, Outcome.RENAMED, log_entry=entry)

    def _remove_frames(self, run: _FileRun) -> None:
        if run.frames_dir is None:
            return
        self._verbose(f"Cleaning up extracted frames for {escape(run.relative_path)}")
        try:
            shutil.rmtree(run.frames_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CleanupError(f"Failed to clean up frames for {run.relative_path}: {e}") from e
        finally:
            run.frames_dir = None

    def _build_context(
        self,
        run: _FileRun,
        assembled: AssembledPrompt,
        reply: str,
        resolution: Resolution,
        classification: ClassificationResult | None,
        pitch_deck_mode: bool,
    ) -> NameContext:
        config = self.config
        budget = assembled.budget
        char_limit = config.chars

        parts = []
        if resolution.skipped:
            parts.append("The model declined to name the file as a pitch deck.")
        elif resolution.used_fallback:
            parts.append("Used fallback phrase because the model response did not include a clean filename.")
        else:
            parts.append(f'Used model candidate "{resolution.candidate}".')
        if not resolution.skipped:
            parts.append(f"Applied {config.case_style.value} case and a {char_limit}-character limit.")
        if resolution.truncated:
            parts.append("The result was shortened to satisfy the length constraint.")
        if resolution.tags_appended:
            parts.append("Appended OS tags to the name.")
        if resolution.fallback_date_applied and run.metadata:
            parts.append("Appended a metadata date because the name had no year.")
        if pitch_deck_mode:
            parts.append("Used the pitch deck naming template.")
        if run.video_summary:
            parts.append("Video frame summary influenced the prompt.")
        if run.content:
            if budget.content_truncated:
                parts.append(
                    f"Text was extracted from the source file and truncated to {len(budget.content_snippet)} "
                    "characters to stay within the context limit."
                )
            else:
                parts.append("Text was extracted from the source file before generating the name.")
        if config.custom_prompt:
            parts.append("Custom instructions were included in the prompt.")
        if assembled.filename_hint_included:
            parts.append(f'Provided the original filename "{run.path.name}" as a hint.')
        if config.metadata_hints:
            if run.metadata is None:
                parts.append("Metadata hints were enabled but no filesystem metadata was available.")
            elif assembled.metadata_lines:
                detail = "Shared file metadata with the model."
                if assembled.fallback_date is not None:
                    detail += f" Highlighted the {assembled.fallback_date.kind} date as a fallback reference."
                parts.append(detail)
        if assembled.prompt_trimmed:
            parts.append("The composed prompt was trimmed to keep the total length within the context window.")

        if run.content:
            source = "text"
        elif run.images:
            source = "visual"
        else:
            source = "prompt-only"

        return NameContext(
            summary=" ".join(parts),
            case_style=config.case_style,
            char_limit=char_limit,
            candidate=resolution.candidate,
            final_name=resolution.filename,
            used_fallback=resolution.used_fallback,
            truncated=resolution.truncated,
            source=source,
            model_response=reply,
            model_response_preview=reply[:RESPONSE_PREVIEW_CHARS] if reply else None,
            prompt_length=len(assembled.prompt),
            prompt_preview=assembled.prompt[:PROMPT_PREVIEW_CHARS],
            prompt_trimmed=assembled.prompt_trimmed,
            max_prompt_chars=budget.max_prompt_chars,
            max_content_chars=budget.max_content_chars,
            content_length=budget.content_original_length,
            content_snippet_length=len(budget.content_snippet),
            content_truncated=budget.content_truncated,
            custom_prompt_included=bool(config.custom_prompt),
            video_summary_included=bool(run.video_summary),
            filename_hint_included=assembled.filename_hint_included,
            metadata_hint_included=bool(config.metadata_hints and run.metadata),
            metadata_fallback=assembled.fallback_date,
            fallback_date_applied=resolution.fallback_date_applied,
            tags_appended=resolution.tags_appended,
            pitch_deck_mode=pitch_deck_mode,
            pitch_deck_skip=resolution.skipped,
            classification=classification,
        )
