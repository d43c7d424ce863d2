"""Forge pipeline orchestrator.

Runs one scaffolding pass:

    START -> VALIDATING -> MATERIALIZING -> DONE
                      \\              \\
                       -> FAILED       -> FAILED

A log file that cannot be opened fails the run at once.  Validation finishes
before anything is written.  Blueprints are then materialized strictly in
declared order and the first failure halts the run.
Nothing is rolled back: every file write is atomic and every directory
creation idempotent, so fixing the cause and re-running converges on the
same tree.

Usage::

    forge
    forge --output ./toolkits --only EchoTrace --only BioLink
    python -m forge.pipeline --list
"""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from jinja2 import TemplateError
from rich.markup import escape
from rich.table import Table

from forge.config import Config, RunContext
from forge.environment import EnvironmentValidator
from forge.errors import FilesystemWriteFailure, ForgeError
from forge.scaffolder import BlueprintCatalog, BlueprintGenerator
from forge.utils import (
    RunLog,
    console,
    ensure_dir,
    format_duration,
    print_error,
    print_success,
    print_summary_table,
)

# ---------------------------------------------------------------------------
# State & result
# ---------------------------------------------------------------------------


class RunState(str, Enum):
    START = "start"
    VALIDATING = "validating"
    MATERIALIZING = "materializing"
    DONE = "done"
    FAILED = "failed"


class PipelineError(Exception):
    """A fatal failure tagged with the step that produced it."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step}: {message}")


@dataclass
class RunResult:
    """Outcome of :meth:`Pipeline.run`."""

    state: RunState = RunState.START
    base_dir: Path | None = None
    completed: list[str] = field(default_factory=list)
    failed: str | None = None
    error: PipelineError | None = None
    files_written: int = 0
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.state is RunState.DONE

    @property
    def step(self) -> str | None:
        """Step that halted the run, if any."""
        return self.error.step if self.error is not None else None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1


# Failures that end a run; anything else is a bug and propagates.
_FATAL = (ForgeError, TemplateError, OSError)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Validates the environment, then materializes blueprints in order.

    Attributes:
        config: Run configuration.
        state: Current ``RunState``.
        log: Event log shared by every step.
    """

    def __init__(
        self,
        config: Config,
        *,
        catalog: BlueprintCatalog | None = None,
        validator: EnvironmentValidator | None = None,
        run_log: RunLog | None = None,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.log = run_log or RunLog(config.log_file)
        self.validator = validator or EnvironmentValidator(config, self.log)
        self.state = RunState.START
        self.context: RunContext | None = None

    def run(self, names: list[str] | None = None) -> RunResult:
        """Execute one scaffolding pass.

        Args:
            names: Optional subset of blueprint names; declared order is kept.

        Returns:
            A ``RunResult``; ``result.success`` is ``False`` after any fatal
            error, and ``result.error`` names the failing step.
        """
        started = time.monotonic()
        result = RunResult()
        self.state = RunState.START

        try:
            try:
                self.log.open()
            except OSError as exc:
                self._fail(result, "open-log", FilesystemWriteFailure(self.log.path, exc))
                return result
            self.log.info("Starting scaffolding run...")
            self._execute(result, names)
        finally:
            self.log.close()
            result.state = self.state
            result.duration_seconds = time.monotonic() - started
        return result

    # -- Steps -------------------------------------------------------------

    def _execute(self, result: RunResult, names: list[str] | None) -> None:
        self.state = RunState.VALIDATING
        try:
            catalog = self.catalog or BlueprintCatalog.load()
            blueprints = catalog.select(names)
            self.context = self.validator.validate()
        except _FATAL as exc:
            self._fail(result, "validate", exc)
            return

        base_dir = self.context.base_dir
        result.base_dir = base_dir
        try:
            ensure_dir(base_dir)
        except OSError as exc:
            self._fail(result, "prepare", FilesystemWriteFailure(base_dir, exc))
            return

        self.state = RunState.MATERIALIZING
        generator = BlueprintGenerator(self.context, self.log)
        for blueprint in blueprints:
            try:
                written = generator.generate(blueprint)
            except _FATAL as exc:
                result.failed = blueprint.name
                self._fail(result, f"materialize:{blueprint.name}", exc)
                return
            result.completed.append(blueprint.name)
            result.files_written += len(written.files)

        self.state = RunState.DONE
        self.log.info(f"All blueprints scaffolded successfully in {base_dir}.")
        self.log.info("To build all, navigate to each directory and run mvn clean install.")

    def _fail(self, result: RunResult, step: str, exc: BaseException) -> None:
        error = PipelineError(step, str(exc))
        error.__cause__ = exc
        result.error = error
        self.state = RunState.FAILED
        self.log.error(f"Run halted at step {step}: {exc}")


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _print_catalog(catalog: BlueprintCatalog) -> None:
    table = Table(title="Blueprints", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Artifact")
    table.add_column("Dependencies", justify="right")
    table.add_column("Files", justify="right")
    for index, blueprint in enumerate(catalog, 1):
        table.add_row(
            str(index),
            blueprint.name,
            blueprint.artifact_id,
            str(len(blueprint.dependencies)),
            str(len(blueprint.files)),
        )
    console.print(table)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``forge`` / ``python -m forge.pipeline``."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="forge",
        description="Forge -- scaffold every blueprint project in one run",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  forge\n"
            "  forge --output ./toolkits\n"
            "  forge --only EchoTrace --only BioLink\n"
        ),
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Base output directory (default: ./forensic_toolkits or $FORGE_BASE_DIR)",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Log file, truncated each run (default: scaffold.log or $FORGE_LOG_FILE)",
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="NAME",
        help="Materialize only this blueprint (repeatable)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the available blueprints and exit",
    )

    args = parser.parse_args(argv)

    if args.list:
        try:
            catalog = BlueprintCatalog.load()
        except ForgeError as exc:
            print_error(f"Error: {escape(str(exc))}")
            sys.exit(1)
        _print_catalog(catalog)
        return

    config = Config.from_env()
    if args.output:
        config.base_dir = Path(args.output)
    if args.log_file:
        config.log_file = Path(args.log_file)

    result = Pipeline(config).run(args.only)

    print_summary_table(
        {
            "State": result.state.value,
            "Base directory": str(result.base_dir or config.resolved_base_dir),
            "Completed": ", ".join(result.completed) or "-",
            "Failed": result.failed or "-",
            "Files written": str(result.files_written),
            "Duration": format_duration(result.duration_seconds),
            "Log file": str(config.log_file),
        },
        title="Scaffolding Summary",
    )

    if result.success:
        print_success("Scaffolding completed successfully!")
    else:
        print_error(f"Scaffolding failed: {escape(str(result.error))}")
        sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
