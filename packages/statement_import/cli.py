# ruff: noqa: I001
"""CLI for the ``statement_import`` package.

This module exposes callable command handlers (``cmd_detect``,
``cmd_import``, ``cmd_learn``) and a Typer-based console interface.
Environment variables are loaded from a local ``.env`` using
``python-dotenv`` before any command runs. Parsing and review logic lives in
``statement_import.importer`` and ``statement_import.review``; this module
only reads files, picks the state snapshot and prints results.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .importer import ImportMode
from .logging_setup import configure_logging
from .persistence import DEFAULT_STATE_FILENAME

STATE_PATH_ENV_VAR = "STATEMENT_IMPORT_STATE_PATH"

_TEXT_SUFFIXES = {".txt"}
_GRID_SUFFIXES = {".csv"}


def _resolve_state_path(state: Path | None) -> Path:
    """Explicit ``--state`` wins, then ``STATEMENT_IMPORT_STATE_PATH``, then CWD."""

    if state is not None:
        return state
    env_val = os.getenv(STATE_PATH_ENV_VAR)
    if env_val:
        return Path(env_val)
    return Path.cwd() / DEFAULT_STATE_FILENAME


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _read_grid(path: Path) -> list[list[str]]:
    import csv

    with open(path, encoding="utf-8", newline="") as f:
        return [row for row in csv.reader(f)]


def _format_row(c) -> str:
    from .locale_parsing import format_amount

    amount = format_amount(c.amount) if c.amount is not None else ""
    flags = ",".join(
        flag
        for flag, on in (("duplicate", c.is_duplicate), ("incomplete", not c.is_complete))
        if on
    )
    return "\t".join(
        (c.date, c.type, amount, c.category, c.cycle, c.description, c.sender, flags)
    )


# ---- Command handlers ---------------------------------------------------------


def cmd_detect(path: Path) -> int:
    from .detection import detect_provider

    try:
        text = _read_text(path)
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Failed to read '{path}': {e}", file=sys.stderr)
        return 1

    provider = detect_provider(text)
    print(f"{provider.value}\t{provider.display_name}")
    return 0


def cmd_import(path: Path, *, mode: ImportMode | str, state_path: Path, commit: bool) -> int:
    from .config import ImportConfig
    from .duplicates import build_existing_set
    from .importer import ImportStatus, process_grid, process_text
    from .persistence import JsonStateStore, StateFileError
    from .review import IncompleteReviewError, prepare_commit

    suffix = path.suffix.lower()
    if suffix not in _TEXT_SUFFIXES | _GRID_SUFFIXES:
        print(f"Error: Unsupported file type '{suffix or path.name}'", file=sys.stderr)
        return 2

    store = JsonStateStore(state_path)
    try:
        state = store.load()
    except StateFileError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    config = ImportConfig(settings=state.settings)
    existing = build_existing_set(state.all_transactions(), state.all_debts())

    try:
        if suffix in _GRID_SUFFIXES:
            outcome = process_grid(
                _read_grid(path),
                mappings=state.category_mappings,
                existing=existing,
                config=config,
            )
        else:
            outcome = process_text(
                _read_text(path),
                mode=mode,
                mappings=state.category_mappings,
                existing=existing,
                config=config,
            )
    except FileNotFoundError:
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: Failed to read '{path}': {e}", file=sys.stderr)
        return 1

    for c in (*outcome.complete, *outcome.incomplete):
        print(_format_row(c))
    print(outcome.summary())

    if outcome.status is ImportStatus.FAILED:
        return 1
    if not commit or outcome.status is ImportStatus.NOTHING_FOUND:
        return 0

    try:
        batch = prepare_commit(
            [*outcome.complete, *outcome.incomplete],
            state.category_mappings,
            config=config,
        )
        store.commit(batch)
    except IncompleteReviewError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (StateFileError, OSError) as e:
        print(f"Error: commit failed: {e}", file=sys.stderr)
        return 1

    print(
        f"committed {len(batch.transactions)} transactions, {len(batch.debts)} debts, "
        f"{len(batch.payments)} payments"
    )
    return 0


def cmd_learn(sender: str, category: str, *, amount: str | None, state_path: Path) -> int:
    from .locale_parsing import parse_amount
    from .persistence import JsonStateStore, StateFileError

    parsed = None
    if amount is not None:
        parsed = parse_amount(amount)
        if parsed is None:
            print(f"Error: Invalid amount: {amount!r}", file=sys.stderr)
            return 2

    try:
        mappings = JsonStateStore(state_path).learn(sender, category, amount=parsed)
    except (StateFileError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"{len(mappings)} mappings")
    return 0


# ---- Typer application -------------------------------------------------------

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank/wallet statements and hand-typed lists into the finance "
        "state snapshot. Loads .env from the working directory before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter defaults).
PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--path",
    help="Statement file (.txt text or .csv grid)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
STATE_OPTION: OptionInfo = typer.Option(
    ...,  # default comes from the parameter
    "--state",
    help=f"State snapshot (falls back to {STATE_PATH_ENV_VAR}, then ./{DEFAULT_STATE_FILENAME})",
    dir_okay=False,
)


@app.command("detect")
def detect_cmd(path: Annotated[Path, PATH_OPTION]) -> None:
    """Print the provider detected for a statement text file."""

    code = cmd_detect(path)
    if code:
        raise typer.Exit(code)


@app.command("import")
def import_cmd(
    path: Annotated[Path, PATH_OPTION],
    *,
    mode: ImportMode = typer.Option(
        ImportMode.BANK, help="'bank' detects the provider; 'list' reads one item per line."
    ),
    state: Annotated[Path | None, STATE_OPTION] = None,
    commit: bool = typer.Option(False, help="Confirm all candidates and write them to the state."),
) -> None:
    """Parse a statement, flag duplicates and optionally commit the result."""

    code = cmd_import(path, mode=mode, state_path=_resolve_state_path(state), commit=commit)
    if code:
        raise typer.Exit(code)


@app.command("learn")
def learn_cmd(
    sender: str = typer.Option(..., help="Sender/merchant label as shown on the statement."),
    category: str = typer.Option(..., help="Category to assign."),
    amount: str | None = typer.Option(None, help="Also learn for this exact amount."),
    state: Annotated[Path | None, STATE_OPTION] = None,
) -> None:
    """Teach the classifier a sender -> category mapping."""

    code = cmd_learn(sender, category, amount=amount, state_path=_resolve_state_path(state))
    if code:
        raise typer.Exit(code)


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    app()
