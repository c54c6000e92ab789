# src/mergealign/cli.py
"""
mergealign CLI (Typer)

Commands:
- align     : diff BASE against LEFT and RIGHT, print groups/fillers/conflicts
- layout    : compute a layout from externally produced diffs (JSON)
- conflicts : list the conflicting regions of a three-way merge
- init      : write a default .mergealign.yaml
- version   : print version
"""

from __future__ import annotations

import json
import logging
import traceback
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ConfigError, ConfigManager
from .core import MergeAlignError, MergeAligner
from .schema import LineDiffEntry, MappingAlignment, MergeAlignConfig, MergeLayout
from .utils import fs_utils
from .utils.diff_utils import compute_line_diff

app = typer.Typer(
    add_completion=False,
    help="Three-way line alignment and conflict detection for merge views.",
)
console = Console()


# ----------------------------
# Global context
# ----------------------------


class Ctx:
    def __init__(self, config: MergeAlignConfig, config_manager: ConfigManager, verbose: bool):
        self.config = config
        self.config_manager = config_manager
        self.verbose = verbose


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        dir_okay=False,
        resolve_path=True,
        help="Path to a config file (default: ./.mergealign.yaml if present).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logs.",
    ),
):
    """Initialize global context. Access via ctx.obj"""
    manager = ConfigManager(Path("."), config_path=config)
    try:
        cfg = manager.read() if config else manager.load()
    except ConfigError as e:
        _handle_error(e, verbose)
    _setup_logging("DEBUG" if verbose else cfg.log_level)
    ctx.obj = Ctx(config=cfg, config_manager=manager, verbose=verbose)


def _print_json(data) -> None:
    try:
        console.print_json(data=data)
    except Exception:
        console.print(json.dumps(data, indent=2))


def _handle_error(e: Exception, verbose: bool) -> None:
    if isinstance(e, MergeAlignError):
        console.print(f"[bold red]Error:[/bold red] {e}")
    else:
        console.print(f"[bold red]Unexpected error:[/bold red] {e}")
    if verbose:
        console.print("[dim]" + traceback.format_exc() + "[/dim]")
    raise typer.Exit(1)


def _diff_files(cfg: MergeAlignConfig, base: Path, left: Path, right: Path):
    base_lines = fs_utils.read_lines(base)
    left_lines = fs_utils.read_lines(left)
    right_lines = fs_utils.read_lines(right)
    logging.getLogger(__name__).info(
        "base %s (%d lines), input1 %s (%d lines), input2 %s (%d lines)",
        base,
        len(base_lines),
        left,
        len(left_lines),
        right,
        len(right_lines),
    )
    diff1 = compute_line_diff(
        base_lines,
        left_lines,
        char_level=cfg.char_level,
        ignore_trim_whitespace=cfg.ignore_trim_whitespace,
    )
    diff2 = compute_line_diff(
        base_lines,
        right_lines,
        char_level=cfg.char_level,
        ignore_trim_whitespace=cfg.ignore_trim_whitespace,
    )
    return (base_lines, left_lines, right_lines), (diff1, diff2)


def _range(r) -> Dict[str, int]:
    return {"start_line": r.start_line, "end_line": r.end_line}


def _layout_json(layout: MergeLayout) -> Dict[str, Any]:
    return {
        "mapping_alignments": [
            {
                "base_range": _range(ma.base_range),
                "output1_range": _range(ma.output1_range),
                "output2_range": _range(ma.output2_range),
                "is_conflict": ma.is_conflict,
            }
            for ma in layout.mapping_alignments
        ],
        "fillers": {
            "left_fillers": [f.model_dump() for f in layout.left_fillers],
            "right_fillers": [f.model_dump() for f in layout.right_fillers],
        },
        "conflict_blocks": [
            {
                "id": b.id,
                "base_range": _range(b.base_range),
                "output1_range": _range(b.output1_range),
                "output2_range": _range(b.output2_range),
            }
            for b in layout.conflict_blocks
        ],
    }


def _kind(ma: MappingAlignment) -> str:
    if ma.is_conflict:
        return "[red]conflict[/red]"
    if ma.has_changes1 and ma.has_changes2:
        return "both"
    if ma.has_changes1:
        return "input1"
    if ma.has_changes2:
        return "input2"
    return "unchanged"


def _fmt(r) -> str:
    return f"{r.start_line}-{r.end_line}"


def _parse_side(data: Any, key: str) -> List[LineDiffEntry]:
    side = data.get(key, [])
    if isinstance(side, dict):
        side = side.get("changes", [])
    return [LineDiffEntry.model_validate(e) for e in side]


# ----------------------------
# Commands
# ----------------------------


@app.command()
def align(
    ctx: typer.Context,
    base: Path = typer.Argument(..., exists=True, dir_okay=False, help="Base version file."),
    left: Path = typer.Argument(..., exists=True, dir_okay=False, help="Left/incoming version file."),
    right: Path = typer.Argument(..., exists=True, dir_okay=False, help="Right/current version file."),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable JSON.",
    ),
):
    """Align BASE, LEFT and RIGHT and report groups, fillers and conflicts."""
    try:
        cfg = ctx.obj.config
        (base_lines, left_lines, right_lines), (diff1, diff2) = _diff_files(
            cfg, base, left, right
        )
        layout = MergeAligner(cfg).compute(diff1, diff2)

        if as_json:
            doc = {
                "files": {
                    "base": {"path": str(base), "lines": len(base_lines)},
                    "input1": {"path": str(left), "lines": len(left_lines)},
                    "input2": {"path": str(right), "lines": len(right_lines)},
                },
                "diffs": {
                    "base_to_input1": [d.model_dump() for d in diff1],
                    "base_to_input2": [d.model_dump() for d in diff2],
                },
            }
            doc.update(_layout_json(layout))
            _print_json(doc)
            return

        table = Table(title=f"{base.name}: {len(layout.mapping_alignments)} change group(s)")
        table.add_column("base")
        table.add_column(cfg.labels.incoming)
        table.add_column(cfg.labels.current)
        table.add_column("kind")
        for ma in layout.mapping_alignments:
            table.add_row(
                _fmt(ma.base_range),
                _fmt(ma.output1_range),
                _fmt(ma.output2_range),
                _kind(ma),
            )
        console.print(table)
        console.print(
            f"[dim]fillers: {cfg.labels.incoming}={sum(f.count for f in layout.left_fillers)} "
            f"{cfg.labels.current}={sum(f.count for f in layout.right_fillers)}[/dim]",
        )
        if layout.has_conflicts:
            console.print(
                f"[yellow]![/yellow] {len(layout.conflict_blocks)} conflict(s)",
            )
        else:
            console.print("[green]✓[/green] No conflicts")
    except Exception as e:
        _handle_error(e, ctx.obj.verbose)


@app.command()
def layout(
    ctx: typer.Context,
    diffs: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON file with base_to_input1 and base_to_input2 diff entries.",
    ),
):
    """Compute fillers and conflicts from diffs produced by another tool."""
    try:
        try:
            data = json.loads(diffs.read_text(encoding="utf-8"))
            changes1 = _parse_side(data, "base_to_input1")
            changes2 = _parse_side(data, "base_to_input2")
        except (json.JSONDecodeError, ValidationError, AttributeError) as e:
            raise MergeAlignError(f"Invalid diff document {diffs}: {e}") from e
        result = MergeAligner(ctx.obj.config).compute(changes1, changes2)
        _print_json(_layout_json(result))
    except Exception as e:
        _handle_error(e, ctx.obj.verbose)


@app.command()
def conflicts(
    ctx: typer.Context,
    base: Path = typer.Argument(..., exists=True, dir_okay=False, help="Base version file."),
    left: Path = typer.Argument(..., exists=True, dir_okay=False, help="Left/incoming version file."),
    right: Path = typer.Argument(..., exists=True, dir_okay=False, help="Right/current version file."),
):
    """List regions where both sides changed the base."""
    try:
        cfg = ctx.obj.config
        _, (diff1, diff2) = _diff_files(cfg, base, left, right)
        result = MergeAligner(cfg).compute(diff1, diff2)
        if not result.has_conflicts:
            console.print("[green]✓[/green] No conflicts")
            return
        for b in result.conflict_blocks:
            console.print(
                f"[bold]#{b.id}[/bold] {cfg.labels.base} {_fmt(b.base_range)}  "
                f"{cfg.labels.incoming} {_fmt(b.output1_range)}  "
                f"{cfg.labels.current} {_fmt(b.output2_range)}",
            )
        raise typer.Exit(2)
    except typer.Exit:
        raise
    except Exception as e:
        _handle_error(e, ctx.obj.verbose)


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config."),
):
    """Write a default .mergealign.yaml."""
    try:
        manager = ctx.obj.config_manager
        if manager.exists() and not force:
            raise ConfigError(f"Config already exists at {manager.config_path}")
        manager.write(MergeAlignConfig())
        console.print(f"[green]✓[/green] Wrote {manager.config_path}")
    except Exception as e:
        _handle_error(e, ctx.obj.verbose)


@app.command()
def version() -> None:
    """Print mergealign version."""
    try:
        from importlib.metadata import version as _pkg_version

        typer.echo(f"mergealign {_pkg_version('mergealign')}")
    except Exception:
        typer.echo("mergealign 0.1.0")


def _main() -> None:
    app()


if __name__ == "__main__":
    _main()
