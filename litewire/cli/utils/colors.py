"""
LiteWire CLI - UI toolkit.

Styled output primitives built on Click:

    Output helpers:
        success(), error(), warning(), info(), dim(), bold()

    Structural elements:
        banner()        - branded header with box drawing
        section()       - section divider with title
        kv()            - key-value pair, aligned
        table()         - minimal aligned table
        bullet()        - bulleted list item

    Files:
        file_written(), file_skipped()

All output respects terminal width and degrades gracefully on
non-colour terminals (click.style handles NO_COLOR / TERM=dumb).
Helpers accept ``err=True`` to write to stderr, keeping stdout clean
for machine-readable output.
"""

from __future__ import annotations

import shutil
from typing import Optional, Sequence

import click

# ═══════════════════════════════════════════════════════════════════════════
# Terminal helpers
# ═══════════════════════════════════════════════════════════════════════════

_TERM_WIDTH: Optional[int] = None


def _tw() -> int:
    """Terminal width, cached and clamped to a sane range."""
    global _TERM_WIDTH
    if _TERM_WIDTH is None:
        _TERM_WIDTH = max(40, min(shutil.get_terminal_size((80, 24)).columns, 120))
    return _TERM_WIDTH


# ═══════════════════════════════════════════════════════════════════════════
# Basic styled output
# ═══════════════════════════════════════════════════════════════════════════


def success(message: str, *, err: bool = False) -> None:
    """Print success message in green."""
    click.echo(click.style(message, fg="green"), err=err)


def error(message: str, *, err: bool = True) -> None:
    """Print error message in red (stderr by default)."""
    click.echo(click.style(message, fg="red"), err=err)


def warning(message: str, *, err: bool = False) -> None:
    """Print warning message in yellow."""
    click.echo(click.style(message, fg="yellow"), err=err)


def info(message: str, *, err: bool = False) -> None:
    """Print info message in cyan."""
    click.echo(click.style(message, fg="cyan"), err=err)


def dim(message: str, *, err: bool = False) -> None:
    """Print dimmed message."""
    click.echo(click.style(message, dim=True), err=err)


def bold(message: str) -> str:
    """Return bold-styled text (does not echo)."""
    return click.style(message, bold=True)


# ═══════════════════════════════════════════════════════════════════════════
# Box-drawing characters
# ═══════════════════════════════════════════════════════════════════════════

_H_TL = "┏"   # ┏
_H_TR = "┓"   # ┓
_H_BL = "┗"   # ┗
_H_BR = "┛"   # ┛
_H_H  = "━"   # ━
_H_V  = "┃"   # ┃

_L_H  = "─"   # ─

_BULLET = "•"     # •
_ARROW  = "→"     # →
_CHECK  = "✓"     # ✓
_CIRCLE = "○"     # ○


# ═══════════════════════════════════════════════════════════════════════════
# Banner / Section
# ═══════════════════════════════════════════════════════════════════════════


def banner(
    title: str = "LiteWire",
    subtitle: str = "",
    *,
    width: Optional[int] = None,
    fg: str = "cyan",
) -> None:
    """
    Print a bordered banner with centred title.

        ┏━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓
        ┃                     LiteWire                        ┃
        ┃        minimal wiring for isolated tests            ┃
        ┗━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┛
    """
    w = width or min(_tw(), 60)
    inner = w - 2
    click.echo(click.style(f"{_H_TL}{_H_H * inner}{_H_TR}", fg=fg))
    click.echo(click.style(f"{_H_V}{title.center(inner)}{_H_V}", fg=fg, bold=True))
    if subtitle:
        click.echo(click.style(f"{_H_V}{subtitle.center(inner)}{_H_V}", fg=fg))
    click.echo(click.style(f"{_H_BL}{_H_H * inner}{_H_BR}", fg=fg))


def section(title: str, *, width: Optional[int] = None, fg: str = "cyan", err: bool = False) -> None:
    """
    Print a section header with a ruled line.

        ── Scan ─────────────────────────────────
    """
    w = width or _tw()
    dashes = max(4, w - len(title) - 6)
    line = f"{_L_H}{_L_H} {title} {_L_H * dashes}"
    click.echo(click.style(line, fg=fg, bold=True), err=err)


# ═══════════════════════════════════════════════════════════════════════════
# Key / Value, lists
# ═══════════════════════════════════════════════════════════════════════════


def kv(
    key: str,
    value: str,
    *,
    key_width: int = 20,
    indent: int = 2,
    val_fg: str = "cyan",
    err: bool = False,
) -> None:
    """
    Print an aligned key-value pair.

        Visited:          42
        Beans:            7
    """
    prefix = " " * indent
    k = click.style(f"{key}:", fg="white")
    v = click.style(str(value), fg=val_fg)
    padding = " " * max(1, key_width - len(key) - 1)
    click.echo(f"{prefix}{k}{padding}{v}", err=err)


def bullet(text: str, *, indent: int = 2, fg: str = "white", err: bool = False) -> None:
    """Print a bulleted list item."""
    prefix = " " * indent
    click.echo(f"{prefix}{click.style(_BULLET, fg='cyan')} {click.style(text, fg=fg)}", err=err)


# ═══════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════


def table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    indent: int = 2,
    err: bool = False,
) -> None:
    """
    Print a minimal aligned table.

        Id                  Kind                      Class
        ─────────────────── ───────────────────────── ──────────────────
        orderService        managed_component         com.acme.OrderService
    """
    prefix = " " * indent
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[:len(headers)]):
            widths[i] = max(widths[i], len(str(cell)))
    widths = [w + 2 for w in widths]

    hdr = "".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    click.echo(f"{prefix}{click.style(hdr, fg='cyan', bold=True)}", err=err)
    sep = "".join(_L_H * w for w in widths)
    click.echo(f"{prefix}{click.style(sep, dim=True)}", err=err)
    for row in rows:
        line = "".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row[:len(headers)]))
        click.echo(f"{prefix}{line}", err=err)


# ═══════════════════════════════════════════════════════════════════════════
# Files
# ═══════════════════════════════════════════════════════════════════════════


def file_written(label: str, *, path: str = "") -> None:
    """Announce a generated file."""
    mark = click.style(f"  {_CHECK}", fg="green")
    click.echo(f"{mark} {click.style(label, fg='white')}")
    if path:
        dim(f"    {_ARROW} {path}")


def file_skipped(label: str, reason: str = "exists") -> None:
    """Announce a skipped file."""
    mark = click.style(f"  {_CIRCLE}", fg="yellow")
    name = click.style(label, fg="white", dim=True)
    hint = click.style(f"({reason})", dim=True)
    click.echo(f"{mark} {name} {hint}")
