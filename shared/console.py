"""
PeWalk Console Interface
=========================

Rich-powered console abstraction providing one presentation layer for the
toolkit: section rules, severity-coloured messages, key/value panels and
tables, all with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------
_TOOL_THEME = Theme(
    {
        "tool.section": "bold bright_magenta",
        "tool.success": "bold green",
        "tool.warning": "bold yellow",
        "tool.error": "bold red",
        "tool.info": "bold bright_blue",
        "tool.dim": "dim white",
        "tool.key": "bold bright_white",
    }
)


class ToolConsole:
    """Unified console interface.

    Usage::

        con = ToolConsole()
        con.section("NT Head")
        con.success("Walk complete")
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        width: int | None = None,
    ) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording so output can be exported as text.
            width:  Fixed render width; ``None`` lets Rich detect it.
        """
        self._console = Console(
            theme=_TOOL_THEME,
            quiet=quiet,
            record=record,
            width=width,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Section header
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(f"  {title}  ", style="tool.section", characters="─")
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(f"[tool.success][✔] SUCCESS:[/tool.success] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[tool.warning][⚠] WARNING:[/tool.warning] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[tool.error][✘] ERROR:[/tool.error] {message}")

    def info(self, message: str) -> None:
        self._console.print(f"[tool.info][ℹ] INFO:[/tool.info] {message}")

    # ------------------------------------------------------------------ #
    #  Panels and tables
    # ------------------------------------------------------------------ #

    def key_value_panel(
        self,
        title: str,
        pairs: Sequence[tuple[str, Any]],
    ) -> None:
        """Render aligned ``label: value`` lines inside a bordered panel.

        Args:
            title: Panel title.
            pairs: ``(label, value)`` tuples; values are stringified.
        """
        width = max((len(label) for label, _ in pairs), default=0) + 1
        lines = [
            f"[tool.key]{(label + ':').ljust(width)}[/tool.key] {value}"
            for label, value in pairs
        ]
        panel = Panel(
            "\n".join(lines),
            title=f"[bold bright_cyan]{title}[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        justify: Sequence[str] | None = None,
    ) -> None:
        """Render a styled Rich table.

        Args:
            title:    Table title.
            columns:  Column header labels.
            rows:     Row tuples; each element is stringified.
            caption:  Optional footer caption.
            justify:  Optional per-column justification (``"left"``, ``"right"``).
        """
        tbl = Table(
            title=title,
            caption=caption,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 1),
        )
        for idx, col_name in enumerate(columns):
            just = justify[idx] if justify and idx < len(justify) else "left"
            tbl.add_column(col_name, justify=just)  # type: ignore[arg-type]

        for row in rows:
            tbl.add_row(*(str(cell) for cell in row))

        self._console.print(tbl)

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded output as plain text (requires ``record=True``)."""
        return self._console.export_text()
