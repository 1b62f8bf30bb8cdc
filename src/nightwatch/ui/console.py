"""Rich-powered console output for Nightwatch."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.table import Table

from nightwatch.patterns import PatternSet
from nightwatch.signals import FatigueSignal, SensitiveFinding


class Console:
    """Terminal output for Nightwatch using Rich."""

    def __init__(self) -> None:
        self.console = RichConsole()

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def raw(self, text: str) -> None:
        """Print text untouched (no markup, no highlighting)."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def show_fatigue(self, signal: FatigueSignal, tz_name: str) -> None:
        color = "yellow" if signal.fatigue else "green"
        verdict = "Fatigue detected" if signal.fatigue else "No fatigue signal"
        self.console.print(
            Panel(
                f"[bold]{verdict}[/bold]\n"
                f"Late-night commits in the last 7 days: [{color}]{signal.late_week_count}[/{color}]\n"
                f"[dim]Hours read in {tz_name}[/dim]",
                title="[bold]Developer State[/bold]",
                border_style=color,
            )
        )

    def show_findings(self, findings: list[SensitiveFinding]) -> None:
        """Display sensitive-file findings."""
        if not findings:
            self.success("No sensitive files detected")
            return

        table = Table(title="Sensitive Artifacts", border_style="red")
        table.add_column("Status")
        table.add_column("File", style="bold")
        table.add_column("Pattern", style="cyan")
        table.add_column("Reason")
        for f in findings:
            table.add_row(f.status, f.file, f.matched_pattern, f.reason)
        self.console.print(table)

    def show_patterns(self, pattern_set: PatternSet, source: str) -> None:
        """Display the active pattern set."""
        table = Table(title=f"Active Patterns ({source})", border_style="cyan")
        table.add_column("Kind", style="bold")
        table.add_column("Pattern", style="cyan")
        table.add_column("Reason")

        for rule in pattern_set.allowed:
            table.add_row("allow", rule.source, rule.reason or "")
        table.add_section()
        for rule in pattern_set.banned:
            table.add_row("banned", rule.source, rule.reason or "[dim]derived[/dim]")

        self.console.print(table)
