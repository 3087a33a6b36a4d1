from __future__ import annotations
from collections import Counter

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.text import Text
from .config import ServiceAgentSettings
from .models import Section

STATUS_ICONS = {"ok": "✅", "warn": "⚠️", "error": "❌"}


class Reporter:
    def __init__(self, console: Console) -> None:
        self.console = console

    def section(self, section: Section) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Status", width=8)
        table.add_column("Rule", style="bold")
        table.add_column("Service")
        table.add_column("Message")
        for r in section.results:
            status = STATUS_ICONS[r.level]
            table.add_row(status, r.rule, r.service or "-", r.message)
        self.console.print(Panel.fit(table, title=Text(section.title, style="bold blue")))

    def services(self, settings: ServiceAgentSettings) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Service", style="bold")
        table.add_column("Base URL")
        table.add_column("Auth")
        table.add_column("Headers")
        for name, s in settings.items():
            table.add_row(name, s.base_url(), s.auth_scheme.value, ", ".join(sorted(s.headers)) or "-")
        self.console.print(Panel.fit(table, title=Text("Service agents", style="bold blue")))

    @staticmethod
    def count_levels(sections: list[Section]) -> tuple[int, int, int]:
        total = sum((s.counts() for s in sections), Counter())
        return total["ok"], total["warn"], total["error"]

    def summary_exit_code(self, sections: list[Section]) -> int:
        has_error = any(s.has_failures() for s in sections)
        return 1 if has_error else 0

    def summary(self, sections: list[Section]) -> None:
        ok, warn, err = self.count_levels(sections)
        table = Table(show_header=True, header_style="bold")
        table.add_column("OK")
        table.add_column("WARN")
        table.add_column("ERROR")
        table.add_row(str(ok), str(warn), str(err))
        if err > 0:
            style = "bold red"
        elif warn > 0:
            style = "bold yellow"
        else:
            style = "bold green"
        failed = sorted({name for s in sections for name in s.failed_services()})
        if failed:
            table.caption = f"Failing services: {', '.join(failed)}"
        self.console.print(Panel.fit(table, title=Text("Summary", style=style)))
