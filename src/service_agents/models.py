from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional


class Severity(str, Enum):
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one configuration rule, for the document or one service entry."""
    rule: str
    ok: bool
    message: str
    severity: Severity = Severity.ERROR
    service: Optional[str] = None

    @property
    def level(self) -> str:
        """``ok``, ``warn`` or ``error``; a failed info-level rule counts as ok."""
        if self.ok or self.severity == Severity.INFO:
            return "ok"
        return self.severity.value


@dataclass
class Section:
    """Results of one check stage (source, services, agents)."""
    title: str
    results: List[CheckResult] = field(default_factory=list)

    def add(self, item: CheckResult) -> None:
        self.results.append(item)

    def extend(self, items: Iterable[CheckResult]) -> None:
        self.results.extend(items)

    def counts(self) -> Counter:
        counts = Counter({"ok": 0, "warn": 0, "error": 0})
        counts.update(r.level for r in self.results)
        return counts

    def has_failures(self) -> bool:
        return self.counts()["error"] > 0

    def failed_services(self) -> List[str]:
        """Services with at least one error, sorted."""
        return sorted({r.service for r in self.results if r.service and r.level == "error"})
