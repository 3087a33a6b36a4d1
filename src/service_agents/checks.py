from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from .config import AuthScheme, ServiceSettings
from .errors import ConfigurationError, ServiceAgentError
from .loader import build_service_settings, read_json, service_entries
from .models import CheckResult, Section, Severity
from .resolver import candidate_types, resolve


class ConfigChecks:
    """Validates a service agent settings file entry by entry."""

    def __init__(self, path: Path, section: str = "ServiceAgents", module: Optional[str] = None) -> None:
        self.path = path
        self.section = section
        self.module = module

    def run(self) -> List[Section]:
        source = Section(title="Source")
        entries = self._source(source)
        sections = [source]
        if entries is None:
            return sections

        services = Section(title="Services")
        self._services(entries, services)
        sections.append(services)

        if self.module:
            sections.append(self._agents(list(entries[1])))
        return sections

    # ---------------------------
    # Source document
    # ---------------------------
    def _source(self, out: Section) -> Optional[Tuple[Dict[str, Any], Dict[str, Any]]]:
        try:
            document = read_json(self.path)
        except ConfigurationError as e:
            out.add(CheckResult(rule="CFG-001", ok=False, message=str(e)))
            return None
        out.add(CheckResult(rule="CFG-001", ok=True, message=f"Parsed {self.path}", severity=Severity.INFO))

        try:
            defaults, entries = service_entries(document, self.section)
        except ConfigurationError as e:
            out.add(CheckResult(rule="CFG-002", ok=False, message=str(e)))
            return None
        out.add(CheckResult(
            rule="CFG-002",
            ok=bool(entries),
            message=f"{len(entries)} service(s) declared" if entries else "no services declared",
            severity=Severity.INFO if entries else Severity.WARN,
        ))
        return dict(defaults), entries

    # ---------------------------
    # Service entries
    # ---------------------------
    def _services(self, entries: Tuple[Dict[str, Any], Dict[str, Any]], out: Section) -> None:
        defaults, raw_entries = entries
        for name, raw in raw_entries.items():
            try:
                settings = build_service_settings(name, raw, defaults)
            except ConfigurationError as e:
                out.add(CheckResult(rule="SVC-001", ok=False, message=str(e), service=name))
                continue
            url = settings.base_url()
            out.add(CheckResult(rule="SVC-001", ok=True, message=f"{name} -> {url}", severity=Severity.INFO, service=name))
            out.extend(self._transport(name, settings, url))

    def _transport(self, name: str, settings: ServiceSettings, url: str) -> List[CheckResult]:
        out: List[CheckResult] = []
        if urlparse(url).scheme != "https":
            out.append(CheckResult(
                rule="SVC-TLS",
                ok=False,
                message=f"{name} uses plain http",
                severity=Severity.WARN,
                service=name,
            ))
        if not settings.verify_tls:
            out.append(CheckResult(
                rule="SVC-VERIFY",
                ok=False,
                message=f"{name} disables TLS verification",
                severity=Severity.WARN,
                service=name,
            ))
        if settings.auth_scheme == AuthScheme.BEARER and not settings.bearer_token:
            out.append(CheckResult(
                rule="SVC-AUTH",
                ok=False,
                message=f"{name} uses bearer auth without a static token",
                severity=Severity.WARN,
                service=name,
            ))
        if settings.auth_scheme == AuthScheme.OAUTH_CLIENT_CREDENTIALS:
            out.append(CheckResult(
                rule="SVC-AUTH",
                ok=True,
                message=f"{name} needs a token helper in the container",
                severity=Severity.INFO,
                service=name,
            ))
        return out

    # ---------------------------
    # Agent resolution
    # ---------------------------
    def _agents(self, names: List[str]) -> Section:
        s = Section(title="Agents")
        try:
            candidates = candidate_types(self.module)
        except ImportError as e:
            s.add(CheckResult(rule="AGT-000", ok=False, message=f"Cannot import {self.module}: {e}"))
            return s
        for name in names:
            try:
                agent = resolve(candidates, name)
            except ServiceAgentError as e:
                s.add(CheckResult(rule="AGT-001", ok=False, message=str(e), service=name))
                continue
            s.add(CheckResult(
                rule="AGT-001",
                ok=True,
                message=f"{name} -> {agent.__module__}.{agent.__name__}",
                severity=Severity.INFO,
                service=name,
            ))
        return s
