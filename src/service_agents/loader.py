from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from .config import ServiceAgentSettings, ServiceSettings, ServiceSettingsJsonFile
from .errors import ConfigurationError, InvalidArgumentError

log = logging.getLogger("service_agents.loader")

GLOBAL_KEY = "global"

SettingsSource = Union[str, Path, ServiceSettingsJsonFile, Mapping[str, Any]]


def read_json(path: Path) -> Any:
    if not path.is_file():
        raise ConfigurationError(f"Settings file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Settings file {path} is not valid JSON: {e}") from e


def service_entries(document: Any, section: str = "ServiceAgents") -> Tuple[Mapping[str, Any], Dict[str, Any]]:
    """Split a decoded document into global defaults and per-service entries."""
    if not isinstance(document, Mapping):
        raise ConfigurationError("Settings document must be a JSON object")
    if section and section in document:
        document = document[section]
        if not isinstance(document, Mapping):
            raise ConfigurationError(f"Section '{section}' must be a JSON object")
    defaults = document.get(GLOBAL_KEY) or {}
    if not isinstance(defaults, Mapping):
        raise ConfigurationError(f"'{GLOBAL_KEY}' settings must be a JSON object")
    return defaults, {name: raw for name, raw in document.items() if name != GLOBAL_KEY}


def _validate(name: str, data: Mapping[str, Any]) -> ServiceSettings:
    try:
        return ServiceSettings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings for service '{name}': {e.errors()}") from e


def build_service_settings(name: str, raw: Any, defaults: Optional[Mapping[str, Any]] = None) -> ServiceSettings:
    """Validate one service entry, with ``defaults`` merged underneath it.

    Both sides are validated on their own first, so the merge works on field
    names whatever key casing each side uses. ``headers`` merge per header.
    """
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Settings for service '{name}' must be a JSON object")
    entry = _validate(name, raw)
    if defaults:
        base = _validate(GLOBAL_KEY, defaults)
        data = {**base.model_dump(exclude_unset=True), **entry.model_dump(exclude_unset=True)}
        data["headers"] = {**base.headers, **entry.headers}
        settings = _validate(name, data)
    else:
        settings = entry
    try:
        settings.validate_for_registration()
    except ConfigurationError as e:
        raise ConfigurationError(f"Invalid settings for service '{name}': {e}") from e
    return settings


def parse_settings(document: Any, section: str = "ServiceAgents") -> ServiceAgentSettings:
    """Parse a decoded document into ServiceAgentSettings.

    The document is either ``{name: settings}`` or wraps that mapping in
    ``section``. A ``global`` entry supplies defaults for every service.
    """
    defaults, entries = service_entries(document, section)
    result = ServiceAgentSettings()
    for name, raw in entries.items():
        result.add(name, build_service_settings(name, raw, defaults))
    log.debug("Parsed settings for %d service(s): %s", len(result), ", ".join(result.names()) or "-")
    return result


def load(source: SettingsSource) -> ServiceAgentSettings:
    """Load settings from a file path, a ServiceSettingsJsonFile or an in-memory mapping."""
    if isinstance(source, ServiceSettingsJsonFile):
        path = Path(source.file_name)
        log.info("Loading service agent settings from %s", path)
        return parse_settings(read_json(path), source.section)
    if isinstance(source, (str, Path)):
        path = Path(source)
        log.info("Loading service agent settings from %s", path)
        return parse_settings(read_json(path))
    if isinstance(source, Mapping):
        return parse_settings(source)
    raise ConfigurationError(f"Unsupported settings source: {type(source).__name__}")


def load_settings(
    json_file_setup: Optional[Callable[[ServiceSettingsJsonFile], None]] = None,
    settings_setup: Optional[Callable[[ServiceAgentSettings], None]] = None,
    data: Optional[Mapping[str, Any]] = None,
) -> ServiceAgentSettings:
    """Build settings from a file and/or in-memory data, then apply the override callback.

    Entries added by ``settings_setup`` replace file entries with the same name.
    """
    if json_file_setup is None and data is None and settings_setup is None:
        raise InvalidArgumentError("json_file_setup")

    settings = ServiceAgentSettings()
    if json_file_setup is not None:
        json_file = ServiceSettingsJsonFile()
        json_file_setup(json_file)
        settings.merge(load(json_file))
    if data is not None:
        settings.merge(load(data))

    if settings_setup is not None:
        settings_setup(settings)
        for name, service in settings.items():
            try:
                service.validate_for_registration()
            except ConfigurationError as e:
                raise ConfigurationError(f"Invalid settings for service '{name}': {e}") from e
    return settings
