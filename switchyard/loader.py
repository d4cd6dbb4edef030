"""Configuration loading.

``load`` turns a YAML document into an immutable ``Config`` in one pass:
decode, apply global defaults, validate. It either returns a complete
``Config`` or raises the first ``ConfigError`` it finds.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path

import yaml
from pydantic import ValidationError

from switchyard.defaults import apply_receiver_defaults
from switchyard.errors import ReceiverError, StructuralDecodeError
from switchyard.models.document import ConfigDocument
from switchyard.models.inhibit import InhibitRule
from switchyard.models.receivers import GlobalConfig, Receiver
from switchyard.models.route import Route, build_route_tree

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Config:
    """Loaded, defaulted and validated configuration."""

    global_config: GlobalConfig
    route: Route
    inhibit_rules: tuple[InhibitRule, ...] = ()
    receivers: tuple[Receiver, ...] = ()
    templates: tuple[str, ...] = ()
    document: ConfigDocument = field(default_factory=ConfigDocument, repr=False)
    original: str = field(default="", repr=False)

    def receiver(self, name: str) -> Receiver | None:
        for receiver in self.receivers:
            if receiver.name == name:
                return receiver
        return None

    def dump(self) -> str:
        """Render the effective configuration as YAML with secrets redacted."""
        data = self.document.model_dump(mode="json", by_alias=True, exclude_none=True)
        data["templates"] = list(self.templates)
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

    def __str__(self) -> str:
        return self.dump()


def _check_receivers(route: Route, receivers: set[str]) -> None:
    for child in route.routes:
        _check_receivers(child, receivers)
    if route.receiver and route.receiver not in receivers:
        raise ReceiverError(f"undefined receiver {route.receiver!r} used in route")


def build_config(document: ConfigDocument, original: str = "") -> Config:
    """Default and validate a decoded document."""
    global_config = document.global_ or GlobalConfig()

    names: set[str] = set()
    receivers: list[Receiver] = []
    for receiver in document.receivers:
        if not receiver.name:
            raise ReceiverError("missing name in receiver")
        if receiver.name in names:
            raise ReceiverError(f"notification config name {receiver.name!r} is not unique")
        receivers.append(apply_receiver_defaults(receiver, global_config))
        names.add(receiver.name)

    route = build_route_tree(document.route)
    _check_receivers(route, names)

    inhibit_rules = tuple(InhibitRule.from_spec(spec) for spec in document.inhibit_rules)

    effective = document.model_copy(update={"global_": global_config, "receivers": receivers})
    return Config(
        global_config=global_config,
        route=route,
        inhibit_rules=inhibit_rules,
        receivers=tuple(receivers),
        templates=tuple(document.templates),
        document=effective,
        original=original,
    )


def load(text: str) -> Config:
    """Load a configuration from YAML text."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise StructuralDecodeError(f"invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise StructuralDecodeError("configuration must be a YAML mapping")

    try:
        document = ConfigDocument.model_validate(data)
    except ValidationError as e:
        raise StructuralDecodeError(str(e)) from e

    config = build_config(document, original=text)
    logger.debug(
        f"Loaded config: {len(config.receivers)} receiver(s), "
        f"{len(config.inhibit_rules)} inhibit rule(s)"
    )
    return config


def resolve_template_paths(config: Config, base_dir: str | Path) -> Config:
    """Return ``config`` with relative template paths joined to ``base_dir``."""
    base = Path(base_dir)
    templates = tuple(
        str(base / tpl) if tpl and not Path(tpl).is_absolute() else tpl
        for tpl in config.templates
    )
    return replace(config, templates=templates)


def load_file(config_path: str | Path) -> Config:
    """Load a configuration file, resolving templates relative to its directory."""
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    config = load(content)
    return resolve_template_paths(config, path.parent)
