"""Publishes the active configuration and answers routing queries."""

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from switchyard.loader import Config, load_file
from switchyard.models.labels import LabelSet
from switchyard.models.route import Route

logger = logging.getLogger(__name__)


class NoConfigError(RuntimeError):
    """Raised when a query is made before any configuration was loaded."""


class AlertRouter:
    """Holds the published configuration.

    A reload builds a complete new ``Config`` before swapping it in, so a
    reader always sees either the old or the new configuration, never a mix.
    Callers should read ``config`` once per decision.
    """

    def __init__(self, config: Config | None = None, config_path: str | Path | None = None):
        self._config = config
        self._config_path = Path(config_path) if config_path else None
        self._loaded_at = datetime.now(timezone.utc) if config else None
        self._reload_lock = threading.Lock()

    @property
    def config(self) -> Config | None:
        return self._config

    @property
    def loaded_at(self) -> datetime | None:
        return self._loaded_at

    def reload(self) -> Config:
        """Load the config file again and publish it if it is valid.

        On error the previous configuration stays active and the error is
        raised to the caller.
        """
        if self._config_path is None:
            raise NoConfigError("No config file to reload from")

        with self._reload_lock:
            try:
                config = load_file(self._config_path)
            except Exception as e:
                logger.error(f"Failed to reload config from {self._config_path}: {e}")
                raise
            self._config = config
            self._loaded_at = datetime.now(timezone.utc)

        logger.info(
            f"Loaded config from {self._config_path}: "
            f"{len(config.receivers)} receiver(s), {len(config.inhibit_rules)} inhibit rule(s)"
        )
        return config

    def _require_config(self) -> Config:
        config = self._config
        if config is None:
            raise NoConfigError("No configuration loaded")
        return config

    def find_routes(self, labels: LabelSet) -> list[Route]:
        """Find the routes an alert with ``labels`` is sent to."""
        config = self._require_config()
        routes = config.route.match(labels)
        logger.debug(
            f"Labels {dict(labels)} matched {len(routes)} route(s): "
            f"{[r.opts.receiver for r in routes]}"
        )
        return routes

    def inhibited(self, target: LabelSet, active: Iterable[LabelSet]) -> bool:
        """Whether any active alert inhibits ``target``.

        An alert with the same label set as ``target`` is the target itself
        and never inhibits it.
        """
        config = self._require_config()
        target_labels = dict(target)
        sources = [dict(source) for source in active if dict(source) != target_labels]
        for rule in config.inhibit_rules:
            if not rule.target_matches(target_labels):
                continue
            for source in sources:
                if rule.source_matches(source) and rule.has_equal(source, target_labels):
                    logger.debug(f"Labels {target_labels} inhibited by {source}")
                    return True
        return False
