"""Errors raised while loading a configuration.

Every error is fatal to the load pass. The first violation found is raised
and nothing from the failed load is published.
"""


class ConfigError(Exception):
    """Base class for configuration errors."""


class StructuralDecodeError(ConfigError):
    """Input is not well-formed YAML or does not fit the document schema."""


class RootRouteError(ConfigError):
    """Root route is missing or has an invalid shape."""


class ReceiverError(ConfigError):
    """Receiver name is empty, duplicated or undefined."""


class LabelNameError(ConfigError):
    """A label name does not satisfy the label name grammar."""


class RegexError(ConfigError):
    """A regular expression does not compile."""


class InvalidValueError(ConfigError):
    """A label value is empty or not valid UTF-8."""


class GroupByError(ConfigError):
    """Invalid group_by list."""


class IntervalError(ConfigError):
    """A grouping or repeat interval is explicitly set to zero."""


class ChannelConfigError(ConfigError):
    """A channel config is missing a field that has no global fallback."""


class MissingGlobalDefaultError(ConfigError):
    """A channel field is unset and the global config has no value for it."""

    def __init__(self, provider: str, field: str):
        self.provider = provider
        self.field = field
        super().__init__(f"no global {provider} {field} set")
