"""Value types shared by the configuration models."""

import json
import re
from datetime import date, timedelta
from typing import Annotated, Any, NamedTuple
from urllib.parse import urlsplit, urlunsplit

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    HttpUrl,
    PlainSerializer,
    SecretStr,
    TypeAdapter,
    ValidationError,
)

# Rendered in place of every sensitive value on output.
SECRET_TOKEN = "<secret>"
SECRET_TOKEN_JSON = json.dumps(SECRET_TOKEN)

_DURATION_RE = re.compile(
    r"^(?:(\d+)y)?(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$"
)

_DURATION_UNITS = (
    ("y", 365 * 24 * 60 * 60 * 1000),
    ("w", 7 * 24 * 60 * 60 * 1000),
    ("d", 24 * 60 * 60 * 1000),
    ("h", 60 * 60 * 1000),
    ("m", 60 * 1000),
    ("s", 1000),
    ("ms", 1),
)

_URL_ADAPTER = TypeAdapter(HttpUrl)


def scalar_to_str(value: Any) -> Any:
    """Render a YAML scalar as the text it was written as.

    YAML turns unquoted ``500``, ``true`` or ``2024-01-01`` into numbers, booleans
    and dates. String fields take them as plain text. Other values pass
    through to the regular validation.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


def parse_duration(value: Any) -> timedelta:
    """Parse a duration such as ``5m``, ``1h30m`` or ``0s``."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ValueError(f"duration must be a string, got {type(value).__name__}")
    if value == "0":
        return timedelta(0)

    match = _DURATION_RE.fullmatch(value)
    if not value or match is None:
        raise ValueError(f"not a valid duration string: {value!r}")

    millis = 0
    for group, (_, unit_ms) in zip(match.groups(), _DURATION_UNITS):
        if group:
            millis += int(group) * unit_ms
    return timedelta(milliseconds=millis)


def format_duration(value: timedelta) -> str:
    millis = value // timedelta(milliseconds=1)
    if millis == 0:
        return "0s"

    parts = []
    for unit, unit_ms in _DURATION_UNITS:
        count, millis = divmod(millis, unit_ms)
        if count:
            parts.append(f"{count}{unit}")
    return "".join(parts)


class HostPort(NamedTuple):
    host: str
    port: str

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_host_port(value: Any) -> HostPort | None:
    """Parse ``host:port``; an empty string means unset."""
    if value is None or isinstance(value, HostPort):
        return value
    if not isinstance(value, str):
        raise ValueError(f"address must be a string, got {type(value).__name__}")
    if value == "":
        return None

    host, sep, port = value.rpartition(":")
    if not sep:
        raise ValueError(f"address {value!r}: missing port in address")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"address {value!r}: too many colons in address")
    if port == "":
        raise ValueError(f"address {value!r}: port cannot be empty")
    return HostPort(host, port)


def ensure_trailing_slash(url: HttpUrl) -> HttpUrl:
    """Return ``url`` with a path ending in ``/``."""
    parts = urlsplit(str(url))
    if parts.path.endswith("/"):
        return url
    return HttpUrl(urlunsplit(parts._replace(path=parts.path + "/")))


def _parse_secret_url(value: Any) -> SecretStr:
    if isinstance(value, SecretStr):
        return value
    # A redacted dump loads back as an empty but present URL.
    if value in (SECRET_TOKEN, SECRET_TOKEN_JSON):
        return SecretStr("")
    try:
        url = _URL_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"invalid URL: {e.errors()[0]['msg']}") from e
    return SecretStr(str(url))


def _redact_secret(value: SecretStr) -> str | None:
    return SECRET_TOKEN if value.get_secret_value() else None


Text = Annotated[str, BeforeValidator(scalar_to_str)]

Duration = Annotated[
    timedelta,
    BeforeValidator(parse_duration),
    PlainSerializer(format_duration, return_type=str, when_used="json-unless-none"),
]

Address = Annotated[
    HostPort | None,
    BeforeValidator(parse_host_port),
    PlainSerializer(lambda v: str(v) if v else None, when_used="json-unless-none"),
]

Secret = Annotated[
    SecretStr,
    BeforeValidator(scalar_to_str),
    PlainSerializer(_redact_secret, when_used="json-unless-none"),
]

SecretURL = Annotated[
    SecretStr,
    BeforeValidator(_parse_secret_url),
    PlainSerializer(lambda _: SECRET_TOKEN, return_type=str, when_used="json-unless-none"),
]


class DocumentModel(BaseModel):
    """Base for decoded configuration models: strict and immutable."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)
