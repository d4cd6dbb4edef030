"""Label matchers."""

import json
import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from switchyard.errors import InvalidValueError, LabelNameError, RegexError
from switchyard.models.labels import LabelSet, is_valid_label_name, is_valid_label_value


def compile_anchored(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` so that it only matches a whole label value."""
    try:
        return re.compile(f"^(?:{pattern})$")
    except re.error as e:
        raise RegexError(f"invalid regular expression {pattern!r}: {e}") from e


@dataclass(frozen=True)
class Matcher:
    """Matches the value of one label, either exactly or by regex.

    The regex is compiled when the matcher is created, so a constructed
    matcher is always ready to use.
    """

    name: str
    value: str
    is_regex: bool = False
    regex: re.Pattern[str] | None = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.is_regex:
            object.__setattr__(self, "regex", compile_anchored(self.value))

    @property
    def sort_key(self) -> tuple[str, str, bool]:
        # Exact matchers sort before regex matchers on equal name and value.
        return (self.name, self.value, self.is_regex)

    def validate(self) -> None:
        if not is_valid_label_name(self.name):
            raise LabelNameError(f"invalid name {self.name!r}")
        if self.is_regex:
            # Compiled in __post_init__.
            return
        if not self.value or not is_valid_label_value(self.value):
            raise InvalidValueError(f"invalid value {self.value!r}")

    def matches(self, labels: LabelSet) -> bool:
        value = labels.get(self.name, "")
        if self.is_regex:
            return self.regex.fullmatch(value) is not None
        return value == self.value

    def __str__(self) -> str:
        op = "=~" if self.is_regex else "="
        return f"{self.name}{op}{json.dumps(self.value, ensure_ascii=False)}"


class MatcherSet(tuple):
    """Sorted conjunction of matchers."""

    def __new__(cls, matchers: Iterable[Matcher] = ()):
        return super().__new__(cls, sorted(matchers, key=lambda m: m.sort_key))

    @classmethod
    def from_maps(
        cls,
        match: Mapping[str, str] | None = None,
        match_re: Mapping[str, str] | None = None,
    ) -> "MatcherSet":
        """Build a set from ``match`` / ``match_re`` config maps."""
        matchers = []
        for name, value in (match or {}).items():
            if not is_valid_label_name(name):
                raise LabelNameError(f"invalid label name {name!r}")
            matchers.append(Matcher(name, value))
        for name, value in (match_re or {}).items():
            if not is_valid_label_name(name):
                raise LabelNameError(f"invalid label name {name!r}")
            matchers.append(Matcher(name, value, is_regex=True))
        return cls(matchers)

    def matches(self, labels: LabelSet) -> bool:
        return all(m.matches(labels) for m in self)

    def __str__(self) -> str:
        return "{" + ",".join(str(m) for m in self) + "}"

    def __repr__(self) -> str:
        return f"MatcherSet({str(self)})"


def new_matchers(*matchers: Matcher) -> MatcherSet:
    return MatcherSet(matchers)
