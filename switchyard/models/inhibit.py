"""Inhibition rules."""

from dataclasses import dataclass

from switchyard.errors import LabelNameError
from switchyard.models.document import InhibitRuleSpec
from switchyard.models.labels import LabelSet, is_valid_label_name
from switchyard.models.matcher import MatcherSet


@dataclass(frozen=True)
class InhibitRule:
    """Suppresses target alerts while a matching source alert is active.

    The rule only judges a given (source, target) pair. Picking the pairs,
    and never letting an alert inhibit itself, is up to the caller.
    """

    source_matchers: MatcherSet
    target_matchers: MatcherSet
    equal: frozenset[str] = frozenset()

    @classmethod
    def from_spec(cls, spec: InhibitRuleSpec) -> "InhibitRule":
        for name in spec.equal:
            if not is_valid_label_name(name):
                raise LabelNameError(f"invalid label name {name!r} in equal list")

        return cls(
            source_matchers=MatcherSet.from_maps(spec.source_match, spec.source_match_re),
            target_matchers=MatcherSet.from_maps(spec.target_match, spec.target_match_re),
            equal=frozenset(spec.equal),
        )

    def source_matches(self, labels: LabelSet) -> bool:
        return self.source_matchers.matches(labels)

    def target_matches(self, labels: LabelSet) -> bool:
        return self.target_matchers.matches(labels)

    def has_equal(self, source: LabelSet, target: LabelSet) -> bool:
        """Whether both label sets agree on every ``equal`` label.

        A label missing from both sides counts as equal.
        """
        return all(source.get(name, "") == target.get(name, "") for name in self.equal)

    def suppresses(self, source: LabelSet, target: LabelSet) -> bool:
        return (
            self.source_matches(source)
            and self.target_matches(target)
            and self.has_equal(source, target)
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "source_matchers": [str(m) for m in self.source_matchers],
            "target_matchers": [str(m) for m in self.target_matchers],
            "equal": sorted(self.equal),
        }
