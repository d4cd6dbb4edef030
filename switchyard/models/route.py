"""Routing tree.

A ``Route`` is built once from a ``RouteSpec`` with every option already
resolved against its ancestors, so matching never walks back up the tree.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Any, Iterator

from switchyard.errors import GroupByError, IntervalError, LabelNameError, RootRouteError
from switchyard.models.document import RouteSpec
from switchyard.models.labels import LabelSet, is_valid_label_name
from switchyard.models.matcher import MatcherSet
from switchyard.models.types import format_duration

logger = logging.getLogger(__name__)

GROUP_BY_ALL = "..."

DEFAULT_GROUP_WAIT = timedelta(seconds=30)
DEFAULT_GROUP_INTERVAL = timedelta(minutes=5)
DEFAULT_REPEAT_INTERVAL = timedelta(hours=4)


@dataclass(frozen=True)
class RouteOpts:
    """Effective receiver and grouping options of a route."""

    receiver: str = ""
    group_by: tuple[str, ...] = ()
    group_by_all: bool = False
    group_wait: timedelta = DEFAULT_GROUP_WAIT
    group_interval: timedelta = DEFAULT_GROUP_INTERVAL
    repeat_interval: timedelta = DEFAULT_REPEAT_INTERVAL

    def group_labels(self, labels: LabelSet) -> dict[str, str]:
        """Labels an alert is grouped on under these options."""
        if self.group_by_all:
            return dict(labels)
        return {name: labels[name] for name in self.group_by if name in labels}

    def to_dict(self) -> dict[str, Any]:
        return {
            "receiver": self.receiver,
            "group_by": [GROUP_BY_ALL] if self.group_by_all else list(self.group_by),
            "group_wait": format_duration(self.group_wait),
            "group_interval": format_duration(self.group_interval),
            "repeat_interval": format_duration(self.repeat_interval),
        }


def parse_group_by(names: list[str] | None) -> tuple[tuple[str, ...] | None, bool]:
    """Split a group_by list into explicit label names and the wildcard flag."""
    if names is None:
        return None, False

    group_by: list[str] = []
    group_by_all = False
    for name in names:
        if name == GROUP_BY_ALL:
            group_by_all = True
            continue
        if not is_valid_label_name(name):
            raise LabelNameError(f"invalid label name {name!r} in group_by list")
        group_by.append(name)

    if group_by and group_by_all:
        raise GroupByError(
            "cannot have wildcard group_by (`...`) and other labels at the same time"
        )

    seen: set[str] = set()
    for name in group_by:
        if name in seen:
            raise GroupByError(f"duplicated label {name!r} in group_by")
        seen.add(name)

    return tuple(group_by), group_by_all


@dataclass(frozen=True, eq=False)
class Route:
    """A node of the routing tree."""

    receiver: str
    exact_matchers: MatcherSet
    regex_matchers: MatcherSet
    continue_: bool
    opts: RouteOpts
    routes: tuple["Route", ...] = ()
    group_by: tuple[str, ...] | None = None
    group_by_all: bool = False
    group_wait: timedelta | None = None
    group_interval: timedelta | None = None
    repeat_interval: timedelta | None = None
    matchers: MatcherSet = field(init=False, repr=False)
    _key: str = field(default="", repr=False)

    def __post_init__(self) -> None:
        matchers = MatcherSet((*self.exact_matchers, *self.regex_matchers))
        object.__setattr__(self, "matchers", matchers)

    @classmethod
    def from_spec(
        cls,
        spec: RouteSpec,
        parent: RouteOpts | None = None,
        parent_key: str | None = None,
        index: int = 0,
    ) -> "Route":
        """Validate ``spec`` and build it and its children."""
        group_by, group_by_all = parse_group_by(spec.group_by)

        if spec.group_interval is not None and not spec.group_interval:
            raise IntervalError("group_interval cannot be zero")
        if spec.repeat_interval is not None and not spec.repeat_interval:
            raise IntervalError("repeat_interval cannot be zero")

        match = MatcherSet.from_maps(match=spec.match)
        match_re = MatcherSet.from_maps(match_re=spec.match_re)

        overrides: dict[str, Any] = {}
        if spec.receiver:
            overrides["receiver"] = spec.receiver
        if group_by is not None:
            overrides["group_by"] = group_by
            overrides["group_by_all"] = group_by_all
        for name in ("group_wait", "group_interval", "repeat_interval"):
            value = getattr(spec, name)
            if value is not None:
                overrides[name] = value
        opts = replace(parent or RouteOpts(), **overrides)

        matchers_str = str(MatcherSet((*match, *match_re)))
        if parent_key is None:
            key = matchers_str
        else:
            key = f"{parent_key}/{index}:{matchers_str}"

        children = tuple(
            cls.from_spec(child, opts, key, i) for i, child in enumerate(spec.routes)
        )

        return cls(
            receiver=spec.receiver,
            exact_matchers=match,
            regex_matchers=match_re,
            continue_=spec.continue_,
            opts=opts,
            routes=children,
            group_by=group_by,
            group_by_all=group_by_all,
            group_wait=spec.group_wait,
            group_interval=spec.group_interval,
            repeat_interval=spec.repeat_interval,
            _key=key,
        )

    def key(self) -> str:
        """Identifier of this route, unique within its tree.

        Each level adds the child position and the matchers, e.g.
        ``{}/0:{severity="critical"}``.
        """
        return self._key

    def match(self, labels: LabelSet) -> list["Route"]:
        """Return the routes an alert with ``labels`` is sent to.

        Children are tried in order. The first matching child ends the
        search unless it has ``continue`` set, in which case its following
        siblings are tried as well. A route without any matching child is
        itself the result.
        """
        if not self.matchers.matches(labels):
            return []

        matched: list[Route] = []
        for child in self.routes:
            found = child.match(labels)
            matched.extend(found)
            if found and not child.continue_:
                break

        if not matched:
            matched.append(self)
        return matched

    def receivers_for(self, labels: LabelSet) -> list[str]:
        return [route.opts.receiver for route in self.match(labels)]

    def walk(self) -> Iterator["Route"]:
        yield self
        for child in self.routes:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self._key,
            "receiver": self.receiver,
            "matchers": [str(m) for m in self.matchers],
            "continue": self.continue_,
            "opts": self.opts.to_dict(),
            "routes": [child.to_dict() for child in self.routes],
        }


def build_route_tree(spec: RouteSpec | None) -> Route:
    """Validate the root route and build the whole tree."""
    if spec is None:
        raise RootRouteError("no routes provided")
    if not spec.receiver:
        raise RootRouteError("root route must specify a default receiver")
    if spec.match or spec.match_re:
        raise RootRouteError("root route must not have any matchers")
    if spec.continue_:
        raise RootRouteError("cannot have continue in root route")

    root = Route.from_spec(spec)
    logger.debug(f"Built routing tree with {sum(1 for _ in root.walk())} route(s)")
    return root
