"""Tests for the routing tree."""

from datetime import timedelta

import pytest

from switchyard.errors import GroupByError, IntervalError, LabelNameError, RootRouteError
from switchyard.models.document import RouteSpec
from switchyard.models.route import (
    DEFAULT_GROUP_INTERVAL,
    DEFAULT_GROUP_WAIT,
    DEFAULT_REPEAT_INTERVAL,
    build_route_tree,
    parse_group_by,
)


def make_tree(data: dict):
    return build_route_tree(RouteSpec.model_validate(data))


class TestRouteMatching:
    """Tests for resolving alerts against the tree."""

    def test_first_match_stops(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {"match": {"severity": "critical"}, "receiver": "pager"},
                    {"match": {"team": "x"}, "receiver": "team-x"},
                ],
            }
        )
        assert root.receivers_for({"severity": "critical"}) == ["pager"]
        assert root.receivers_for({"severity": "critical", "team": "x"}) == ["pager"]

    def test_continue_fans_out(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {"match": {"severity": "critical"}, "receiver": "pager", "continue": True},
                    {"match": {"team": "x"}, "receiver": "team-x"},
                ],
            }
        )
        assert root.receivers_for({"severity": "critical", "team": "x"}) == ["pager", "team-x"]
        assert root.receivers_for({"severity": "critical"}) == ["pager"]
        assert root.receivers_for({"team": "x"}) == ["team-x"]

    def test_no_match_falls_back_to_root(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [{"match": {"severity": "critical"}, "receiver": "pager"}],
            }
        )
        routes = root.match({"severity": "info"})
        assert routes == [root]
        assert root.receivers_for({}) == ["default"]

    def test_deepest_match_wins(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {
                        "match": {"team": "db"},
                        "receiver": "db-team",
                        "routes": [
                            {"match": {"severity": "critical"}, "receiver": "db-pager"},
                        ],
                    },
                ],
            }
        )
        assert root.receivers_for({"team": "db", "severity": "critical"}) == ["db-pager"]
        assert root.receivers_for({"team": "db", "severity": "warning"}) == ["db-team"]

    def test_regex_routes(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [{"match_re": {"service": "db|cache"}, "receiver": "storage"}],
            }
        )
        assert root.receivers_for({"service": "cache"}) == ["storage"]
        assert root.receivers_for({"service": "cache-proxy"}) == ["default"]

    def test_nested_continue_stays_on_its_level(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {
                        "match": {"team": "x"},
                        "routes": [
                            {"match": {"severity": "critical"}, "receiver": "a1", "continue": True},
                            {"match": {"severity": "critical"}, "receiver": "a2"},
                        ],
                    },
                    {"match": {"team": "x"}, "receiver": "b"},
                ],
            }
        )
        assert root.receivers_for({"team": "x", "severity": "critical"}) == ["a1", "a2"]

    def test_continue_on_last_sibling(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [{"match": {"team": "x"}, "receiver": "team-x", "continue": True}],
            }
        )
        assert root.receivers_for({"team": "x"}) == ["team-x"]

    def test_matching_does_not_change_tree(self):
        root = make_tree(
            {"receiver": "default", "routes": [{"match": {"a": "1"}, "receiver": "r1"}]}
        )
        first = root.match({"a": "1"})
        second = root.match({"a": "1"})
        assert first == second
        assert first[0] is root.routes[0]


class TestRouteInheritance:
    """Tests for option inheritance down the tree."""

    def test_root_defaults(self):
        root = make_tree({"receiver": "default"})
        assert root.opts.group_wait == DEFAULT_GROUP_WAIT
        assert root.opts.group_interval == DEFAULT_GROUP_INTERVAL
        assert root.opts.repeat_interval == DEFAULT_REPEAT_INTERVAL
        assert root.opts.group_by == ()
        assert not root.opts.group_by_all

    def test_children_inherit_unset_options(self):
        root = make_tree(
            {
                "receiver": "default",
                "group_by": ["alertname"],
                "group_wait": "10s",
                "routes": [
                    {
                        "match": {"team": "x"},
                        "repeat_interval": "1h",
                        "routes": [{"match": {"severity": "critical"}, "group_interval": "1m"}],
                    }
                ],
            }
        )
        child = root.routes[0]
        grandchild = child.routes[0]

        assert child.opts.receiver == "default"
        assert child.opts.group_by == ("alertname",)
        assert child.opts.group_wait == timedelta(seconds=10)
        assert child.opts.repeat_interval == timedelta(hours=1)
        assert child.repeat_interval == timedelta(hours=1)
        assert child.group_wait is None

        assert grandchild.opts.receiver == "default"
        assert grandchild.opts.group_interval == timedelta(minutes=1)
        assert grandchild.opts.repeat_interval == timedelta(hours=1)
        assert grandchild.opts.group_wait == timedelta(seconds=10)

    def test_group_by_overrides_wildcard(self):
        root = make_tree(
            {
                "receiver": "default",
                "group_by": ["..."],
                "routes": [
                    {"match": {"a": "1"}},
                    {"match": {"a": "2"}, "group_by": ["service"]},
                ],
            }
        )
        assert root.opts.group_by_all
        assert root.routes[0].opts.group_by_all
        assert not root.routes[1].opts.group_by_all
        assert root.routes[1].opts.group_by == ("service",)

    def test_group_labels(self):
        root = make_tree(
            {
                "receiver": "default",
                "group_by": ["alertname", "service"],
                "routes": [{"match": {"a": "1"}, "group_by": ["..."]}],
            }
        )
        labels = {"alertname": "HighLatency", "service": "api", "instance": "host:9100"}
        assert root.opts.group_labels(labels) == {"alertname": "HighLatency", "service": "api"}
        assert root.routes[0].opts.group_labels({**labels, "a": "1"}) == {**labels, "a": "1"}


class TestRouteValidation:
    """Tests for route validation."""

    def test_missing_root(self):
        with pytest.raises(RootRouteError):
            build_route_tree(None)

    def test_root_requires_receiver(self):
        with pytest.raises(RootRouteError, match="default receiver"):
            make_tree({"routes": [{"receiver": "x"}]})

    def test_root_must_not_have_matchers(self):
        with pytest.raises(RootRouteError, match="matchers"):
            make_tree({"receiver": "default", "match": {"a": "1"}})
        with pytest.raises(RootRouteError, match="matchers"):
            make_tree({"receiver": "default", "match_re": {"a": ".*"}})

    def test_root_must_not_continue(self):
        with pytest.raises(RootRouteError, match="continue"):
            make_tree({"receiver": "default", "continue": True})

    def test_wildcard_with_labels(self):
        with pytest.raises(GroupByError):
            make_tree({"receiver": "default", "group_by": ["...", "service"]})

    def test_duplicate_group_by(self):
        with pytest.raises(GroupByError, match="duplicated"):
            make_tree({"receiver": "default", "group_by": ["service", "service"]})

    def test_wildcard_alone(self):
        assert parse_group_by(["..."]) == ((), True)
        assert parse_group_by(None) == (None, False)
        assert parse_group_by([]) == ((), False)

    def test_invalid_group_by_label(self):
        with pytest.raises(LabelNameError):
            make_tree({"receiver": "default", "group_by": ["not-valid"]})

    def test_zero_group_interval(self):
        with pytest.raises(IntervalError, match="group_interval"):
            make_tree({"receiver": "default", "group_interval": "0s"})

    def test_zero_repeat_interval_in_child(self):
        with pytest.raises(IntervalError, match="repeat_interval"):
            make_tree(
                {
                    "receiver": "default",
                    "routes": [{"match": {"a": "1"}, "repeat_interval": "0s"}],
                }
            )

    def test_zero_group_wait_allowed(self):
        root = make_tree({"receiver": "default", "group_wait": "0s"})
        assert root.opts.group_wait == timedelta(0)

    def test_unset_interval_is_none(self):
        root = make_tree({"receiver": "default"})
        assert root.group_interval is None
        assert root.opts.group_interval == DEFAULT_GROUP_INTERVAL

    def test_invalid_match_label(self):
        with pytest.raises(LabelNameError):
            make_tree({"receiver": "default", "routes": [{"match": {"bad-name": "x"}}]})


class TestRouteStructure:
    """Tests for route keys and traversal."""

    def test_keys(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {
                        "match": {"severity": "critical"},
                        "routes": [{"match_re": {"team": "x|y"}}],
                    }
                ],
            }
        )
        assert root.key() == "{}"
        assert root.routes[0].key() == '{}/0:{severity="critical"}'
        assert root.routes[0].routes[0].key() == (
            '{}/0:{severity="critical"}/0:{team=~"x|y"}'
        )

    def test_walk(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {"match": {"a": "1"}, "routes": [{"match": {"b": "1"}}]},
                    {"match": {"a": "2"}},
                ],
            }
        )
        assert [r.key() for r in root.walk()] == [
            "{}",
            '{}/0:{a="1"}',
            '{}/0:{a="1"}/0:{b="1"}',
            '{}/1:{a="2"}',
        ]

    def test_sibling_keys_are_distinct(self):
        root = make_tree(
            {
                "receiver": "default",
                "routes": [
                    {"match": {"a": "1"}, "receiver": "x"},
                    {"match": {"a": "1"}, "receiver": "y"},
                ],
            }
        )
        first, second = root.routes
        assert first.key() == '{}/0:{a="1"}'
        assert second.key() == '{}/1:{a="1"}'

    def test_to_dict(self):
        root = make_tree(
            {"receiver": "default", "routes": [{"match": {"a": "1"}, "receiver": "r1"}]}
        )
        data = root.to_dict()
        assert data["receiver"] == "default"
        assert data["opts"]["group_wait"] == "30s"
        assert data["routes"][0]["matchers"] == ['a="1"']
        assert data["routes"][0]["opts"]["receiver"] == "r1"
