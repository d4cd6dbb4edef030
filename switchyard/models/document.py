"""Plain models for the decoded configuration document.

These carry the document exactly as written. Defaults, cross-field checks
and matcher compilation happen afterwards in ``switchyard.loader``.
"""

from pydantic import Field

from switchyard.models.receivers import GlobalConfig, Receiver
from switchyard.models.types import DocumentModel, Duration, Text


class RouteSpec(DocumentModel):
    receiver: Text = ""
    group_by: list[str] | None = None
    match: dict[str, Text] = Field(default_factory=dict)
    match_re: dict[str, Text] = Field(default_factory=dict)
    continue_: bool = Field(default=False, alias="continue")
    routes: list["RouteSpec"] = Field(default_factory=list)
    group_wait: Duration | None = None
    group_interval: Duration | None = None
    repeat_interval: Duration | None = None


class InhibitRuleSpec(DocumentModel):
    source_match: dict[str, Text] = Field(default_factory=dict)
    source_match_re: dict[str, Text] = Field(default_factory=dict)
    target_match: dict[str, Text] = Field(default_factory=dict)
    target_match_re: dict[str, Text] = Field(default_factory=dict)
    equal: list[str] = Field(default_factory=list)


class ConfigDocument(DocumentModel):
    global_: GlobalConfig | None = Field(default=None, alias="global")
    route: RouteSpec | None = None
    inhibit_rules: list[InhibitRuleSpec] = Field(default_factory=list)
    receivers: list[Receiver] = Field(default_factory=list)
    templates: list[str] = Field(default_factory=list)
