"""Request models for the HTTP API."""

from pydantic import BaseModel, Field


class RouteTestRequest(BaseModel):
    """Labels of an alert to run through the routing tree."""

    labels: dict[str, str] = Field(default_factory=dict, description="Alert labels")


class InhibitTestRequest(BaseModel):
    """A target alert and the active alerts that may inhibit it."""

    target: dict[str, str] = Field(default_factory=dict, description="Labels of the target alert")
    active: list[dict[str, str]] = Field(
        default_factory=list, description="Labels of the currently active alerts"
    )
