"""Receiver and global configuration models.

Fields left unset here are filled from ``GlobalConfig`` when the
configuration is loaded (see ``switchyard.loader``).
"""

from datetime import timedelta

from pydantic import Field, HttpUrl

from switchyard.models.types import Address, DocumentModel, Duration, Secret, SecretURL, Text


class BasicAuth(DocumentModel):
    username: Text = ""
    password: Secret | None = None
    password_file: Text = ""


class TLSConfig(DocumentModel):
    ca_file: Text = ""
    cert_file: Text = ""
    key_file: Text = ""
    server_name: Text = ""
    insecure_skip_verify: bool = False


class HTTPClientConfig(DocumentModel):
    """HTTP client settings shared by the HTTP based channels."""

    basic_auth: BasicAuth | None = None
    bearer_token: Secret | None = None
    bearer_token_file: Text = ""
    proxy_url: HttpUrl | None = None
    tls_config: TLSConfig = Field(default_factory=TLSConfig)


class GlobalConfig(DocumentModel):
    """Defaults for every receiver channel.

    A partially supplied ``global`` block keeps the defaults below for the
    keys it omits.
    """

    resolve_timeout: Duration = timedelta(minutes=5)
    http_config: HTTPClientConfig = Field(default_factory=HTTPClientConfig)

    smtp_from: Text = ""
    smtp_hello: Text = "localhost"
    smtp_smarthost: Address = None
    smtp_auth_username: Text = ""
    smtp_auth_password: Secret | None = None
    smtp_auth_secret: Secret | None = None
    smtp_auth_identity: Text = ""
    smtp_require_tls: bool = True

    slack_api_url: SecretURL | None = None
    pagerduty_url: HttpUrl | None = HttpUrl("https://events.pagerduty.com/v2/enqueue")
    opsgenie_api_url: HttpUrl | None = HttpUrl("https://api.opsgenie.com/")
    opsgenie_api_key: Secret | None = None
    wechat_api_url: HttpUrl | None = HttpUrl("https://qyapi.weixin.qq.com/cgi-bin/")
    wechat_api_secret: Secret | None = None
    wechat_api_corp_id: Text = ""
    victorops_api_url: HttpUrl | None = HttpUrl(
        "https://alert.victorops.com/integrations/generic/20131114/alert/"
    )
    victorops_api_key: Secret | None = None


class EmailConfig(DocumentModel):
    send_resolved: bool = False
    to: Text = ""
    from_: Text = Field(default="", alias="from")
    hello: Text = ""
    smarthost: Address = None
    auth_username: Text = ""
    auth_password: Secret | None = None
    auth_secret: Secret | None = None
    auth_identity: Text = ""
    headers: dict[str, Text] = Field(default_factory=dict)
    html: Text = '{{ template "email.default.html" . }}'
    text: Text = ""
    require_tls: bool | None = None


class PagerdutyConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = True
    service_key: Secret | None = None
    routing_key: Secret | None = None
    url: HttpUrl | None = None
    client: Text = '{{ template "pagerduty.default.client" . }}'
    client_url: Text = '{{ template "pagerduty.default.clientURL" . }}'
    description: Text = '{{ template "pagerduty.default.description" .}}'
    details: dict[str, Text] = Field(
        default_factory=lambda: {
            "firing": '{{ template "pagerduty.default.instances" .Alerts.Firing }}',
            "resolved": '{{ template "pagerduty.default.instances" .Alerts.Resolved }}',
            "num_firing": "{{ .Alerts.Firing | len }}",
            "num_resolved": "{{ .Alerts.Resolved | len }}",
        }
    )
    severity: Text = "error"
    class_: Text = Field(default="", alias="class")
    component: Text = ""
    group: Text = ""


class SlackField(DocumentModel):
    title: Text
    value: Text
    short: bool | None = None


class SlackConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = False
    api_url: SecretURL | None = None
    channel: Text = ""
    username: Text = '{{ template "slack.default.username" . }}'
    color: Text = '{{ if eq .Status "firing" }}danger{{ else }}good{{ end }}'
    title: Text = '{{ template "slack.default.title" . }}'
    title_link: Text = '{{ template "slack.default.titlelink" . }}'
    pretext: Text = '{{ template "slack.default.pretext" . }}'
    text: Text = '{{ template "slack.default.text" . }}'
    fields: list[SlackField] = Field(default_factory=list)
    short_fields: bool = False
    footer: Text = '{{ template "slack.default.footer" . }}'
    fallback: Text = '{{ template "slack.default.fallback" . }}'
    icon_emoji: Text = ""
    icon_url: Text = ""
    link_names: bool = False


class WebhookConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = True
    url: HttpUrl | None = None


class OpsGenieConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = True
    api_key: Secret | None = None
    api_url: HttpUrl | None = None
    message: Text = '{{ template "opsgenie.default.message" . }}'
    description: Text = '{{ template "opsgenie.default.description" . }}'
    source: Text = '{{ template "opsgenie.default.source" . }}'
    details: dict[str, Text] = Field(default_factory=dict)
    teams: Text = ""
    tags: Text = ""
    note: Text = ""
    priority: Text = ""


class WechatConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = False
    api_secret: Secret | None = None
    corp_id: Text = ""
    message: Text = '{{ template "wechat.default.message" . }}'
    api_url: HttpUrl | None = None
    to_user: Text = '{{ template "wechat.default.to_user" . }}'
    to_party: Text = '{{ template "wechat.default.to_party" . }}'
    to_tag: Text = '{{ template "wechat.default.to_tag" . }}'
    agent_id: Text = '{{ template "wechat.default.agent_id" . }}'


class PushoverConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = True
    user_key: Secret | None = None
    token: Secret | None = None
    title: Text = '{{ template "pushover.default.title" . }}'
    message: Text = '{{ template "pushover.default.message" . }}'
    url: Text = '{{ template "pushover.default.url" . }}'
    priority: Text = '{{ if eq .Status "firing" }}2{{ else }}0{{ end }}'
    retry: Duration = timedelta(minutes=1)
    expire: Duration = timedelta(hours=1)


class VictorOpsConfig(DocumentModel):
    http_config: HTTPClientConfig | None = None
    send_resolved: bool = True
    api_key: Secret | None = None
    api_url: HttpUrl | None = None
    routing_key: Text = ""
    message_type: Text = "CRITICAL"
    state_message: Text = '{{ template "victorops.default.state_message" . }}'
    entity_display_name: Text = '{{ template "victorops.default.entity_display_name" . }}'
    monitoring_tool: Text = '{{ template "victorops.default.monitoring_tool" . }}'


class Receiver(DocumentModel):
    """A named bundle of notification channel configs."""

    name: Text = ""
    email_configs: list[EmailConfig] = Field(default_factory=list)
    pagerduty_configs: list[PagerdutyConfig] = Field(default_factory=list)
    slack_configs: list[SlackConfig] = Field(default_factory=list)
    webhook_configs: list[WebhookConfig] = Field(default_factory=list)
    opsgenie_configs: list[OpsGenieConfig] = Field(default_factory=list)
    wechat_configs: list[WechatConfig] = Field(default_factory=list)
    pushover_configs: list[PushoverConfig] = Field(default_factory=list)
    victorops_configs: list[VictorOpsConfig] = Field(default_factory=list)

