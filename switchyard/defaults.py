"""Fill unset receiver channel fields from the global config.

Each function returns a new, defaulted copy of the channel config and never
modifies its input.
"""

from typing import Any

from pydantic import SecretStr

from switchyard.errors import ChannelConfigError, MissingGlobalDefaultError
from switchyard.models.receivers import (
    EmailConfig,
    GlobalConfig,
    OpsGenieConfig,
    PagerdutyConfig,
    PushoverConfig,
    Receiver,
    SlackConfig,
    VictorOpsConfig,
    WebhookConfig,
    WechatConfig,
)
from switchyard.models.types import ensure_trailing_slash


def _is_blank(secret: SecretStr | None) -> bool:
    return secret is None or not secret.get_secret_value()


def _canonical_header(name: str) -> str:
    return "-".join(part[:1].upper() + part[1:].lower() for part in name.split("-"))


def _http_config(config: Any, global_config: GlobalConfig) -> dict[str, Any]:
    if config.http_config is None:
        return {"http_config": global_config.http_config}
    return {}


def default_email(ec: EmailConfig, g: GlobalConfig) -> EmailConfig:
    if not ec.to:
        raise ChannelConfigError("missing to address in email config")

    update: dict[str, Any] = {}
    if ec.smarthost is None:
        if g.smtp_smarthost is None:
            raise MissingGlobalDefaultError("SMTP", "smarthost")
        update["smarthost"] = g.smtp_smarthost
    if not ec.from_:
        if not g.smtp_from:
            raise MissingGlobalDefaultError("SMTP", "from")
        update["from_"] = g.smtp_from
    if not ec.hello:
        update["hello"] = g.smtp_hello
    if not ec.auth_username:
        update["auth_username"] = g.smtp_auth_username
    if _is_blank(ec.auth_password):
        update["auth_password"] = g.smtp_auth_password
    if _is_blank(ec.auth_secret):
        update["auth_secret"] = g.smtp_auth_secret
    if not ec.auth_identity:
        update["auth_identity"] = g.smtp_auth_identity
    if ec.require_tls is None:
        update["require_tls"] = g.smtp_require_tls

    headers: dict[str, str] = {}
    for name, value in ec.headers.items():
        name = _canonical_header(name)
        if name in headers:
            raise ChannelConfigError(f"duplicate header {name!r} in email config")
        headers[name] = value
    update["headers"] = headers

    return ec.model_copy(update=update)


def default_pagerduty(pdc: PagerdutyConfig, g: GlobalConfig) -> PagerdutyConfig:
    if _is_blank(pdc.routing_key) and _is_blank(pdc.service_key):
        raise ChannelConfigError("missing service or routing key in PagerDuty config")

    update = _http_config(pdc, g)
    if pdc.url is None:
        if g.pagerduty_url is None:
            raise MissingGlobalDefaultError("PagerDuty", "URL")
        update["url"] = g.pagerduty_url
    return pdc.model_copy(update=update)


def default_slack(sc: SlackConfig, g: GlobalConfig) -> SlackConfig:
    update = _http_config(sc, g)
    if sc.api_url is None:
        if g.slack_api_url is None:
            raise MissingGlobalDefaultError("Slack", "API URL")
        update["api_url"] = g.slack_api_url
    return sc.model_copy(update=update)


def default_webhook(wh: WebhookConfig, g: GlobalConfig) -> WebhookConfig:
    if wh.url is None:
        raise ChannelConfigError("missing URL in webhook config")
    return wh.model_copy(update=_http_config(wh, g))


def default_opsgenie(ogc: OpsGenieConfig, g: GlobalConfig) -> OpsGenieConfig:
    update = _http_config(ogc, g)
    api_url = ogc.api_url
    if api_url is None:
        if g.opsgenie_api_url is None:
            raise MissingGlobalDefaultError("OpsGenie", "URL")
        api_url = g.opsgenie_api_url
    update["api_url"] = ensure_trailing_slash(api_url)
    if _is_blank(ogc.api_key):
        if _is_blank(g.opsgenie_api_key):
            raise MissingGlobalDefaultError("OpsGenie", "API Key")
        update["api_key"] = g.opsgenie_api_key
    return ogc.model_copy(update=update)


def default_wechat(wcc: WechatConfig, g: GlobalConfig) -> WechatConfig:
    update = _http_config(wcc, g)
    api_url = wcc.api_url
    if api_url is None:
        if g.wechat_api_url is None:
            raise MissingGlobalDefaultError("Wechat", "URL")
        api_url = g.wechat_api_url
    if _is_blank(wcc.api_secret):
        if _is_blank(g.wechat_api_secret):
            raise MissingGlobalDefaultError("Wechat", "ApiSecret")
        update["api_secret"] = g.wechat_api_secret
    if not wcc.corp_id:
        if not g.wechat_api_corp_id:
            raise MissingGlobalDefaultError("Wechat", "CorpID")
        update["corp_id"] = g.wechat_api_corp_id
    update["api_url"] = ensure_trailing_slash(api_url)
    return wcc.model_copy(update=update)


def default_pushover(poc: PushoverConfig, g: GlobalConfig) -> PushoverConfig:
    if _is_blank(poc.user_key):
        raise ChannelConfigError("missing user key in Pushover config")
    if _is_blank(poc.token):
        raise ChannelConfigError("missing token in Pushover config")
    return poc.model_copy(update=_http_config(poc, g))


def default_victorops(voc: VictorOpsConfig, g: GlobalConfig) -> VictorOpsConfig:
    if not voc.routing_key:
        raise ChannelConfigError("missing routing key in VictorOps config")

    update = _http_config(voc, g)
    api_url = voc.api_url
    if api_url is None:
        if g.victorops_api_url is None:
            raise MissingGlobalDefaultError("VictorOps", "URL")
        api_url = g.victorops_api_url
    update["api_url"] = ensure_trailing_slash(api_url)
    if _is_blank(voc.api_key):
        if _is_blank(g.victorops_api_key):
            raise MissingGlobalDefaultError("VictorOps", "API Key")
        update["api_key"] = g.victorops_api_key
    return voc.model_copy(update=update)


def apply_receiver_defaults(receiver: Receiver, global_config: GlobalConfig) -> Receiver:
    """Return a copy of ``receiver`` with every channel config defaulted."""
    g = global_config
    return receiver.model_copy(
        update={
            "webhook_configs": [default_webhook(c, g) for c in receiver.webhook_configs],
            "email_configs": [default_email(c, g) for c in receiver.email_configs],
            "slack_configs": [default_slack(c, g) for c in receiver.slack_configs],
            "pushover_configs": [default_pushover(c, g) for c in receiver.pushover_configs],
            "pagerduty_configs": [default_pagerduty(c, g) for c in receiver.pagerduty_configs],
            "opsgenie_configs": [default_opsgenie(c, g) for c in receiver.opsgenie_configs],
            "wechat_configs": [default_wechat(c, g) for c in receiver.wechat_configs],
            "victorops_configs": [default_victorops(c, g) for c in receiver.victorops_configs],
        }
    )
