"""Shared fixtures for Switchyard tests."""

from pathlib import Path

import pytest

from switchyard.config import get_settings
from switchyard.loader import Config, load

ROUTING_CONFIG = """
global:
  smtp_smarthost: 'smtp.example.com:25'
  smtp_from: 'alertmanager@example.com'
  slack_api_url: 'https://hooks.slack.com/services/T000/B000/XXXX'

route:
  receiver: default
  group_by: [alertname]
  routes:
    - match:
        severity: critical
      receiver: pager
      continue: true
    - match:
        team: x
      receiver: team-x
      group_by: [alertname, service]
      group_wait: 10s
    - match_re:
        service: ^(db|cache)$
      receiver: storage
      routes:
        - match:
            env: prod
          repeat_interval: 1h

inhibit_rules:
  - source_match:
      severity: critical
    target_match:
      severity: warning
    equal: [service]

receivers:
  - name: default
    email_configs:
      - to: oncall@example.com
  - name: pager
    pagerduty_configs:
      - routing_key: abc123
  - name: team-x
    slack_configs:
      - channel: '#team-x'
  - name: storage
    webhook_configs:
      - url: 'http://storage.example.com/hook'
"""


@pytest.fixture
def routing_yaml() -> str:
    return ROUTING_CONFIG


@pytest.fixture
def config() -> Config:
    return load(ROUTING_CONFIG)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "switchyard.yml"
    path.write_text(ROUTING_CONFIG, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
