"""
Client configuration.

Values come from an optional YAML file and are overridden by environment
variables:

    app_id: "your-app-id"
    client_id: "alice"
    server: "wss://rtm.example.com"
    secure: true
    reconnect_policy: replace   # replace | reuse | reject
    log_level: INFO
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from lcrealtime.shared.log import get_logger

logger = get_logger(__name__)

RECONNECT_POLICIES = ("replace", "reuse", "reject")

_ENV_OVERRIDES = {
    "app_id": "LCREALTIME_APP_ID",
    "client_id": "LCREALTIME_CLIENT_ID",
    "server": "LCREALTIME_SERVER",
    "reconnect_policy": "LCREALTIME_RECONNECT_POLICY",
    "log_level": "LCREALTIME_LOG_LEVEL",
}


@dataclass
class RealtimeConfig:
    app_id: Optional[str] = None
    client_id: Optional[str] = None
    server: Optional[str] = None
    secure: bool = True
    reconnect_policy: str = "replace"
    log_level: str = "INFO"
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.reconnect_policy not in RECONNECT_POLICIES:
            raise ValueError(
                f"Unknown reconnect_policy {self.reconnect_policy!r}; expected one of {RECONNECT_POLICIES}"
            )

    def connect_options(self, **overrides: Any) -> Dict[str, Any]:
        """Options mapping handed to the transport's connect()"""
        options: Dict[str, Any] = {"secure": self.secure}
        if self.app_id:
            options["appId"] = self.app_id
        if self.client_id:
            options["clientId"] = self.client_id
        if self.server:
            options["server"] = self.server
        options.update(self.extra)
        options.update(overrides)
        return options

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RealtimeConfig":
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **kwargs)


def load_config(path: Optional[Union[str, Path]] = None) -> RealtimeConfig:
    """Load configuration from YAML (if given and present) plus environment overrides."""
    data: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"{path}: expected a mapping at top level")
            data.update(loaded)
        else:
            logger.info("Config file %s not found; using defaults", path)

    for key, env_name in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[key] = value

    return RealtimeConfig.from_dict(data)
