import ipaddress
import json
import os
import platform
from dataclasses import dataclass, field, fields, replace


class HostsBlockError(Exception):
    """Base error for a failed hosts update."""


class ConnectivityError(HostsBlockError):
    pass


class ConfigError(HostsBlockError):
    pass


# --- CONFIGURATION ---
# Hosts-format sources only: lines must start with an IPv4 address to be picked up
SOURCES = [
    "https://raw.githubusercontent.com/StevenBlack/hosts/master/hosts",
    "https://urlhaus.abuse.ch/downloads/hostfile/",
    "https://raw.githubusercontent.com/jerryn70/GoodbyeAds/master/Hosts/GoodbyeAds.txt",
    "https://raw.githubusercontent.com/hagezi/dns-blocklists/main/hosts/pro.txt",
]

BLOCK_IP = "0.0.0.0"
BASE_HOSTS_FILE = "hosts.base"
PROBE_URL = "https://www.google.com/generate_204"
PROBE_TIMEOUT = 5
FETCH_TIMEOUT = 30
USER_AGENT = "hostsblock/1.0 (+https://github.com/StevenBlack/hosts)"


def default_hosts_path():
    if platform.system() == "Windows":
        root = os.environ.get("SystemRoot", r"C:\Windows")
        return os.path.join(root, "System32", "drivers", "etc", "hosts")
    return "/etc/hosts"


@dataclass
class Settings:
    sources: list = field(default_factory=lambda: list(SOURCES))
    block_ip: str = BLOCK_IP
    base_hosts: str = BASE_HOSTS_FILE
    hosts_path: str = field(default_factory=default_hosts_path)
    probe_url: str = PROBE_URL
    probe_timeout: float = PROBE_TIMEOUT
    fetch_timeout: float = FETCH_TIMEOUT
    user_agent: str = USER_AGENT
    dry_run: bool = False
    flush: bool = True


def load_config(config_path):
    """Read a JSON settings file; keys are Settings field names."""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must be a JSON object")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {config_path}: {', '.join(unknown)}")
    return data


def validate(settings):
    if isinstance(settings.sources, str) or not settings.sources:
        raise ConfigError("sources must be a non-empty list of URLs")
    try:
        if not isinstance(settings.block_ip, str):
            raise ValueError
        ipaddress.ip_address(settings.block_ip)
    except ValueError:
        raise ConfigError(f"Invalid block IP: {settings.block_ip!r}") from None
    for name in ("probe_timeout", "fetch_timeout"):
        value = getattr(settings, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigError(f"{name} must be a positive number, got {value!r}")
    return settings


def load_settings(config_path=None, overrides=None):
    """Defaults, then the JSON file, then command-line overrides (None values ignored)."""
    settings = Settings()
    if config_path:
        settings = replace(settings, **load_config(config_path))
    if overrides:
        settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    return validate(settings)
