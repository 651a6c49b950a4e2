import datetime
import logging
import os
import platform
import shutil
import subprocess
import tempfile

from config import HostsBlockError

logger = logging.getLogger(__name__)

GENERATOR = "hostsblock"

FLUSH_COMMANDS = {
    "Windows": [["ipconfig", "/flushdns"]],
    "Darwin": [["dscacheutil", "-flushcache"], ["killall", "-HUP", "mDNSResponder"]],
    "Linux": [["resolvectl", "flush-caches"]],
}
LINUX_FALLBACK = ["systemd-resolve", "--flush-caches"]


def load_base_hosts(path):
    """Read the user's base hosts file verbatim, one entry per line."""
    # utf-8-sig drops the BOM Notepad writes
    with open(path, "r", encoding="utf-8-sig") as f:
        lines = f.read().splitlines()
    logger.info("Loaded %d base lines from %s", len(lines), path)
    return lines


def assign_ip(domains, block_ip):
    return [f"{block_ip}\t{d}" for d in domains]


def build_header(sources, block_ip, total, now=None):
    now = now or datetime.datetime.now(datetime.timezone.utc)
    header = [
        f"# Hosts file generated by {GENERATOR}",
        f"# Last Updated: {now.strftime('%Y-%m-%d %H:%M:%S UTC')}",
        f"# Block IP: {block_ip}",
        f"# Blocked Domains: {total}",
        "# Sources:",
    ]
    header.extend(f"#   {url}" for url in sources)
    return header


def render_hosts(header, base_lines, entries):
    return "\n".join([*header, *base_lines, *entries]) + "\n"


def read_blocked(path, block_ip):
    """Domains currently mapped to block_ip in an existing hosts file (empty if absent)."""
    if not os.path.exists(path):
        return set()
    prefix = f"{block_ip}\t"
    blocked = set()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            parts = line.split()
            if line.startswith(prefix) and len(parts) >= 2:
                blocked.add(parts[1])
    return blocked


def write_hosts(path, content):
    """Replace path atomically; the old file stays intact if anything fails."""
    path = os.fspath(path)
    fd, tmp = tempfile.mkstemp(prefix=".hosts.", dir=os.path.dirname(os.path.abspath(path)))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        if os.path.exists(path):
            shutil.copymode(path, tmp)
        else:
            os.chmod(tmp, 0o644)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
    logger.info("Wrote %d bytes to %s", len(content.encode("utf-8")), path)


def _run(cmd):
    logger.debug("Running %s", " ".join(cmd))
    subprocess.run(cmd, check=True, capture_output=True)


def flush_dns_cache(system=None):
    """Flush the OS resolver cache. Raises on any failed command."""
    system = system or platform.system()
    commands = FLUSH_COMMANDS.get(system)
    if commands is None:
        raise HostsBlockError(f"Don't know how to flush the DNS cache on {system}")

    for cmd in commands:
        try:
            _run(cmd)
        except FileNotFoundError:
            if system != "Linux":
                raise
            # Older systemd ships systemd-resolve instead of resolvectl
            _run(LINUX_FALLBACK)
    logger.info("Flushed DNS cache (%s)", system)
