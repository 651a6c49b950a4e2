import logging
import re

import requests

from config import ConnectivityError

logger = logging.getLogger(__name__)

HOSTS_LINE = re.compile(r"^\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b")


def check_connectivity(url, timeout):
    """Raise ConnectivityError unless the probe URL answers with a success status."""
    logger.info("Checking connectivity via %s", url)
    try:
        r = requests.get(url, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise ConnectivityError(f"No connectivity ({url}): {e}") from e


def fetch_url(url, timeout, user_agent):
    """Fetch a blocklist and return its lines. Errors propagate."""
    logger.info("Fetching: %s", url)
    r = requests.get(url, timeout=timeout, headers={"User-Agent": user_agent})
    r.raise_for_status()
    logger.debug("Fetched %d bytes from %s (status %s)", len(r.content), url, r.status_code)
    return r.text.splitlines()


def parse_domains(lines):
    """Parses hosts-format lines into the list of domains they block."""
    domains = []
    for line in lines:
        line = line.strip()
        if not HOSTS_LINE.match(line) or "localhost" in line:
            continue

        parts = line.split()
        if len(parts) < 2:
            continue

        # Strip inline comments glued to the domain (e.g. 0.0.0.0 ads.example#tracker)
        domain = parts[1].split("#")[0]
        if domain:
            domains.append(domain)

    return domains


def dedupe_domains(domain_lists):
    unique = set()
    for domains in domain_lists:
        unique.update(domains)
    return sorted(unique)
