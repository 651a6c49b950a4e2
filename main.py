import argparse
import logging
import sys

from aggregate import check_connectivity, dedupe_domains, fetch_url, parse_domains
from build_list import (
    assign_ip,
    build_header,
    flush_dns_cache,
    load_base_hosts,
    read_blocked,
    render_hosts,
    write_hosts,
)
from config import ConfigError, ConnectivityError, load_settings
from report import log_summary, summarize

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_CONNECTIVITY = 2
EXIT_ERROR = 3


def update_hosts(settings, out=None):
    # 1. Connectivity
    check_connectivity(settings.probe_url, settings.probe_timeout)

    # 2. Base entries
    base_lines = load_base_hosts(settings.base_hosts)

    # 3. Sequential fetching
    source_sets = {}
    for url in settings.sources:
        lines = fetch_url(url, settings.fetch_timeout, settings.user_agent)
        source_sets[url] = set(parse_domains(lines))
        logger.info(" -> %s: Found %d domains", url, len(source_sets[url]))

    # 4. Dedupe & sort
    final_domains = dedupe_domains(source_sets.values())
    previous = read_blocked(settings.hosts_path, settings.block_ip)
    log_summary(summarize(source_sets, final_domains, previous))

    # 5. Output
    header = build_header(settings.sources, settings.block_ip, len(final_domains))
    content = render_hosts(header, base_lines, assign_ip(final_domains, settings.block_ip))
    if settings.dry_run:
        (out or sys.stdout).write(content)
        return

    write_hosts(settings.hosts_path, content)
    if settings.flush:
        flush_dns_cache()


def run(settings, out=None):
    """Run one update and return the process exit code."""
    try:
        update_hosts(settings, out)
    except ConnectivityError as e:
        logger.error("%s", e)
        return EXIT_NO_CONNECTIVITY
    except Exception as e:
        logger.error("Update failed: %s", e)
        logger.debug("Traceback:", exc_info=True)
        return EXIT_ERROR
    logger.info("Hosts file updated")
    return EXIT_OK


class ArgumentParser(argparse.ArgumentParser):
    """Usage errors exit with EXIT_ERROR; argparse would use 2, the no-connectivity code."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EXIT_ERROR, f"{self.prog}: error: {message}\n")


def parse_args(argv=None):
    parser = ArgumentParser(
        prog="hostsblock",
        description="Merge hosts-format blocklists with a base hosts file and install the result.",
    )
    parser.add_argument("--config", "-c", help="JSON settings file.")
    parser.add_argument("--base", "-b", dest="base_hosts", help="Base hosts file kept at the top of the output.")
    parser.add_argument("--hosts", dest="hosts_path", help="Hosts file to overwrite.")
    parser.add_argument("--ip", dest="block_ip", help="Address blocked domains resolve to.")
    parser.add_argument(
        "--source", "-s", dest="sources", action="append",
        help="Blocklist URL (repeatable, replaces the configured list).",
    )
    parser.add_argument(
        "--dry-run", "-n", dest="dry_run", action="store_true", default=None,
        help="Print the generated hosts file instead of installing it.",
    )
    parser.add_argument(
        "--no-flush", dest="flush", action="store_false", default=None,
        help="Skip flushing the DNS cache after writing.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    overrides = {k: v for k, v in vars(args).items() if k not in ("config", "verbose")}
    try:
        settings = load_settings(args.config, overrides)
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(EXIT_ERROR)

    sys.exit(run(settings))


if __name__ == "__main__":
    main()
