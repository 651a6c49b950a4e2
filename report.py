import logging

import pandas as pd
import tldextract

logger = logging.getLogger(__name__)

TOP_SUFFIXES = 10

# Bundled public suffix snapshot, no network fetch
extract = tldextract.TLDExtract(suffix_list_urls=())


def domain_frame(domains):
    rows = []
    for d in domains:
        suffix = extract(d).suffix or d.rsplit(".", 1)[-1]
        rows.append({"domain": d, "suffix": suffix, "depth": d.count(".") + 1})
    return pd.DataFrame(rows, columns=["domain", "suffix", "depth"])


def source_frame(source_sets):
    """Per-source domain count and how many domains only that source contributes."""
    rows = []
    for url, domains in source_sets.items():
        others = set()
        for other, s in source_sets.items():
            if other != url:
                others |= s
        rows.append({"source": url, "domains": len(domains), "unique": len(domains - others)})
    return pd.DataFrame(rows, columns=["source", "domains", "unique"])


def summarize(source_sets, final_domains, previous=frozenset()):
    df = domain_frame(final_domains)
    final_set = set(final_domains)
    return {
        "total": len(final_domains),
        "sources": source_frame(source_sets),
        "top_suffixes": df["suffix"].value_counts().head(TOP_SUFFIXES),
        "avg_depth": round(float(df["depth"].mean()), 2) if not df.empty else 0.0,
        "added": len(final_set - previous),
        "removed": len(previous - final_set),
    }


def log_summary(summary):
    logger.info("Sources:\n%s", summary["sources"].to_string(index=False))
    if not summary["top_suffixes"].empty:
        logger.info("Top suffixes:\n%s", summary["top_suffixes"].to_string())
    logger.info(
        "Total: %d domains, avg depth %.2f, +%d / -%d since last run",
        summary["total"], summary["avg_depth"], summary["added"], summary["removed"],
    )
