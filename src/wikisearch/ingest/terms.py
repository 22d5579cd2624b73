"""
Search-term extraction from the query log.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Set, Union

logger = logging.getLogger("wikisearch.ingest")

QUERY_MARKER = re.compile(r'query="([^"]+)"')


def normalize_term(raw: str) -> str:
    return raw.strip().lower()


def extract_search_terms(log_path: Union[str, Path]) -> Set[str]:
    """
    Collect the unique, normalized terms logged as ``query="<term>"``.

    A missing or unreadable log is not fatal: the failure is logged and an
    empty set is returned.
    """
    terms: Set[str] = set()
    try:
        with open(log_path, encoding="utf-8", errors="replace") as fh:
            for line in fh:
                match = QUERY_MARKER.search(line)
                if not match:
                    continue
                term = normalize_term(match.group(1))
                if term:
                    terms.add(term)
    except OSError as exc:
        logger.warning("Could not read search log %s: %s", log_path, exc)
        return set()

    logger.info("Extracted %d unique search terms from %s", len(terms), log_path)
    return terms
