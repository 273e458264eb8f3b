"""Corpus sources: a local tree file or a ClickHouse table over HTTP."""

from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from urllib.parse import urlparse

import httpx

from tagger.errors import CorpusFetchError

logger = logging.getLogger(__name__)

_TABLE_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?")


def read_corpus_file(path: str | Path) -> bytes:
    """Read a whole corpus dump into memory."""
    path = Path(path)
    try:
        body = path.read_bytes()
    except OSError as e:
        raise CorpusFetchError(str(path), e) from e
    logger.debug("read %s (%d bytes)", path, len(body))
    return body


def build_tree_query(table: str, day: date | None = None) -> str:
    """Return the query selecting every distinct path of *table*.

    Raises ValueError if *table* is not a plain (optionally db-qualified)
    identifier.
    """
    if not _TABLE_RE.fullmatch(table):
        raise ValueError(f"Invalid ClickHouse table name: {table!r}")
    where = f" WHERE Date = '{day.isoformat()}'" if day is not None else ""
    return f"SELECT Path FROM {table}{where} GROUP BY Path FORMAT RowBinary"


class ClickHouseSource:
    """Fetches the metric tree from ClickHouse's HTTP interface.

    A single ``String`` column in ``RowBinary`` is already the
    varint-prefixed corpus layout, so the response body is returned as-is.
    """

    def __init__(
        self,
        url: str,
        table: str = "graphite_tree",
        day: date | None = None,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"ClickHouse url must be http(s), got {parsed.scheme!r}")
        self.url = url.rstrip("/") + "/"
        self.query = build_tree_query(table, day)
        self.timeout = timeout
        self._client = client

    def fetch(self) -> bytes:
        logger.debug("clickhouse query: %s", self.query)
        try:
            if self._client is not None:
                resp = self._client.post(self.url, content=self.query, timeout=self.timeout)
            else:
                with httpx.Client() as client:
                    resp = client.post(self.url, content=self.query, timeout=self.timeout)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise CorpusFetchError(self.url, e) from e
        logger.info("fetched %d bytes from %s", len(resp.content), self.url)
        return resp.content
