"""Dataset loading: fetch each configured CSV and normalize its rows."""

from __future__ import annotations

import io
import logging
from typing import Callable, Iterable

import httpx
import pandas as pd

from choromap.errors import ParseError
from choromap.ingestion.datasets import DatasetConfig, DatasetRecord
from choromap.ingestion.http import fetch
from choromap.processing.cleaner import normalize_rows

logger = logging.getLogger(__name__)

CsvParser = Callable[[str], pd.DataFrame]


def read_csv_rows(text: str) -> pd.DataFrame:
    """Parse CSV text with a header row, keeping every cell as text.

    Malformed input is retried once with the lenient python engine, which
    skips lines it cannot tokenize.
    """
    options = {"dtype": str, "keep_default_na": False, "skip_blank_lines": True}
    try:
        return pd.read_csv(io.StringIO(text), **options)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except pd.errors.ParserError as exc:
        logger.warning("Strict CSV parse failed (%s), retrying leniently", exc)
    try:
        return pd.read_csv(io.StringIO(text), engine="python", on_bad_lines="skip", **options)
    except (pd.errors.ParserError, ValueError) as exc:
        raise ParseError(f"Unparseable CSV: {exc}") from exc


class DatasetLoader:
    """Loads DatasetRecords from the static host.

    All-or-nothing: the first source that cannot be fetched aborts the load
    with FetchError and no partial list is returned.
    """

    def __init__(self, client: httpx.AsyncClient, parse_csv: CsvParser = read_csv_rows):
        self._client = client
        self._parse_csv = parse_csv

    async def load_one(self, cfg: DatasetConfig) -> DatasetRecord:
        resp = await fetch(self._client, cfg.source_path)
        df = self._parse_csv(resp.text)
        record = DatasetRecord(
            key=cfg.key,
            name=cfg.name,
            color=cfg.color,
            data=normalize_rows(df),
        )
        logger.info("Loaded dataset %s: %d rows", cfg.key, len(record.data))
        return record

    async def load(self, configs: Iterable[DatasetConfig]) -> list[DatasetRecord]:
        datasets = []
        for cfg in configs:
            datasets.append(await self.load_one(cfg))
        return datasets
