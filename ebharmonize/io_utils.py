"""
I/O utility functions shared by the harmonization pipelines.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

logger = logging.getLogger(__name__)

# Excel caps sheet names at 31 characters.
_SHEET_NAME_LIMIT = 31


def read_table(path: Path, *, required: Iterable[str] = ()) -> pd.DataFrame:
    """Read a CSV/TSV/XLSX/Parquet table with every column as text."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Input table not found: {path}")
    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False, na_values=[""])
    elif suffix in {".tsv", ".tab"}:
        df = pd.read_csv(path, dtype=str, sep="\t", keep_default_na=False, na_values=[""])
    elif suffix == ".xlsx":
        df = pd.read_excel(path, dtype=str, engine="openpyxl")
    elif suffix == ".parquet":
        df = pd.read_parquet(path).astype("string")
    else:
        raise ValueError(f"Unsupported file type: {path}")

    df.columns = [str(col).strip() for col in df.columns]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"{path.name} is missing required columns: {missing}")
    return df


def write_csv_and_parquet(frame: pd.DataFrame, csv_path: Path) -> None:
    """Persist a dataframe to CSV and Parquet using the same stem."""
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(csv_path, index=False, encoding="utf-8")
    frame.to_parquet(csv_path.with_suffix(".parquet"), index=False)


def sibling_path(out_csv: Path, suffix: str) -> Path:
    """Return ``<stem>_<suffix>.csv`` next to ``out_csv``."""
    out_csv = Path(out_csv)
    return out_csv.with_name(f"{out_csv.stem}_{suffix}.csv")


def write_output_tables(
    tables: Mapping[str, pd.DataFrame],
    out_csv: Path,
    *,
    primary: str,
    skip_excel: bool = False,
) -> dict[str, Path]:
    """Write the primary table to ``out_csv`` and the others beside it.

    When Excel output is enabled every table also becomes one sheet of
    ``<stem>.xlsx`` with frozen headers and autofilters.
    """
    if primary not in tables:
        raise ValueError(f"Primary table {primary!r} not among {sorted(tables)}")
    out_csv = Path(out_csv)
    out_csv.parent.mkdir(parents=True, exist_ok=True)

    written: dict[str, Path] = {}
    for name, frame in tables.items():
        path = out_csv if name == primary else sibling_path(out_csv, name)
        frame.to_csv(path, index=False, encoding="utf-8")
        written[name] = path
        logger.info("Wrote %s rows to %s", f"{len(frame):,}", path)

    if not skip_excel:
        xlsx_path = out_csv.with_suffix(".xlsx")
        with pd.ExcelWriter(xlsx_path, engine="xlsxwriter") as writer:
            for name, frame in tables.items():
                sheet = name[:_SHEET_NAME_LIMIT]
                frame.to_excel(writer, index=False, sheet_name=sheet)
                ws = writer.sheets[sheet]
                ws.freeze_panes(1, 0)
                nrows, ncols = frame.shape
                if ncols:
                    ws.autofilter(0, 0, nrows, ncols - 1)
        written["xlsx"] = xlsx_path
    return written


__all__ = ["read_table", "sibling_path", "write_csv_and_parquet", "write_output_tables"]
