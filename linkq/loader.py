"""
String loader (table -> list of strings)
========================================

This module reads a column of strings from a CSV or Excel file (or the lines of
a plain text file) so the harness can fill a queue in one step.

Key ideas:
- We match the column name loosely because exported headers vary.
- Blank cells become empty strings instead of "nan".
- The loader only reads; the source file is never modified.
"""

from __future__ import annotations
from typing import List, Optional
import os
import re
import pandas as pd


def _to_str(x) -> str:
    if pd.isna(x): return ""
    return str(x)

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, name: Optional[str]) -> str:
    cols = list(df.columns)
    if not cols:
        raise KeyError("Table has no columns")
    if name is None:
        return cols[0]
    if name in cols:
        return name
    norm_map = {_norm(c): c for c in cols}
    if _norm(name) in norm_map:
        return norm_map[_norm(name)]
    raise KeyError(f"Missing column {name!r}. Available={cols}")

def _read_table(path: str) -> pd.DataFrame:
    # dtype=str keeps values like "007" as written; keep_default_na=False
    # keeps "NA", "null" and "nan" as text, only empty cells become ""
    ext = os.path.splitext(path)[1].lower()
    if ext == ".xlsx":
        df = pd.read_excel(path, dtype=str, keep_default_na=False, engine="openpyxl")
    elif ext == ".xls":
        raise ValueError("Legacy .xls files are not supported, save the sheet as .xlsx")
    elif ext == ".tsv":
        df = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False)
    else:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df

def load_strings(path: str, column: Optional[str] = None) -> List[str]:
    """Load the strings of one column (default: the first one).

    `.txt` files are read line by line instead, one string per line.
    """
    if os.path.splitext(path)[1].lower() == ".txt":
        with open(path, encoding="utf-8") as f:
            return [line.rstrip("\r\n") for line in f]
    df = _read_table(path)
    col = _col(df, column)
    return [_to_str(v) for v in df[col]]
