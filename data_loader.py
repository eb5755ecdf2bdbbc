"""
Data Loader for ICSR Case Files
==================================
Reads case files into CaseData for the gateway.

  .json -> one case object, or a list of case objects
  .csv  -> one row per case; list columns encoded as "name|date|date; name|date|date"
"""

import json
import logging
import os
from typing import Optional

import pandas as pd
from pydantic import ValidationError

from models import CaseData

logger = logging.getLogger("icsr_bridge")

CASE_ID_FIELD = "case_id"

# (case_id, case, error): case is None exactly when error is set
LoadedCase = tuple[str, Optional[CaseData], Optional[str]]

CSV_SCALAR_COLUMNS = [
    "narrative", "patient_history", "dechallenge_outcome", "rechallenge_outcome",
    "alternative_causes", "concomitant_meds", "lab_data",
]


def _clean(value) -> str:
    """pandas NaN / None -> '', everything else -> stripped str."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()


def _parse_entries(cell) -> list[list[str]]:
    """Parse 'A|2024-01-01|; B||' into [['A', '2024-01-01', ''], ['B', '', '']]."""
    text = _clean(cell)
    if not text:
        return []
    entries = []
    for chunk in text.split(";"):
        if not chunk.strip():
            continue
        parts = [p.strip() for p in chunk.split("|")]
        parts += [""] * (3 - len(parts))
        entries.append(parts[:3])
    return entries


def validation_message(exc: ValidationError) -> str:
    """One-line summary of a pydantic ValidationError: 'field: msg; field: msg'."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "case"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def case_from_record(record: dict, default_id: str = "case") -> tuple[str, CaseData]:
    """Build (case_id, CaseData) from a JSON-style record."""
    record = dict(record)
    case_id = _clean(record.pop(CASE_ID_FIELD, "")) or default_id
    return case_id, CaseData.model_validate(record)


def case_from_row(row: pd.Series, default_id: str = "case") -> tuple[str, CaseData]:
    """Build (case_id, CaseData) from a CSV row."""
    record = {col: _clean(row.get(col)) for col in CSV_SCALAR_COLUMNS}
    record["suspect_drugs"] = [
        {"name": n, "start_date": s, "stop_date": e}
        for n, s, e in _parse_entries(row.get("suspect_drugs"))
    ]
    record["adverse_events"] = [
        {"name": n, "onset_date": o, "resolution_date": r}
        for n, o, r in _parse_entries(row.get("adverse_events"))
    ]
    case_id = _clean(row.get(CASE_ID_FIELD)) or default_id
    return case_id, CaseData.model_validate(record)


def _load_one(build, source, default_id: str) -> LoadedCase:
    """Run one builder; a record that fails validation is kept with its error."""
    try:
        case_id, case = build(source, default_id=default_id)
    except ValidationError as e:
        case_id = _clean(source.get(CASE_ID_FIELD)) or default_id
        message = validation_message(e)
        logger.warning(f"[{case_id}] invalid case record: {message}")
        return case_id, None, message
    return case_id, case, None


def _unique_ids(loaded: list[LoadedCase]) -> list[LoadedCase]:
    """Repeated ids get a '_2', '_3', ... suffix so reports never overwrite each other."""
    seen = {}
    taken = {case_id for case_id, _, _ in loaded}
    out = []
    for case_id, case, error in loaded:
        if case_id in seen:
            n = seen[case_id] + 1
            while f"{case_id}_{n}" in taken:
                n += 1
            seen[case_id] = n
            new_id = f"{case_id}_{n}"
            taken.add(new_id)
            logger.warning(f"Duplicate case id '{case_id}' renamed to '{new_id}'")
            out.append((new_id, case, error))
        else:
            seen[case_id] = 1
            out.append((case_id, case, error))
    return out


def load_cases(filepath: str) -> list[LoadedCase]:
    """
    Load every case in a .json or .csv file.

    Returns:
        List of (case_id, CaseData | None, error | None). A record that fails
        validation comes back with case=None and a one-line error instead of
        aborting the whole file. Cases without an id get 'case_<n>'; repeated
        ids are made unique.
    """
    ext = os.path.splitext(filepath)[1].lower()

    if ext == ".json":
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
        records = data if isinstance(data, list) else [data]
        loaded = [
            _load_one(case_from_record, rec, default_id=f"case_{i + 1}")
            for i, rec in enumerate(records)
        ]
        return _unique_ids(loaded)

    if ext == ".csv":
        df = pd.read_csv(filepath, dtype=str)
        loaded = [
            _load_one(case_from_row, row, default_id=f"case_{i + 1}")
            for i, (_, row) in enumerate(df.iterrows())
        ]
        return _unique_ids(loaded)

    raise ValueError(f"Unsupported case file type: {ext or filepath} (expected .json or .csv)")
