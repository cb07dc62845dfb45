# src/dcreport/dataset_loader.py
from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import List, Optional, Tuple

import chardet

from dcreport.config import AppConfig
from dcreport.models.case_record import CaseRecord
from dcreport.parser.case_parser import parse_case_text

log = logging.getLogger(__name__)

EMBEDDED_DATASET = "cases.tsv"


def decode_text(raw: bytes) -> Tuple[str, str]:
    """
    Decode a case export, returning (text, encoding used).

    - UTF-8 (with or without BOM) is tried first
    - otherwise chardet guesses, and undecodable bytes are replaced
    """
    try:
        return raw.decode("utf-8-sig"), "utf-8"
    except UnicodeDecodeError:
        pass

    guess = chardet.detect(raw)
    encoding = guess.get("encoding") or "cp1252"
    try:
        return raw.decode(encoding, errors="replace"), encoding
    except LookupError:
        # chardet can name codecs this interpreter does not ship
        return raw.decode("cp1252", errors="replace"), "cp1252"


def load_embedded_dataset(config: Optional[AppConfig] = None) -> List[CaseRecord]:
    """Parse the dataset bundled with the package."""
    text = (
        resources.files("dcreport.data")
        .joinpath(EMBEDDED_DATASET)
        .read_text(encoding="utf-8")
    )
    cases = parse_case_text(text, config)
    log.info("Loaded %d cases from the embedded dataset", len(cases))
    return cases


def load_case_file(path: Path, config: Optional[AppConfig] = None) -> List[CaseRecord]:
    """
    Read and parse a tab-separated case export from disk.

    OSError from reading propagates to the caller.
    """
    raw = Path(path).read_bytes()
    text, encoding = decode_text(raw)
    cases = parse_case_text(text, config)
    log.info("Loaded %d cases from %s (encoding: %s)", len(cases), path, encoding)
    return cases
