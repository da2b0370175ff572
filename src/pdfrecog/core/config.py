from __future__ import annotations

import os
import shlex
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppPaths:
    project_root: Path
    data_dir: Path
    db_path: Path
    scratch_dir: Path


DEFAULT_DATA_DIRNAME = ".pdfrecog"

DEFAULT_RECOGNIZER_URL = "http://62.210.116.165:8003/recognize"
DEFAULT_DOI_LOOKUP_URL = "https://api.crossref.org/works"
DEFAULT_ISBN_LOOKUP_URL = "https://openlibrary.org/api/books"
DEFAULT_MAX_PAGES = 5
DEFAULT_OFFLINE_RECHECK_SECONDS = 60.0


def load_paths(project_root: Path | None = None) -> AppPaths:
    root = (project_root or Path.cwd()).expanduser().resolve()

    home_raw = os.getenv("PDFRECOG_HOME")
    if home_raw:
        data_dir = Path(home_raw).expanduser().resolve()
    else:
        data_dir = root / DEFAULT_DATA_DIRNAME

    return AppPaths(
        project_root=root,
        data_dir=data_dir,
        db_path=data_dir / "pdfrecog.db",
        scratch_dir=data_dir / "scratch",
    )


@dataclass(frozen=True)
class RecognizerSettings:
    recognizer_url: str = DEFAULT_RECOGNIZER_URL
    request_timeout_seconds: float = 30.0
    offline_recheck_seconds: float = DEFAULT_OFFLINE_RECHECK_SECONDS
    max_pages: int = DEFAULT_MAX_PAGES
    extractor_command: tuple[str, ...] | None = None
    extractor_timeout_seconds: float = 120.0
    doi_lookup_url: str = DEFAULT_DOI_LOOKUP_URL
    isbn_lookup_url: str = DEFAULT_ISBN_LOOKUP_URL
    connectivity_probe_url: str | None = None

    @classmethod
    def from_env(cls) -> RecognizerSettings:
        command_raw = (os.getenv("PDFRECOG_EXTRACTOR_COMMAND") or "").strip()
        return cls(
            recognizer_url=_read_str_env("PDFRECOG_RECOGNIZER_URL", DEFAULT_RECOGNIZER_URL),
            request_timeout_seconds=read_float_env("PDFRECOG_REQUEST_TIMEOUT_SECONDS", 30.0),
            offline_recheck_seconds=read_float_env(
                "PDFRECOG_OFFLINE_RECHECK_SECONDS",
                DEFAULT_OFFLINE_RECHECK_SECONDS,
            ),
            max_pages=read_int_env("PDFRECOG_MAX_PAGES", DEFAULT_MAX_PAGES),
            extractor_command=tuple(shlex.split(command_raw)) if command_raw else None,
            extractor_timeout_seconds=read_float_env("PDFRECOG_EXTRACTOR_TIMEOUT_SECONDS", 120.0),
            doi_lookup_url=_read_str_env("PDFRECOG_DOI_LOOKUP_URL", DEFAULT_DOI_LOOKUP_URL),
            isbn_lookup_url=_read_str_env("PDFRECOG_ISBN_LOOKUP_URL", DEFAULT_ISBN_LOOKUP_URL),
            connectivity_probe_url=(os.getenv("PDFRECOG_CONNECTIVITY_PROBE_URL") or "").strip() or None,
        )


def _read_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def read_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default
