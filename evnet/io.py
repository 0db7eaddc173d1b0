"""
Reading configs and writing generated artifacts (stations, edges, route
tables, trips, manifests). Every write goes through a temporary file in the
target directory that then replaces the target.
"""

import csv
import io
import json
import tempfile
from datetime import datetime, timezone
from hashlib import sha256
from pathlib import Path
from typing import Any, Iterable
import yaml


def ensure_dir(directory: str | Path) -> Path:
    """
    Create an artifact directory (and its parents) if missing.
    """
    directory_path = Path(directory)
    directory_path.mkdir(parents=True, exist_ok=True)
    return directory_path


def now_utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def read_yaml(path: str | Path) -> dict:
    """
    Read a YAML config. An empty file reads as an empty dict.
    """
    with Path(path).open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def read_json(path: str | Path) -> Any:
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str | Path, data: Any, *, indent: int | None = 2) -> None:
    """
    Write JSON-serializable data. Station names contain non-ASCII characters
    in some catalogs, so they are kept as-is. Large artifacts (trips, route
    tables) pass `indent=None` to stay compact.
    """
    _atomic_write(Path(path), json.dumps(data, ensure_ascii=False, indent=indent))


def write_csv_rows(
    path: str | Path,
    rows: list[dict[str, Any]],
    fieldnames: list[str] | None = None,
) -> None:
    """
    Write summary rows to a CSV file. Without `fieldnames` the columns are
    the row keys in order of first appearance; missing cells stay empty.
    """
    if not rows and not fieldnames:
        raise ValueError("rows is empty and fieldnames not provided")
    columns = fieldnames or _columns(rows)
    buffer = io.StringIO(newline="")
    writer = csv.DictWriter(buffer, fieldnames=columns)
    writer.writeheader()
    for row in rows:
        writer.writerow({k: row.get(k) for k in columns})
    _atomic_write(Path(path), buffer.getvalue())


def file_sha256(path: str | Path, chunk_size: int = 1 << 20) -> str:
    """
    SHA-256 of an artifact, recorded in manifests of dependent artifacts.
    """
    digest = sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_manifest(path: str | Path, meta: dict[str, Any]) -> None:
    """
    Write an artifact manifest: creation time (UTC) followed by `meta`.
    """
    write_json(path, {"created_at_utc": now_utc_iso(), **meta})


def _columns(rows: Iterable[dict[str, Any]]) -> list[str]:
    columns: dict[str, None] = {}
    for row in rows:
        columns.update(dict.fromkeys(row))
    return list(columns)


def _atomic_write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", newline="", delete=False, dir=str(path.parent)
    ) as tmp:
        tmp.write(content)
        tmp_path = Path(tmp.name)
    try:
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise
