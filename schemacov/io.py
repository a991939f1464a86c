"""Loading schema, suite and target documents from disk."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import orjson

from schemacov.errors import MalformedInputError
from schemacov.lib.log import get_logger
from schemacov.models import Suite, parse_suites

logger = get_logger(__name__)

JSON_SUFFIX = ".json"


def list_files(paths: Iterable[str | Path], suffix: str = JSON_SUFFIX) -> list[Path]:
    """Expand files and directories (recursively) into matching files.

    Explicit file arguments are kept only when they carry ``suffix``;
    directory entries are visited in sorted order.
    """
    found: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        if path.is_dir():
            found.extend(list_files(sorted(path.iterdir()), suffix))
        elif path.suffix == suffix:
            found.append(path)
    return found


def load_json(path: str | Path) -> Any:
    """Decode one JSON file.

    Raises:
        MalformedInputError: If the file is not valid JSON.
    """
    path = Path(path)
    try:
        return orjson.loads(path.read_bytes())
    except orjson.JSONDecodeError as exc:
        raise MalformedInputError(str(path), str(exc)) from exc


def load_schemas(paths: Iterable[str | Path]) -> list[Any]:
    files = list_files(paths)
    logger.debug("Loading schemas", files=len(files))
    return [load_json(path) for path in files]


def load_targets(paths: Iterable[str | Path]) -> list[Any]:
    return load_schemas(paths)


def load_suites(paths: Iterable[str | Path]) -> list[Suite]:
    """Load every suite file; each holds a JSON array of suites."""
    suites: list[Suite] = []
    for path in list_files(paths):
        suites.extend(parse_suites(load_json(path), source=str(path)))
    logger.debug("Loaded suites", suites=len(suites))
    return suites
