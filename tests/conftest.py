import sys
from pathlib import Path

import orjson
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from schemacov.engine import Validator
from schemacov.registry import SchemaRegistry


@pytest.fixture
def registry():
    return SchemaRegistry()


@pytest.fixture
def validator(registry):
    return Validator(registry)


@pytest.fixture
def check(validator):
    """Validate data against an ad-hoc schema bound to the entry alias."""

    def _check(schema, data):
        validator.registry.put("@entry", schema)
        return validator.validate("@entry#", data).is_valid

    return _check


@pytest.fixture
def events():
    return []


@pytest.fixture
def recorder(events):
    def _record(keyword, pointer, error):
        events.append((keyword, pointer, error is None))

    return _record


@pytest.fixture
def write_json(tmp_path):
    def _write(relative: str, payload) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(orjson.dumps(payload))
        return path

    return _write
