"""Machine-readable coverage output."""

from __future__ import annotations

import orjson

from schemacov.coverage import CoverageResultSet


class JsonReporter:
    def render(self, results: CoverageResultSet) -> str:
        payload = {identifier: [row.to_dict() for row in rows] for identifier, rows in results.items()}
        return orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8")
