"""HTML coverage report using Jinja2."""

from __future__ import annotations

from pathlib import Path

from jinja2 import DictLoader, Environment, FileSystemLoader

from schemacov.coverage import CoverageResultSet

from .base import CoverageSummary

DEFAULT_HTML_TEMPLATE = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>{{ title }}</title>
  <style>
    body {
      font-family: system-ui, Segoe UI, Roboto, sans-serif;
      max-width: 960px;
      margin: 2rem auto;
      padding: 0 1rem;
      background-color: #f9fafb;
      color: #111827;
    }
    h1 { border-bottom: 2px solid #e5e7eb; padding-bottom: 0.5rem; }
    h2 { margin-top: 2rem; color: #374151; }
    table { border-collapse: collapse; width: 100%; }
    td, th { border: 1px solid #e5e7eb; padding: 0.25rem 0.5rem; text-align: left; }
    code { font-family: ui-monospace, Menlo, monospace; }
    .metadata { color: #6b7280; font-size: 0.875rem; }
    .hit { background: #dcfce7; }
    .miss { background: #fee2e2; }
  </style>
</head>
<body>
  <h1>{{ title }}</h1>
  {% for result in results %}
  <section>
    <h2>{{ result.id or "(no id)" }}</h2>
    <p class="metadata">
      {{ result.target }} pointers,
      success coverage {{ "%.3f"|format(result.success_coverage) }},
      failure coverage {{ "%.3f"|format(result.failure_coverage) }}
    </p>
    <table>
      <tr><th>pointer</th><th>success</th><th>failure</th></tr>
      {% for detail in result.details %}
      <tr>
        <td><code>{{ detail.pointer }}</code></td>
        <td class="{{ 'hit' if detail.success else 'miss' }}">{{ "yes" if detail.success else "no" }}</td>
        <td class="{{ 'hit' if detail.failure else 'miss' }}">{{ "yes" if detail.failure else "no" }}</td>
      </tr>
      {% endfor %}
    </table>
  </section>
  {% endfor %}
</body>
</html>
"""


class HtmlReporter:
    """Renders coverage results to a standalone HTML page."""

    def __init__(self, template_path: Path | None = None, title: str = "Keyword coverage"):
        """Initialize the HTML reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template
            title: Page title
        """
        self.template_path = template_path
        self.title = title

    def _environment(self) -> tuple[Environment, str]:
        if self.template_path and self.template_path.exists():
            loader = FileSystemLoader(self.template_path.parent)
            template_name = self.template_path.name
        else:
            loader = DictLoader({"coverage.html": DEFAULT_HTML_TEMPLATE})
            template_name = "coverage.html"
        return Environment(loader=loader, autoescape=True), template_name

    def context(self, results: CoverageResultSet) -> list[dict]:
        rows = []
        for identifier, results_for_id in results.items():
            summary = CoverageSummary.from_results(identifier, results_for_id)
            prefix = f"{identifier}#"
            rows.append(
                {
                    "id": identifier,
                    "target": summary.total,
                    "success_coverage": summary.success_coverage,
                    "failure_coverage": summary.failure_coverage,
                    "details": [
                        {
                            "pointer": row.pointer[len(prefix):] if row.pointer.startswith(prefix) else row.pointer,
                            "success": row.succeeded,
                            "failure": row.failed,
                        }
                        for row in results_for_id
                    ],
                }
            )
        return rows

    def render(self, results: CoverageResultSet) -> str:
        env, template_name = self._environment()
        template = env.get_template(template_name)
        return template.render(title=self.title, results=self.context(results))
