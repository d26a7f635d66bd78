"""
Run report generator.

Renders a plain-text report of one run (suite, status, timings and the
full log trail) from a Jinja2 template.
"""

import logging
from typing import Optional

from jinja2 import Environment, StrictUndefined, Template

from ..storage.models import RunResult, TestSuite


RUN_REPORT_TEMPLATE = """\
Run {{ run.id }}
Suite:    {{ suite_name }} ({{ run.suite_id }})
Status:   {{ run.status.value | upper }}
Started:  {{ run.start_time.isoformat() }}
{% if run.end_time %}Finished: {{ run.end_time.isoformat() }}
Duration: {{ "%.2f" | format(run.duration) }}s
{% else %}Finished: -
{% endif %}
Log ({{ run.logs | length }} lines):
{% for line in run.logs %}  {{ loop.index }}. {{ line }}
{% else %}  (no log lines)
{% endfor %}"""


class ReportGenerator:
    """Renders run reports and builds report links."""

    def __init__(
        self,
        report_base_url: str = "",
        template: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.report_base_url = report_base_url.rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self.jinja_env = Environment(
            autoescape=False,
            trim_blocks=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._template: Template = self.jinja_env.from_string(
            template or RUN_REPORT_TEMPLATE
        )

    def report_url(self, run_id: str) -> str:
        """Get the report link for a run."""
        return f"{self.report_base_url}/{run_id}"

    def render(self, run: RunResult, suite: Optional[TestSuite] = None) -> str:
        """
        Render a text report for a run.

        Args:
            run: Run to report on
            suite: Owning suite, if it still exists

        Returns:
            Rendered report text
        """
        suite_name = suite.name if suite is not None else "(deleted suite)"
        self.logger.debug(f"Rendering report for run {run.id}")
        return self._template.render(run=run, suite_name=suite_name)
