"""Printable health report."""

from datetime import datetime
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape

from ..models.summary import TrackingSummary
from ..models.tracking import FoodCategory
from .analysis import percentage


class ReportBuilder:
    """Renders a tracking summary as a standalone HTML document."""

    TEMPLATE = "report.html"

    def __init__(self):
        self.env = Environment(
            loader=PackageLoader("digestigo", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def dietary_rows(self, summary: TrackingSummary) -> list[dict]:
        total = summary.dietary.total
        return [
            {
                "label": fc.value.capitalize(),
                "count": summary.dietary.count(fc),
                "percent": percentage(summary.dietary.count(fc), total),
            }
            for fc in FoodCategory
        ]

    def render_html(
        self,
        summary: TrackingSummary,
        insight: Optional[str] = None,
        generated_at: Optional[datetime] = None,
    ) -> str:
        template = self.env.get_template(self.TEMPLATE)
        return template.render(
            summary=summary,
            insight=insight,
            dietary_rows=self.dietary_rows(summary),
            dietary_total=summary.dietary.total,
            generated_at=generated_at or datetime.now(),
        )
