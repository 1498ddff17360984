"""
Report assembly.

Keeps the ordered queue of charts a user picked for the current dataset,
together with the statistics, insights and correlations captured when
each chart was added.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from insight_engine.core.config import get_settings
from insight_engine.core.errors import ErrorCodes
from insight_engine.core.performance import track_performance
from insight_engine.core.sanitization import sanitize_for_logging
from insight_engine.core.schemas import (
    AnalyticsResult,
    Dataset,
    ReportChart,
    ReportChartDraft,
    ReportDocument,
    ReportOptions,
)
from insight_engine.services.pdf_generator import create_report_pdf
from insight_engine.services.report_renderer import render_report_html
from insight_engine.services.statistics import describe_column

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_chart_id() -> str:
    return f"chart_{int(_now().timestamp() * 1000)}_{uuid.uuid4().hex[:9]}"


def chart_from_analysis(
    dataset: Dataset,
    result: AnalyticsResult,
    chart_type: str,
    x_axis: str,
    y_axis: str,
    image: Optional[str] = None,
    chart_label: Optional[str] = None,
    title: Optional[str] = None,
) -> ReportChartDraft:
    """
    Snapshot a chart the way the dashboard hands it to the report.

    Stats are computed for the Y field; the leading insights and
    correlations of the analysis are attached as they are at this moment.
    """
    settings = get_settings()
    label = chart_label or chart_type.replace('_', ' ').title()
    return ReportChartDraft(
        chart_type=chart_type,
        chart_label=label,
        x_axis=x_axis,
        y_axis=y_axis,
        title=title or f"{label}: {y_axis} by {x_axis}",
        image=image,
        data_slice=dataset.rows[:settings.report_data_slice_rows],
        stats=describe_column(dataset, y_axis),
        insights=result.insights[:settings.report_chart_insights],
        correlations=result.correlations[:settings.report_chart_correlations],
    )


class ReportAssembler:
    """
    Holds a single ReportDocument for the active dataset.

    Mutations never raise for unknown charts or bad positions; they return
    False (or None from ``add_chart``) and leave the document untouched.
    """

    def __init__(self):
        self._document: Optional[ReportDocument] = None

    @property
    def document(self) -> Optional[ReportDocument]:
        return self._document

    @property
    def charts(self) -> List[ReportChart]:
        return list(self._document.charts) if self._document else []

    def initialize(self, file_name: str, file_type: str, total_rows: int) -> ReportDocument:
        """Start a report for ``file_name``; keeps the current one if it is for the same file."""
        if self._document and self._document.source_file_name == file_name:
            return self._document

        now = _now()
        self._document = ReportDocument(
            source_file_name=file_name,
            source_file_type=file_type,
            total_rows=total_rows,
            charts=[],
            created_at=now,
            updated_at=now,
        )
        logger.info(f"Started report for {sanitize_for_logging(file_name)} ({total_rows} rows)")
        return self._document

    def _touch(self) -> None:
        self._document.updated_at = _now()

    def add_chart(self, draft: ReportChartDraft) -> Optional[ReportChart]:
        """Append a chart to the end of the queue with a fresh id and timestamp."""
        if self._document is None:
            logger.warning(
                "Cannot add chart: no report has been initialized",
                extra={'error_code': ErrorCodes.REPORT_NOT_INITIALIZED}
            )
            return None

        settings = get_settings()
        chart = ReportChart(
            **draft.model_dump(exclude={'data_slice', 'insights', 'correlations', 'stats'}),
            data_slice=draft.data_slice[:settings.report_data_slice_rows],
            stats=draft.stats,
            insights=draft.insights[:settings.report_chart_insights],
            correlations=draft.correlations[:settings.report_chart_correlations],
            id=_new_chart_id(),
            added_at=_now(),
        )
        self._document.charts.append(chart)
        self._touch()
        logger.debug(f"Added chart {chart.id} ({chart.chart_type}); {len(self._document.charts)} in report")
        return chart

    def remove_chart(self, chart_id: str) -> bool:
        """Remove one chart, keeping the relative order of the others."""
        if self._document is None:
            return False

        remaining = [c for c in self._document.charts if c.id != chart_id]
        if len(remaining) == len(self._document.charts):
            logger.info(
                f"Chart {sanitize_for_logging(chart_id)} not in report",
                extra={'error_code': ErrorCodes.CHART_NOT_FOUND}
            )
            return False

        self._document.charts = remaining
        self._touch()
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the chart at ``from_index`` so it ends up at ``to_index``."""
        if self._document is None:
            return False

        count = len(self._document.charts)
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.info(
                f"Ignoring move {from_index} -> {to_index} in a report of {count} charts",
                extra={'error_code': ErrorCodes.INVALID_REORDER}
            )
            return False

        charts = list(self._document.charts)
        moved = charts.pop(from_index)
        charts.insert(to_index, moved)
        self._document.charts = charts
        self._touch()
        return True

    def clear(self) -> None:
        """Drop every chart but keep the report metadata."""
        if self._document:
            self._document.charts = []
            self._touch()

    def discard(self) -> None:
        """Forget the report entirely, e.g. when the user switches dataset."""
        self._document = None

    def chart_count(self) -> int:
        return len(self._document.charts) if self._document else 0

    @track_performance("render_report_html")
    def render_document(self, options: Optional[ReportOptions] = None) -> Optional[str]:
        """Self-contained HTML for the current report, or None if there is no report."""
        if self._document is None:
            return None
        return render_report_html(self._document, options or ReportOptions())

    @track_performance("render_report_pdf")
    def render_pdf(self, options: Optional[ReportOptions] = None) -> Optional[bytes]:
        """PDF export of the current report, or None if there is no report."""
        if self._document is None:
            return None
        return create_report_pdf(self._document, options or ReportOptions())
