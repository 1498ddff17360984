"""
Analysis session.

Bundles one dataset with its latest analysis and its report so several
datasets can be worked on side by side without shared state.
"""
import logging
import uuid
from typing import Any, Mapping, Optional, Union

from insight_engine.core.config import get_settings
from insight_engine.core.logging import session_logger
from insight_engine.core.schemas import AnalyticsResult, Dataset, ReportChart
from insight_engine.services.analyzer import coerce_dataset, run_full_analysis
from insight_engine.services.report_builder import ReportAssembler, chart_from_analysis

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    The working state behind one open dataset.

    Holds the dataset, the most recent AnalyticsResult and a ReportAssembler.
    Analysis only sees the first ``max_analysis_rows`` rows; the report
    records the full row count.
    """

    def __init__(
        self,
        dataset: Union[Dataset, Mapping[str, Any]],
        file_name: str = "dataset",
        file_type: str = "application/json",
        session_id: Optional[str] = None,
    ):
        self.dataset = coerce_dataset(dataset)
        self.file_name = file_name
        self.file_type = file_type
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.report = ReportAssembler()
        self._last_result: Optional[AnalyticsResult] = None
        self.log = session_logger(logger, self.session_id)

    @property
    def last_result(self) -> Optional[AnalyticsResult]:
        return self._last_result

    def analyze(self) -> AnalyticsResult:
        """Run the full analysis over the capped dataset and keep the result."""
        limit = get_settings().max_analysis_rows
        sample = self.dataset.head(limit)
        if self.dataset.row_count > limit:
            self.log.info(f"Analyzing first {limit} of {self.dataset.row_count} rows")

        self._last_result = run_full_analysis(sample)
        self.log.info(
            f"Analysis complete: {len(self._last_result.insights)} insights, "
            f"x={self._last_result.recommended_x_axis!r}, y={self._last_result.recommended_y_axis!r}"
        )
        return self._last_result

    def regenerate(self) -> AnalyticsResult:
        """Recompute the analysis; the previous result is replaced, never merged."""
        self.log.debug("Regenerating insights")
        return self.analyze()

    def replace_dataset(
        self,
        dataset: Union[Dataset, Mapping[str, Any]],
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> None:
        """Switch to a new dataset; the old analysis and report are dropped."""
        self.dataset = coerce_dataset(dataset)
        if file_name:
            self.file_name = file_name
        if file_type:
            self.file_type = file_type
        self._last_result = None
        self.report.discard()
        self.log.info(f"Dataset replaced ({self.dataset.row_count} rows)")

    def add_chart(
        self,
        chart_type: str,
        x_axis: Optional[str] = None,
        y_axis: Optional[str] = None,
        image: Optional[str] = None,
        chart_label: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[ReportChart]:
        """
        Snapshot a chart into this session's report.

        Axes default to the recommended ones; the dataset is analyzed first
        if no result is available yet.
        """
        result = self._last_result or self.analyze()
        x_axis = x_axis or result.recommended_x_axis
        y_axis = y_axis or result.recommended_y_axis

        self.report.initialize(self.file_name, self.file_type, self.dataset.row_count)
        draft = chart_from_analysis(
            self.dataset,
            result,
            chart_type,
            x_axis,
            y_axis,
            image=image,
            chart_label=chart_label,
            title=title,
        )
        chart = self.report.add_chart(draft)
        if chart:
            self.log.info(f"Added {chart_type} chart to report ({self.report.chart_count()} total)")
        return chart
