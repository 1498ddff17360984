"""
HTML rendering for assembled reports.

Produces a single self-contained document (inline CSS, images embedded as
data URIs) that can be saved or downloaded as-is.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from insight_engine.core.config import get_settings
from insight_engine.core.sanitization import escape_html, sanitize_filename
from insight_engine.core.schemas import DescriptiveStats, Insight, ReportChart, ReportDocument, ReportOptions

logger = logging.getLogger(__name__)

CHART_INSIGHT_LIMIT = 3
CHART_CORRELATION_LIMIT = 4

STYLE = """
* { box-sizing: border-box; margin: 0; padding: 0; }
body { font-family: 'Segoe UI', 'Helvetica Neue', Arial, sans-serif; color: #1e293b; line-height: 1.7; background: #ffffff; }
.page { padding: 60px 50px 80px 50px; max-width: 1000px; margin: 0 auto; }
.cover { text-align: center; padding: 80px 50px; color: white; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); page-break-after: always; }
.cover h1 { font-size: 44px; font-weight: 700; margin-bottom: 16px; }
.cover .subtitle { font-size: 22px; font-weight: 300; margin-bottom: 40px; }
.cover-meta { display: inline-block; text-align: left; background: rgba(255,255,255,0.15); padding: 24px 40px; border-radius: 16px; }
.cover-meta div { font-size: 17px; margin: 8px 0; }
.cover-meta span.label { font-weight: 600; margin-right: 10px; }
.meta-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 25px; margin-bottom: 50px; }
.meta-item { text-align: center; padding: 20px; background: #f8fafc; border: 2px solid #e2e8f0; border-radius: 8px; }
.meta-label, .stat-label, .quick-stat-label { font-size: 12px; color: #64748b; text-transform: uppercase; letter-spacing: 0.5px; font-weight: 600; }
.meta-value { font-size: 22px; font-weight: 700; margin-top: 8px; word-break: break-word; }
.section { margin: 50px 0; padding: 35px; border-radius: 12px; page-break-inside: avoid; }
.section h2 { font-size: 26px; font-weight: 700; margin-bottom: 24px; }
.all-insights { background: #f0fdf4; }
.chat { background: #eff6ff; }
.chat-message { margin-bottom: 20px; }
.chat-label { font-size: 12px; color: #64748b; margin-bottom: 6px; text-transform: uppercase; font-weight: 600; }
.chat-user { background: #3b82f6; color: white; padding: 16px 20px; border-radius: 16px 16px 4px 16px; margin-left: 50px; }
.chat-assistant { background: white; padding: 16px 20px; border-radius: 16px 16px 16px 4px; margin-right: 50px; border: 1px solid #e2e8f0; }
.chart-section { margin-bottom: 70px; padding: 35px; border: 1px solid #e2e8f0; border-radius: 12px; page-break-inside: avoid; }
.chart-header { display: flex; align-items: center; gap: 15px; margin-bottom: 25px; padding-bottom: 20px; border-bottom: 3px solid #e2e8f0; }
.chart-number { background: #3b82f6; color: white; width: 42px; height: 42px; border-radius: 50%; display: flex; align-items: center; justify-content: center; font-weight: 700; font-size: 18px; }
.chart-title { font-size: 24px; font-weight: 700; }
.chart-subtitle { font-size: 14px; color: #64748b; }
.chart-image { text-align: center; background: #f8fafc; border-radius: 12px; padding: 30px; margin: 30px 0; border: 1px solid #e2e8f0; }
.chart-image img { max-width: 100%; height: auto; border-radius: 8px; }
.stats-grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 18px; margin: 30px 0; }
.stat-box { background: #f1f5f9; padding: 22px; border-radius: 10px; text-align: center; border: 1px solid #cbd5e1; }
.stat-value { font-size: 22px; font-weight: 800; margin-top: 8px; }
.insights { margin: 30px 0; padding: 25px; background: #f0fdf4; border-radius: 10px; }
.insights-title { font-size: 18px; font-weight: 700; margin-bottom: 18px; }
.insight-card { background: white; border-left: 5px solid #22c55e; padding: 18px 20px; margin-bottom: 15px; border-radius: 0 10px 10px 0; }
.insight-card-title { font-weight: 700; color: #166534; font-size: 15px; }
.insight-card-desc { color: #15803d; font-size: 14px; margin-top: 6px; }
.correlations { margin: 30px 0; padding: 25px; background: #eff6ff; border-radius: 10px; }
.correlation-item { display: inline-block; background: white; padding: 12px 18px; border-radius: 8px; margin: 6px; font-size: 14px; font-weight: 600; }
.correlation-strong { background: #dcfce7; color: #166534; border: 2px solid #22c55e; }
.correlation-moderate { background: #fef3c7; color: #92400e; border: 2px solid #fbbf24; }
.kpi { background: linear-gradient(135deg, #3b82f6 0%, #8b5cf6 100%); color: white; padding: 40px; border-radius: 16px; margin: 50px 0; }
.kpi h2 { font-size: 24px; margin-bottom: 25px; }
.kpi-grid { display: grid; grid-template-columns: repeat(3, 1fr); gap: 30px; }
.kpi-item { text-align: center; padding: 20px; background: rgba(255,255,255,0.15); border-radius: 12px; }
.kpi-value { font-size: 34px; font-weight: 800; }
.kpi-label { font-size: 14px; margin-top: 8px; }
.quick-stats { background: #f8fafc; border: 2px solid #e2e8f0; }
.quick-stats-grid { display: grid; grid-template-columns: repeat(7, 1fr); gap: 15px; }
.quick-stat-box { background: white; padding: 20px 12px; border-radius: 10px; text-align: center; border: 2px solid #e2e8f0; }
.quick-stat-value { font-size: 20px; font-weight: 800; color: #3b82f6; }
.footer { margin-top: 60px; padding-top: 20px; border-top: 1px solid #e2e8f0; font-size: 11px; color: #64748b; text-align: center; }
@media print { .page { padding: 40px 30px 70px 30px; } }
"""


def report_title(file_name: str) -> str:
    """Readable report title derived from the source file name."""
    base = re.sub(r'\.[^.]+$', '', sanitize_filename(file_name))
    base = base.replace('_', ' ').replace('-', ' ').strip().title()
    return f"{base} - Data Analysis Report" if base else "Data Analysis Report"


def image_src(image: str) -> str:
    """Data URI for an embedded chart image; bare payloads are treated as base64 PNG."""
    payload = image.strip()
    if payload.startswith('data:'):
        return payload
    return f"data:image/png;base64,{payload}"


def report_kpis(document: ReportDocument) -> Optional[Dict[str, float]]:
    """
    Aggregate KPIs across every chart that carries stats.

    Returns:
        Dict with combined total, average mean and total data points,
        or None when no chart has stats
    """
    stats = [chart.stats for chart in document.charts if chart.stats]
    if not stats:
        return None
    return {
        'total_sum': sum(s.sum for s in stats),
        'average_mean': sum(s.mean for s in stats) / len(stats),
        'data_points': sum(s.count for s in stats),
    }


def quick_stats(document: ReportDocument) -> Optional[DescriptiveStats]:
    """Stats snapshot of the first chart in the report."""
    if document.charts and document.charts[0].stats:
        return document.charts[0].stats
    return None


def _insight_cards(insights: List[Insight]) -> str:
    return "".join(
        f'<div class="insight-card"><div class="insight-card-title">{escape_html(i.title)}</div>'
        f'<div class="insight-card-desc">{escape_html(i.description)}</div></div>'
        for i in insights
    )


def _render_chart(index: int, chart: ReportChart) -> str:
    parts = [
        '<div class="chart-section">',
        '<div class="chart-header">',
        f'<div class="chart-number">{index}</div>',
        f'<div><div class="chart-title">{escape_html(chart.title or chart.chart_label)}</div>',
        f'<div class="chart-subtitle">X-Axis: {escape_html(chart.x_axis)} | Y-Axis: {escape_html(chart.y_axis)}</div></div>',
        '</div>',
    ]

    if chart.image:
        parts.append(
            f'<div class="chart-image"><img src="{escape_html(image_src(chart.image), max_length=50_000_000)}" '
            f'alt="{escape_html(chart.chart_label)}" /></div>'
        )

    if chart.stats:
        boxes = [
            ("Mean", f"{chart.stats.mean:.2f}"),
            ("Median", f"{chart.stats.median:.2f}"),
            ("Sum", f"{chart.stats.sum:.2f}"),
            ("Count", str(chart.stats.count)),
        ]
        parts.append('<div class="stats-grid">')
        parts.extend(
            f'<div class="stat-box"><div class="stat-label">{label}</div><div class="stat-value">{value}</div></div>'
            for label, value in boxes
        )
        parts.append('</div>')

    if chart.insights:
        parts.append('<div class="insights"><div class="insights-title">💡 Key Insights</div>')
        parts.append(_insight_cards(chart.insights[:CHART_INSIGHT_LIMIT]))
        parts.append('</div>')

    if chart.correlations:
        parts.append('<div class="correlations"><div class="insights-title">🔗 Correlations</div>')
        for corr in chart.correlations[:CHART_CORRELATION_LIMIT]:
            css = {'Strong': ' correlation-strong', 'Moderate': ' correlation-moderate'}.get(corr.strength, '')
            parts.append(
                f'<span class="correlation-item{css}">{escape_html(corr.field1)} ↔ '
                f'{escape_html(corr.field2)}: {corr.correlation * 100:.0f}%</span>'
            )
        parts.append('</div>')

    parts.append('</div>')
    return "".join(parts)


def render_report_html(document: ReportDocument, options: ReportOptions) -> str:
    """
    Render the report as one HTML document.

    Sections, in order: cover and metadata, optional insight list,
    optional chat transcript, one section per chart in queue order,
    overall KPIs and the quick statistics of the first chart.
    """
    settings = get_settings()
    brand = escape_html(settings.report_brand)
    generated_at = options.generated_at or datetime.now(timezone.utc)
    file_name = escape_html(sanitize_filename(document.source_file_name))
    total_rows = f"{document.total_rows:,}"
    chart_count = len(document.charts)

    parts = [
        '<!DOCTYPE html>\n<html>\n<head>\n<meta charset="UTF-8">\n',
        f'<title>{escape_html(report_title(document.source_file_name))}</title>\n',
        f'<style>{STYLE}</style>\n</head>\n<body>\n',
        '<div class="cover">',
        f'<h1>{brand} Data Analysis Report</h1>',
        '<p class="subtitle">Comprehensive Analytics &amp; Insights</p>',
        '<div class="cover-meta">',
        f'<div><span class="label">Report Generated:</span>{generated_at.strftime("%Y-%m-%d %H:%M UTC")}</div>',
        f'<div><span class="label">Data Source:</span>{file_name}</div>',
        f'<div><span class="label">Total Records:</span>{total_rows}</div>',
        f'<div><span class="label">Charts Included:</span>{chart_count}</div>',
        '</div></div>\n',
        '<div class="page">',
        '<div class="meta-grid">',
        f'<div class="meta-item"><div class="meta-label">Source File</div><div class="meta-value">{file_name}</div></div>',
        f'<div class="meta-item"><div class="meta-label">Total Records</div><div class="meta-value">{total_rows}</div></div>',
        f'<div class="meta-item"><div class="meta-label">Charts Included</div><div class="meta-value">{chart_count}</div></div>',
        '</div>\n',
    ]

    if options.include_insights and options.insights:
        parts.append('<div class="section all-insights"><h2>💡 Generated Insights</h2>')
        parts.append(_insight_cards(options.insights[:settings.report_max_insights]))
        parts.append('</div>\n')

    if options.include_chat and options.chat_messages:
        parts.append('<div class="section chat"><h2>🤖 Assistant Conversation</h2>')
        for message in options.chat_messages:
            label, css = ("You", "chat-user") if message.role == "user" else ("Assistant", "chat-assistant")
            parts.append(
                f'<div class="chat-message"><div class="chat-label">{label}</div>'
                f'<div class="{css}">{escape_html(message.content)}</div></div>'
            )
        parts.append('</div>\n')

    for index, chart in enumerate(document.charts, start=1):
        parts.append(_render_chart(index, chart))
        parts.append('\n')

    kpis = report_kpis(document)
    if kpis:
        parts.append(
            '<div class="kpi"><h2>📈 Overall KPIs</h2><div class="kpi-grid">'
            f'<div class="kpi-item"><div class="kpi-value">{kpis["total_sum"]:,.0f}</div><div class="kpi-label">Combined Total</div></div>'
            f'<div class="kpi-item"><div class="kpi-value">{kpis["average_mean"]:,.2f}</div><div class="kpi-label">Average Mean</div></div>'
            f'<div class="kpi-item"><div class="kpi-value">{kpis["data_points"]:,}</div><div class="kpi-label">Data Points</div></div>'
            '</div></div>\n'
        )

    first_stats = quick_stats(document) if options.include_quick_stats else None
    if first_stats:
        boxes = [
            ("Mean", f"{first_stats.mean:.2f}"),
            ("Median", f"{first_stats.median:.2f}"),
            ("Std Dev", f"{first_stats.std_dev:.2f}"),
            ("Min", f"{first_stats.min:.2f}"),
            ("Max", f"{first_stats.max:.2f}"),
            ("Sum", f"{first_stats.sum:.2f}"),
            ("Count", str(first_stats.count)),
        ]
        parts.append('<div class="section quick-stats"><h2>📊 Quick Statistics Summary</h2><div class="quick-stats-grid">')
        parts.extend(
            f'<div class="quick-stat-box"><div class="quick-stat-value">{value}</div>'
            f'<div class="quick-stat-label">{label}</div></div>'
            for label, value in boxes
        )
        parts.append('</div></div>\n')

    parts.append(f'<div class="footer">Generated by {brand} &middot; {generated_at.year}</div>')
    parts.append('</div>\n</body>\n</html>\n')

    logger.debug(f"Rendered HTML report with {chart_count} charts")
    return "".join(parts)
