"""
PDF export for assembled reports.
"""
import base64
import binascii
import io
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from PIL import Image as PILImage
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from insight_engine.core.config import get_settings
from insight_engine.core.sanitization import escape_html, sanitize_filename
from insight_engine.core.schemas import ReportChart, ReportDocument, ReportOptions
from insight_engine.services.report_renderer import (
    CHART_CORRELATION_LIMIT,
    CHART_INSIGHT_LIMIT,
    quick_stats,
    report_kpis,
    report_title,
)

logger = logging.getLogger(__name__)

# Color scheme
PRIMARY_COLOR = HexColor('#1a1a1a')
SECONDARY_COLOR = HexColor('#666666')
ACCENT_COLOR = HexColor('#3b82f6')
BACKGROUND_COLOR = HexColor('#f8f9fa')
BORDER_COLOR = HexColor('#e2e8f0')

MAX_IMAGE_WIDTH = 7 * inch

# Standard PDF fonts have no glyphs for pictographs or arrows
_UNRENDERABLE = re.compile(r'[←-⇿⌀-➿⬀-⯿️\U0001f000-\U0001faff]')


def _clean(text: str) -> str:
    text = text.replace('↔', '<->')
    # Paragraph markup only needs &, < and > escaped
    return escape_html(_UNRENDERABLE.sub('', text).strip()).replace('&#x27;', "'").replace('&quot;', '"')


def decode_image(image: str) -> Optional[bytes]:
    """Raw bytes of a chart image given as a data URI or bare base64 string."""
    payload = image.strip()
    if payload.startswith('data:'):
        header, _, payload = payload.partition(',')
        if ';base64' not in header:
            return None
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return None


def _chart_image(image: str) -> Optional[Image]:
    raw = decode_image(image)
    if raw is None:
        logger.warning("Could not decode chart image payload")
        return None
    try:
        img = PILImage.open(io.BytesIO(raw))
        img_width, img_height = img.size
        # Scale to fit page width (with margins)
        if img_width > MAX_IMAGE_WIDTH:
            scale = MAX_IMAGE_WIDTH / img_width
            img_width = MAX_IMAGE_WIDTH
            img_height = img_height * scale

        img_buffer = io.BytesIO()
        img.save(img_buffer, format='PNG')
        img_buffer.seek(0)
        return Image(img_buffer, width=img_width, height=img_height)
    except Exception as e:
        logger.warning(f"Could not add chart image: {e}")
        return None


def _stats_table(cells: List[List[str]]) -> Table:
    table = Table(cells, hAlign='LEFT')
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), BACKGROUND_COLOR),
        ('TEXTCOLOR', (0, 0), (-1, 0), ACCENT_COLOR),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
        ('GRID', (0, 0), (-1, -1), 0.5, BORDER_COLOR),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    return table


def create_report_pdf(document: ReportDocument, options: ReportOptions) -> bytes:
    """
    Generate a PDF export of an assembled report.

    Mirrors the HTML report: cover, insights, chat transcript, one section
    per chart, KPIs and quick statistics. Images that cannot be decoded
    (e.g. SVG) are skipped with a warning.

    Returns:
        PDF file as bytes
    """
    settings = get_settings()
    generated_at = options.generated_at or datetime.now(timezone.utc)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        title=report_title(document.source_file_name),
        author=settings.report_brand,
    )
    content = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'ReportTitle',
        parent=styles['Heading1'],
        fontSize=28,
        leading=34,
        textColor=PRIMARY_COLOR,
        spaceAfter=12,
        alignment=TA_CENTER,
        fontName='Helvetica-Bold'
    )
    heading_style = ParagraphStyle(
        'ReportHeading',
        parent=styles['Heading2'],
        fontSize=18,
        textColor=PRIMARY_COLOR,
        spaceAfter=8,
        spaceBefore=16,
        fontName='Helvetica-Bold'
    )
    body_style = ParagraphStyle(
        'ReportBody',
        parent=styles['BodyText'],
        fontSize=11,
        textColor=SECONDARY_COLOR,
        spaceAfter=8,
        alignment=TA_JUSTIFY,
        leading=14
    )
    insight_style = ParagraphStyle(
        'ReportInsight',
        parent=styles['BodyText'],
        fontSize=11,
        textColor=PRIMARY_COLOR,
        spaceAfter=8,
        leftIndent=20,
    )
    meta_style = ParagraphStyle(
        'ReportMeta',
        parent=styles['Normal'],
        fontSize=12,
        textColor=SECONDARY_COLOR,
        alignment=TA_CENTER,
        spaceAfter=6
    )

    # Cover
    content.append(Paragraph(f"{_clean(settings.report_brand)} Data Analysis Report", title_style))
    content.append(Spacer(1, 0.3 * inch))
    file_name = _clean(sanitize_filename(document.source_file_name))
    for label, value in [
        ("Report Generated", generated_at.strftime("%Y-%m-%d %H:%M UTC")),
        ("Data Source", file_name),
        ("Total Records", f"{document.total_rows:,}"),
        ("Charts Included", str(len(document.charts))),
    ]:
        content.append(Paragraph(f"<b>{label}:</b> {value}", meta_style))
    content.append(Spacer(1, 0.3 * inch))

    if options.include_insights and options.insights:
        content.append(Paragraph("Generated Insights", heading_style))
        for insight in options.insights[:settings.report_max_insights]:
            content.append(Paragraph(
                f"• <b>{_clean(insight.title)}</b>: {_clean(insight.description)}", insight_style
            ))

    if options.include_chat and options.chat_messages:
        content.append(Paragraph("Assistant Conversation", heading_style))
        for message in options.chat_messages:
            label = "You" if message.role == "user" else "Assistant"
            content.append(Paragraph(f"<b>{label}:</b> {_clean(message.content)}", body_style))

    for index, chart in enumerate(document.charts, start=1):
        content.append(PageBreak())
        content.extend(_chart_flowables(index, chart, heading_style, body_style, insight_style))

    kpis = report_kpis(document)
    if kpis:
        content.append(Paragraph("Overall KPIs", heading_style))
        content.append(_stats_table([
            ["Combined Total", "Average Mean", "Data Points"],
            [f"{kpis['total_sum']:,.0f}", f"{kpis['average_mean']:,.2f}", f"{kpis['data_points']:,}"],
        ]))

    first_stats = quick_stats(document) if options.include_quick_stats else None
    if first_stats:
        content.append(Paragraph("Quick Statistics Summary", heading_style))
        content.append(_stats_table([
            ["Mean", "Median", "Std Dev", "Min", "Max", "Sum", "Count"],
            [
                f"{first_stats.mean:.2f}",
                f"{first_stats.median:.2f}",
                f"{first_stats.std_dev:.2f}",
                f"{first_stats.min:.2f}",
                f"{first_stats.max:.2f}",
                f"{first_stats.sum:.2f}",
                str(first_stats.count),
            ],
        ]))

    footer_style = ParagraphStyle(
        'FooterStyle',
        parent=styles['Normal'],
        fontSize=9,
        textColor=HexColor('#999999'),
        alignment=TA_CENTER
    )
    content.append(Spacer(1, 0.3 * inch))
    content.append(Paragraph(
        f"Generated by {_clean(settings.report_brand)} from {file_name} • {document.total_rows:,} rows analyzed",
        footer_style
    ))

    doc.build(content)

    buffer.seek(0)
    pdf_bytes = buffer.read()
    buffer.close()

    logger.debug(f"Rendered PDF report with {len(document.charts)} charts ({len(pdf_bytes)} bytes)")
    return pdf_bytes


def _chart_flowables(index, chart: ReportChart, heading_style, body_style, insight_style):
    flowables = [
        Paragraph(f"{index}. {_clean(chart.title or chart.chart_label)}", heading_style),
        Paragraph(f"X-Axis: {_clean(chart.x_axis)} | Y-Axis: {_clean(chart.y_axis)}", body_style),
    ]

    if chart.image:
        image = _chart_image(chart.image)
        if image is not None:
            flowables.append(image)
            flowables.append(Spacer(1, 0.15 * inch))

    if chart.stats:
        flowables.append(_stats_table([
            ["Mean", "Median", "Sum", "Count"],
            [f"{chart.stats.mean:.2f}", f"{chart.stats.median:.2f}", f"{chart.stats.sum:.2f}", str(chart.stats.count)],
        ]))
        flowables.append(Spacer(1, 0.15 * inch))

    if chart.insights:
        flowables.append(Paragraph("<b>Key Insights</b>", body_style))
        for insight in chart.insights[:CHART_INSIGHT_LIMIT]:
            flowables.append(Paragraph(
                f"• <b>{_clean(insight.title)}</b>: {_clean(insight.description)}", insight_style
            ))

    if chart.correlations:
        flowables.append(Paragraph("<b>Correlations</b>", body_style))
        for corr in chart.correlations[:CHART_CORRELATION_LIMIT]:
            flowables.append(Paragraph(
                f"• {_clean(corr.field1)} &lt;-&gt; {_clean(corr.field2)}: "
                f"{corr.correlation * 100:.0f}% ({corr.strength})",
                insight_style
            ))

    return flowables
