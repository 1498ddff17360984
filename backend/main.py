import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from insight_engine.core.config import get_settings
from insight_engine.core.errors import DatasetContractError, ErrorCodes, get_error_response
from insight_engine.core.logging import configure_logging
from insight_engine.core.schemas import Dataset, ReportOptions
from insight_engine.core.sanitization import report_download_name, sanitize_for_logging
from insight_engine.services.analyzer import coerce_dataset
from insight_engine.services.session import AnalysisSession

logger = logging.getLogger("insight_engine.cli")


def load_dataset(path: Path) -> Dataset:
    """Read a dataset from JSON: either {"fields": [...], "rows": [...]} or a list of records."""
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    if isinstance(payload, list):
        if not all(isinstance(record, dict) for record in payload):
            raise DatasetContractError("Every record must be a JSON object")
        return Dataset.from_records(payload)
    if isinstance(payload, dict) and "fields" in payload:
        return coerce_dataset(payload)
    raise DatasetContractError(f"Unsupported dataset layout in {path.name}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Profile a tabular dataset and generate insights and a report."
    )
    parser.add_argument("dataset", type=Path, help="JSON dataset file")
    parser.add_argument("--output", type=Path, help="Write the analysis result as JSON here (default: stdout)")
    parser.add_argument("--report", type=Path, help="Write a self-contained HTML report to this file or directory")
    parser.add_argument("--pdf", type=Path, help="Write a PDF report here")
    parser.add_argument("--chart-type", default="bar", help="Chart type recorded in the report (default: bar)")
    parser.add_argument("--log-level", help="Override LOG_LEVEL")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    try:
        get_settings()
    except ValidationError as e:
        logging.basicConfig(level=logging.ERROR)
        logger.error(f"Failed to load configuration: {e}")
        return 1

    configure_logging(log_level=args.log_level)

    try:
        dataset = load_dataset(args.dataset)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read {sanitize_for_logging(args.dataset)}: {e}")
        print(json.dumps(get_error_response(ErrorCodes.INVALID_DATASET, str(e)), indent=2))
        return 1
    except DatasetContractError as e:
        logger.error(f"Invalid dataset: {e}")
        print(json.dumps(get_error_response(e.code), indent=2))
        return 1

    session = AnalysisSession(
        dataset,
        file_name=os.path.basename(args.dataset),
        file_type="application/json",
    )
    result = session.analyze()

    result_json = result.model_dump_json(indent=2)
    if args.output:
        args.output.write_text(result_json, encoding="utf-8")
        logger.info(f"Analysis written to {args.output}")
    else:
        print(result_json)

    if args.report or args.pdf:
        if result.recommended_x_axis:
            session.add_chart(args.chart_type)
        else:
            session.report.initialize(session.file_name, session.file_type, dataset.row_count)

        options = ReportOptions(include_insights=True, insights=result.insights)
        try:
            if args.report:
                report_path = args.report
                if report_path.is_dir():
                    report_path = report_path / report_download_name(session.file_name)
                report_path.write_text(session.report.render_document(options), encoding="utf-8")
                logger.info(f"HTML report written to {report_path}")
            if args.pdf:
                args.pdf.write_bytes(session.report.render_pdf(options))
                logger.info(f"PDF report written to {args.pdf}")
        except Exception as e:
            logger.error(f"Report rendering failed: {e}", extra={'error_code': ErrorCodes.RENDER_ERROR})
            print(json.dumps(get_error_response(ErrorCodes.RENDER_ERROR, str(e)), indent=2))
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
