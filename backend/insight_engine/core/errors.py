"""
Error codes, user-facing messages and contract errors.

The analysis core has no fatal error category: degenerate input yields empty
results and report mutations return a success flag. Only caller contract
violations raise.
"""
from typing import Dict, Optional


class ErrorCodes:
    INVALID_DATASET = "INVALID_DATASET"
    DUPLICATE_FIELDS = "DUPLICATE_FIELDS"
    REPORT_NOT_INITIALIZED = "REPORT_NOT_INITIALIZED"
    CHART_NOT_FOUND = "CHART_NOT_FOUND"
    INVALID_REORDER = "INVALID_REORDER"
    RENDER_ERROR = "RENDER_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class DatasetContractError(TypeError):
    """Raised when a caller hands the engine something that is not a dataset."""

    def __init__(self, message: str, code: str = ErrorCodes.INVALID_DATASET):
        super().__init__(message)
        self.code = code


ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    ErrorCodes.INVALID_DATASET: {
        "message": "We couldn't read this dataset",
        "detail": "The analyzer expects a list of field names and a list of rows keyed by those names.",
        "suggestion": "💡 Make sure the data has a header row and that each row is an object keyed by column name."
    },
    ErrorCodes.DUPLICATE_FIELDS: {
        "message": "Some column names appear twice",
        "detail": "Every column needs a unique name so insights and charts can refer to it unambiguously.",
        "suggestion": "💡 Rename the repeated columns (for example 'Sales' and 'Sales 2') and try again."
    },
    ErrorCodes.REPORT_NOT_INITIALIZED: {
        "message": "There is no report yet",
        "detail": "Charts can only be added once a report has been started for the current file.",
        "suggestion": "💡 Start a report for your dataset first, then add charts to it."
    },
    ErrorCodes.CHART_NOT_FOUND: {
        "message": "That chart is no longer in the report",
        "detail": "The chart may already have been removed, or the report was cleared.",
        "suggestion": "💡 Refresh the report view to see the current list of charts."
    },
    ErrorCodes.INVALID_REORDER: {
        "message": "That move isn't possible",
        "detail": "Charts can only be moved between existing positions in the report.",
        "suggestion": "💡 Drag the chart to a position inside the report list."
    },
    ErrorCodes.RENDER_ERROR: {
        "message": "We couldn't build your report",
        "detail": "Something went wrong while putting the report document together.",
        "suggestion": "💡 Try removing charts without an image, then export again."
    },
    ErrorCodes.UNKNOWN_ERROR: {
        "message": "Hmm, something unexpected happened",
        "detail": "We encountered an issue we weren't expecting. Don't worry - it's not your fault!",
        "suggestion": "💡 Give it another try in a moment. If the problem keeps happening, try a smaller dataset."
    }
}


def get_error_response(error_code: str, additional_detail: Optional[str] = None) -> Dict[str, str]:
    """
    Get user-friendly error response for an error code.

    Args:
        error_code: One of the ErrorCodes constants
        additional_detail: Optional additional detail to append

    Returns:
        Dictionary with code, message, detail, and suggestion
    """
    error_info = ERROR_MESSAGES.get(error_code, ERROR_MESSAGES[ErrorCodes.UNKNOWN_ERROR])

    response = {
        "code": error_code,
        "message": error_info["message"],
        "detail": error_info["detail"],
        "suggestion": error_info["suggestion"]
    }

    if additional_detail:
        response["detail"] = f"{response['detail']} {additional_detail}"

    return response
