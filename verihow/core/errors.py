from dataclasses import dataclass

from fastapi import HTTPException


class VeriHowError(Exception):
    """Base error for the analysis service."""


class InputValidationError(VeriHowError):
    """User input rejected before any collaborator call."""


class AnalysisInProgressError(VeriHowError):
    """A request of the same kind is still outstanding."""


class HistoryEntryNotFoundError(VeriHowError):
    """Unknown or malformed history entry."""


class TranslationUnavailableError(VeriHowError):
    """No active fact-check explanation to translate."""


class HistoryIntegrityError(VeriHowError):
    """Persisted history payload could not be decoded or validated."""


@dataclass(frozen=True)
class APIErrorSpec:
    code: str
    message: str
    status_code: int = 500


INPUT_VALIDATION_FAILED = APIErrorSpec(
    code="INPUT_VALIDATION_FAILED",
    message="The request was rejected because the input is incomplete.",
    status_code=422,
)

ANALYSIS_IN_PROGRESS = APIErrorSpec(
    code="ANALYSIS_IN_PROGRESS",
    message="An analysis is already running.",
    status_code=409,
)

HISTORY_ENTRY_NOT_FOUND = APIErrorSpec(
    code="HISTORY_ENTRY_NOT_FOUND",
    message="The history entry does not exist or cannot be loaded.",
    status_code=404,
)

TRANSLATION_UNAVAILABLE = APIErrorSpec(
    code="TRANSLATION_UNAVAILABLE",
    message="There is no fact-check result to translate.",
    status_code=409,
)

def to_http_exception(spec: APIErrorSpec, message: str | None = None) -> HTTPException:
    return HTTPException(
        status_code=spec.status_code,
        detail={
            "code": spec.code,
            "message": message or spec.message,
        },
    )
