import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Mapping, Union

from quartermaster.domain.forms import FormSchema
from quartermaster.exceptions import ApiError, FormValidationError, NetworkError
from quartermaster.services.api import GENERIC_FAILURE

logger = logging.getLogger("quartermaster.views.forms")

INVALID_FORM = "Please correct the highlighted fields"


@dataclass(frozen=True)
class SubmitSuccess:
    record: Any
    redirect_to: str
    message: str
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class SubmitFailure:
    message: str
    status: int
    errors: dict[str, str] = field(default_factory=dict)
    ok: bool = field(default=False, init=False)


SubmitResult = Union[SubmitSuccess, SubmitFailure]


def failure_from(exc: Exception, fallback: str) -> SubmitFailure:
    if isinstance(exc, FormValidationError):
        return SubmitFailure(message=INVALID_FORM, status=422, errors=exc.errors)
    if isinstance(exc, ApiError):
        message = exc.message if exc.message != GENERIC_FAILURE else fallback
        return SubmitFailure(message=message, status=exc.status)
    if isinstance(exc, NetworkError):
        return SubmitFailure(message=str(exc), status=502)
    raise exc


class FormSubmitter:
    """
    Validate, create once, point at the new record's detail view.

    An invalid payload never reaches `create`. Backend failures come back as
    SubmitFailure carrying the server's message, or `failure_message` when
    the server gave none.
    """

    def __init__(
        self,
        schema: type[FormSchema],
        create: Callable[[FormSchema], Any],
        detail_path: str,
        success_message: str,
        failure_message: str,
    ):
        self.schema = schema
        self.create = create
        self.detail_path = detail_path
        self.success_message = success_message
        self.failure_message = failure_message

    def validate(self, data: Mapping[str, Any]) -> FormSchema:
        return self.schema.parse_form(data)

    def submit(self, data: Mapping[str, Any]) -> SubmitResult:
        try:
            form = self.validate(data)
        except FormValidationError as exc:
            return failure_from(exc, self.failure_message)

        try:
            record = self.create(form)
        except (ApiError, NetworkError) as exc:
            logger.warning("create failed", extra={"form": self.schema.__name__, "error": str(exc)})
            return failure_from(exc, self.failure_message)

        return SubmitSuccess(
            record=record,
            redirect_to=self.detail_path.format(id=record.id),
            message=self.success_message,
        )


def today() -> str:
    return date.today().isoformat()

