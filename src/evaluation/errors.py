"""Errors raised by the evaluation core.

Every error carries a user-facing `message`; routers pass it through as the
HTTP `detail`. Anomalies met while reading historical records (malformed tag
blocks, degenerate scales, stale question ids) are logged instead of raised.
"""
# evaluation/errors.py


class EvaluationError(Exception):
    """Base class for recoverable, user-facing evaluation errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoActivePeriod(EvaluationError):
    def __init__(self, message: str = "No hay un periodo de evaluación activo."):
        super().__init__(message)


class MissingAnonymityChoice(EvaluationError):
    def __init__(
        self,
        message: str = "Selecciona si deseas que la encuesta sea anónima antes de continuar.",
    ):
        super().__init__(message)


class ResponseKeyMismatch(EvaluationError):
    """The existing record does not belong to the submission's key."""

    def __init__(self, field: str, existing: str | None, incoming: str | None):
        super().__init__(
            f"Existing evaluation has {field}={existing!r}, submission has {field}={incoming!r}"
        )
        self.field = field
        self.existing = existing
        self.incoming = incoming


class PeriodMismatch(ResponseKeyMismatch):
    def __init__(self, existing: str | None, incoming: str | None):
        super().__init__("period_id", existing, incoming)


class InvalidAnswer(EvaluationError):
    def __init__(self, question_id: int, reason: str):
        super().__init__(f"Invalid answer for question {question_id}: {reason}")
        self.question_id = question_id


class MissingRequiredAnswer(EvaluationError):
    def __init__(self, question_ids: list[int]):
        ids = ", ".join(str(q) for q in question_ids)
        super().__init__(f"Responde todas las preguntas obligatorias ({ids}).")
        self.question_ids = question_ids
