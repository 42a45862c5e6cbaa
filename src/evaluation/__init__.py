from .models import (
    Category,
    Employee,
    EvaluationRecord,
    PartialSubmission,
    Question,
    QuestionType,
    ResponseKey,
    Section,
)
from .errors import (
    EvaluationError,
    InvalidAnswer,
    MissingAnonymityChoice,
    MissingRequiredAnswer,
    NoActivePeriod,
    PeriodMismatch,
    ResponseKeyMismatch,
)
from .scale import percentage_of, question_range, question_score, range_of, score_of
from .comment_tags import decode_blocks, encode_block
from .merge import MergeContext, merge
from .aggregation import AggregateResult, CategoryAverage, aggregate, comments_for
from .reporting import ReportingService
from .periods import EvaluationPeriod, active_period
