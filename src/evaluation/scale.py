"""Scale normalization: option positions to comparable numeric scores.

The canonical 4-option agreement scale maps to an asymmetric value set with a
deliberate neutral gap; every other cardinality maps linearly to 1..N.
"Does not apply" options carry no score and are left out of the scale.
"""
# evaluation/scale.py
import logging
import math
import unicodedata
from typing import Iterable, NamedTuple

from src.evaluation.models import Question

logger = logging.getLogger(__name__)

DEFAULT_SCALE_SCORE_VALUES = (-1.0, -0.75, 0.75, 1.0)

NON_SCORING_OPTION_LABELS = (
    "no uso la plataforma",
    "no he presentado solicitudes de reembolso",
)


class ScaleRange(NamedTuple):
    min: float
    max: float


def score_of(option_index: int, option_count: int) -> float:
    if option_count == len(DEFAULT_SCALE_SCORE_VALUES) and 0 <= option_index < option_count:
        return DEFAULT_SCALE_SCORE_VALUES[option_index]
    return float(option_index + 1)


def range_of(option_count: int) -> ScaleRange:
    if option_count == len(DEFAULT_SCALE_SCORE_VALUES):
        return ScaleRange(DEFAULT_SCALE_SCORE_VALUES[0], DEFAULT_SCALE_SCORE_VALUES[-1])
    if option_count <= 0:
        logger.debug("Degenerate scale with %d options, treating as 1", option_count)
        option_count = 1
    return ScaleRange(1.0, float(option_count))


def percentage_of(score: float, min_value: float, max_value: float) -> int:
    """Rescale `score` from [min, max] to an integer percentage in [0, 100].

    A single-option scale (`max == min`) yields 0 instead of dividing by zero.
    """
    if max_value == min_value:
        return 0
    raw = (score - min_value) / (max_value - min_value) * 100
    if not math.isfinite(raw):
        return 0
    clamped = min(100.0, max(0.0, raw))
    # half-up
    return int(math.floor(clamped + 0.5))


def normalize_option_label(label: str) -> str:
    decomposed = unicodedata.normalize("NFD", label or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()


def is_non_scoring_label(label: str, non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS) -> bool:
    normalized = normalize_option_label(label)
    return any(term in normalized for term in non_scoring_labels)


def scoring_options(
    question: Question,
    non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS,
) -> list[str]:
    labels = tuple(non_scoring_labels)
    return [option for option in question.options if not is_non_scoring_label(option, labels)]


def question_score(
    question: Question,
    option_index: int,
    non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS,
) -> float | None:
    """Score of one option of `question`, or None for a "does not apply" option.

    Non-scoring options are left out before the scale is chosen, so four
    agreement options plus "No uso la plataforma" still score -1..1.
    """
    labels = tuple(non_scoring_labels)
    if is_non_scoring_label(question.options[option_index], labels):
        return None
    scoring_index = sum(
        1 for option in question.options[:option_index] if not is_non_scoring_label(option, labels)
    )
    return score_of(scoring_index, len(scoring_options(question, labels)))


def question_range(
    question: Question,
    non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS,
) -> ScaleRange:
    return range_of(len(scoring_options(question, non_scoring_labels)))


def is_non_scoring_answer(
    question: Question,
    value: float | str,
    non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS,
) -> bool:
    """True when `value` is the stored answer of a "does not apply" option.

    Such answers are stored as the option label. Records written before that
    hold the option's position on the full list (1..N); those count as
    non-scoring only where no scoring option has the same value.
    """
    labels = tuple(non_scoring_labels)
    if isinstance(value, str):
        return is_non_scoring_label(value, labels)
    scores = {question_score(question, i, labels) for i in range(question.option_count)}
    if value in scores:
        return False
    return any(
        value == score_of(index, question.option_count)
        for index, label in enumerate(question.options)
        if is_non_scoring_label(label, labels)
    )


def label_for_score(
    question: Question,
    score: float,
    non_scoring_labels: Iterable[str] = NON_SCORING_OPTION_LABELS,
) -> str | None:
    labels = tuple(non_scoring_labels)
    for index, label in enumerate(question.options):
        if question_score(question, index, labels) == score:
            return label
    return None
