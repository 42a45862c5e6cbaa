"""Read-only report views over a collection of stored evaluations.

`ReportingService` is built from explicit inputs (records, question catalog,
employee and category metadata) and every method is a pure function of them.
"""
# evaluation/reporting.py
from typing import Iterable, Sequence

from pydantic import BaseModel, Field

from src.evaluation.aggregation import (
    GENERAL_CATEGORY,
    REPORT_DECIMALS,
    AggregateResult,
    CategoryComment,
    CommentEntry,
    QuestionDistribution,
    QuestionStat,
    aggregate,
    category_comment_entries,
    internal_comment_entries,
    overall_percent,
    peer_comment_entries,
    question_distribution,
    question_stats,
    relevant_records,
)
from src.evaluation.catalog import index_questions, ordered_categories
from src.evaluation.models import Category, Employee, EvaluationRecord, Question, Section
from src.evaluation.scale import NON_SCORING_OPTION_LABELS

ANONYMOUS_LABEL = "Anónimo"
UNKNOWN_AUTHOR = "N/A"


class AttributedComment(BaseModel):
    text: str
    author: str
    category: str | None = None


class SubjectReport(BaseModel):
    subject_id: str
    name: str
    role: str = ""
    peer: AggregateResult
    peer_percent: int | None = None
    internal: AggregateResult
    peer_comments: list[AttributedComment] = Field(default_factory=list)
    internal_comments: list[CategoryComment] = Field(default_factory=list)


class CategoryReport(BaseModel):
    name: str
    section: Section | None = None
    description: str | None = None
    average: float | None = None
    percent: int | None = None
    total_responses: int = 0
    questions: list[QuestionStat] = Field(default_factory=list)
    distributions: list[QuestionDistribution] = Field(default_factory=list)
    comments: list[AttributedComment] = Field(default_factory=list)


class SubjectSummary(BaseModel):
    subject_id: str
    name: str
    total_responses: int
    percent: int | None = None


class OverallReport(BaseModel):
    peer: AggregateResult
    peer_percent: int | None = None
    internal: AggregateResult
    internal_percent: int | None = None
    categories: dict[Section, list[str]] = Field(default_factory=dict)
    subjects: list[SubjectSummary] = Field(default_factory=list)


class ReportingService:
    """Category-, subject- and organisation-level views of evaluation results.

    Args:
        responses: Stored evaluations, already filtered to the period(s) of interest.
        questions: The question catalog.
        employees: Employee metadata used for names and comment authorship.
        categories: Category metadata used for ordering and descriptions.
        general_label: Category for internal comments that cannot be attributed.
        anonymous_label: Author shown for anonymous evaluators.
    """

    def __init__(
        self,
        responses: Iterable[EvaluationRecord],
        questions: Iterable[Question],
        employees: Iterable[Employee] = (),
        categories: Iterable[Category] = (),
        *,
        general_label: str = GENERAL_CATEGORY,
        anonymous_label: str = ANONYMOUS_LABEL,
        decimals: int = REPORT_DECIMALS,
        non_scoring_labels: Sequence[str] = NON_SCORING_OPTION_LABELS,
    ):
        self.responses = tuple(responses)
        self.questions = tuple(questions)
        self.employees = {e.id: e for e in employees}
        self.categories = tuple(categories)
        self.general_label = general_label
        self.anonymous_label = anonymous_label
        self.decimals = decimals
        self.non_scoring_labels = tuple(non_scoring_labels)
        self._by_key = {record.key: record for record in self.responses}
        self._internal_anonymity = self._collect_internal_anonymity()

    def _collect_internal_anonymity(self) -> dict[tuple[str, str], bool]:
        internal_map = index_questions(self.questions, Section.internal)
        flags = {}
        for record in self.responses:
            if record.is_self_evaluation and any(q in internal_map for q in record.answers):
                flags[(record.evaluator_id, record.period_id)] = record.is_anonymous
        return flags

    def is_anonymous(self, record: EvaluationRecord) -> bool:
        """The evaluator's internal-survey choice for the period wins over the record's flag."""
        return self._internal_anonymity.get((record.evaluator_id, record.period_id), record.is_anonymous)

    def author_of(self, entry: CommentEntry) -> str:
        record = self._by_key.get((entry.evaluator_id, entry.subject_id, entry.period_id))
        if record is not None and self.is_anonymous(record):
            return self.anonymous_label
        employee = self.employees.get(entry.evaluator_id)
        return employee.name if employee else UNKNOWN_AUTHOR

    def _attribute(self, entries: Iterable[CommentEntry]) -> list[AttributedComment]:
        return [
            AttributedComment(text=entry.text, author=self.author_of(entry), category=entry.category)
            for entry in entries
        ]

    def _aggregate(self, section: Section, **filters) -> AggregateResult:
        return aggregate(
            self.responses,
            self.questions,
            section,
            decimals=self.decimals,
            non_scoring_labels=self.non_scoring_labels,
            **filters,
        )

    def per_subject_report(self, subject_id: str) -> SubjectReport:
        """Peer results about `subject_id` plus their own internal survey."""
        peer = self._aggregate(Section.peer, subject_id=subject_id)
        internal = self._aggregate(Section.internal, evaluator_id=subject_id)
        employee = self.employees.get(subject_id)
        internal_comments = [
            CategoryComment(category=entry.category, text=entry.text)
            for entry in internal_comment_entries(
                self.responses, self.questions, subject_id, self.general_label,
            )
        ]
        return SubjectReport(
            subject_id=subject_id,
            name=employee.name if employee else UNKNOWN_AUTHOR,
            role=employee.role if employee else "",
            peer=peer,
            peer_percent=overall_percent(peer),
            internal=internal,
            peer_comments=self._attribute(peer_comment_entries(self.responses, self.questions, subject_id)),
            internal_comments=internal_comments,
        )

    def _section_of(self, category: str) -> Section | None:
        for question in self.questions:
            if question.category == category:
                return question.section
        return None

    def per_category_report(self, category: str, section: Section | None = None) -> CategoryReport:
        """Average, per-question breakdown and comments for one category."""
        section = section or self._section_of(category)
        metadata = next(
            (c for c in self.categories if c.name == category and (section is None or c.section == section)),
            None,
        )
        category_questions = [
            q for q in self.questions
            if q.category == category and (section is None or q.section == section)
        ]
        relevant = relevant_records(self.responses, {q.id: q for q in category_questions})
        summary = self._aggregate(section).category(category) if section else None
        description = (metadata.description or "").strip() if metadata else ""

        return CategoryReport(
            name=category,
            section=section,
            description=description or None,
            average=summary.average if summary else None,
            percent=summary.percent if summary else None,
            total_responses=len(relevant),
            questions=question_stats(
                category, self.responses, self.questions, section, self.non_scoring_labels,
            ),
            distributions=[
                question_distribution(q, relevant, self.non_scoring_labels)
                for q in sorted(category_questions, key=lambda q: (q.sort_order, q.id))
                if q.is_scale
            ],
            comments=self._attribute(
                category_comment_entries(category, self.responses, self.questions, section)
            ),
        )

    def overall_report(self) -> OverallReport:
        """Organisation-wide averages and a per-subject peer summary."""
        peer = self._aggregate(Section.peer)
        internal = self._aggregate(Section.internal)
        peer_map = index_questions(self.questions, Section.peer)

        subject_ids: list[str] = []
        for record in relevant_records(self.responses, peer_map):
            if record.subject_id not in subject_ids:
                subject_ids.append(record.subject_id)

        subjects = []
        for subject_id in subject_ids:
            result = self._aggregate(Section.peer, subject_id=subject_id)
            employee = self.employees.get(subject_id)
            subjects.append(SubjectSummary(
                subject_id=subject_id,
                name=employee.name if employee else UNKNOWN_AUTHOR,
                total_responses=result.total_responses,
                percent=overall_percent(result),
            ))
        subjects.sort(key=lambda s: s.name.lower())

        return OverallReport(
            peer=peer,
            peer_percent=overall_percent(peer),
            internal=internal,
            internal_percent=overall_percent(internal),
            categories={
                section: ordered_categories(self.questions, self.categories, section)
                for section in Section
            },
            subjects=subjects,
        )
