from openai import AsyncOpenAI

from src.evaluation.reporting import SubjectReport
from src.llm_agg.prompts import BASE_PROMPT, NOT_ENOUGH_DATA, SUBJECT_SUMMARY_PROMPT
from src.llm_agg.response import get_default_completion


def composite_comments(comments: list[str]) -> str:
    composite = ""
    template = "Comentario №{number}: "

    for i, comment in enumerate(comments):
        composite += template.format(number=i+1)
        composite += comment
        composite += "\n"
    return composite or "(sin comentarios)"


def format_categories(report: SubjectReport) -> str:
    lines = [
        f"- {c.name}: {c.percent}% ({c.count} respuestas)"
        for c in sorted(report.peer.categories, key=lambda c: c.percent, reverse=True)
    ]
    return "\n".join(lines) or "(sin puntajes)"


def build_summary_log(
    report: SubjectReport,
    SUMMARY_PROMPT: str = SUBJECT_SUMMARY_PROMPT,
    SYSTEM_PROMPT: str | None = BASE_PROMPT,
) -> list:
    log = []
    if SYSTEM_PROMPT is not None:
        log.append({
            "role": "system",
            "content": SYSTEM_PROMPT
        })
    log.append({
        "role": "user",
        "content": SUMMARY_PROMPT.format(
            employee_name=report.name,
            employee_role=report.role or "sin cargo",
            total_responses=report.peer.total_responses,
            categories=format_categories(report),
            # no author names in prompts
            comments=composite_comments([c.text for c in report.peer_comments]),
        )
    })
    return log


async def summarize_subject(
    client: AsyncOpenAI,
    model_name: str,
    report: SubjectReport,
) -> str:
    """Executive summary of a subject's peer results, or a fixed notice when there are none."""
    if report.peer.total_responses == 0:
        return NOT_ENOUGH_DATA
    return await get_default_completion(
        log=build_summary_log(report),
        model_name=model_name,
        client=client,
    )
