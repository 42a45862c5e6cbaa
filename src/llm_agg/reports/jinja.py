from typing import Any, Mapping
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.evaluation.reporting import SubjectReport


def _as_dict(obj: Any):
    """
    Normalize a report payload into a plain Python dict.

    Accepted inputs:
    - dict/Mapping: returned as a new dict copy.
    - Pydantic BaseModel: converted via `.model_dump()`.

    Parameters:
        obj: Source object to normalize.
    """
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    if hasattr(obj, "model_dump"):
        return obj.model_dump(mode="json")
    raise TypeError(f"Unsupported input type: {type(obj)!r}")


def _group_by_category(comments: list[dict]) -> list[dict]:
    """
    Group internal comments by category, preserving first-seen order.

    Parameters:
        comments: Items with `category` and `text` keys.

    Returns:
        A list of {"category": str, "texts": [str, ...]} dictionaries.
    """
    groups: list[dict] = []
    for item in comments:
        category = str(item.get("category") or "").strip()
        for group in groups:
            if group["category"] == category:
                group["texts"].append(item["text"])
                break
        else:
            groups.append({"category": category, "texts": [item["text"]]})
    return groups


def build_context(report: SubjectReport | Mapping, *, summary: str | None = None, period_name: str = ""):
    """
    Convert a subject report into the Jinja template context.

    Parameters:
        report: SubjectReport or its dumped dict.
        summary: Optional narrative summary (LLM output) shown above the scores.
        period_name: Label of the evaluation period for the heading.
    """
    data = _as_dict(report)
    return {
        "employee_name": data.get("name", ""),
        "employee_role": data.get("role", ""),
        "period_name": period_name,
        "summary": (summary or "").strip(),
        "peer_percent": data.get("peer_percent"),
        "peer_total": data.get("peer", {}).get("total_responses", 0),
        "peer_categories": data.get("peer", {}).get("categories", []),
        "internal_categories": data.get("internal", {}).get("categories", []),
        "peer_comments": data.get("peer_comments", []),
        "internal_comments": _group_by_category(data.get("internal_comments", [])),
    }


def render_subject_report(
    templates_dir: str,
    template_name: str,
    report: SubjectReport | Mapping,
    *,
    summary: str | None = None,
    period_name: str = "",
) -> str:
    """
    Render a subject report to HTML from a Jinja template.

    Args:
        templates_dir: Directory containing Jinja templates.
        template_name: Template filename within `templates_dir`.
        report: The subject report to render.
        summary: Optional narrative summary.
        period_name: Label of the evaluation period.
    """
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    template = env.get_template(template_name)
    return template.render(**build_context(report, summary=summary, period_name=period_name))
