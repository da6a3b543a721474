"""
Map the records supplied by the calling service onto DocumentSpecs.

Missing content becomes placeholder text here, so the layout engine never
has to special-case absent fields. The answer kind of every Q&A card is
decided here, once, from the question type.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .. import config
from ..layout.blocks import (
    AnswerKind,
    DocumentSpec,
    FieldListBlock,
    ParagraphBlock,
    QACardBlock,
    RawStructuredTextBlock,
    RiskBlock,
    Section,
    TitleBlock,
)
from ..layout.paging import PageGeometry
from ..layout.renderers import measure_block
from ..layout.style import _s, load_style, normalize_hex
from ..layout.text import wrap_text
from ..models import AnalysisRecord, ProjectRecord, QuestionRecord

logger = logging.getLogger(__name__)

UNTITLED_PROJECT = "Untitled Project"
NO_DESCRIPTION = "No description available"
NOT_SPECIFIED = "Not specified"
NOT_AVAILABLE = "N/A"
DEFAULT_SECTION_NAME = "General Information"
NO_SUMMARY = "No executive summary available from AI analysis."
ANALYSIS_TITLE = "AI Analysis Report"
ANALYSIS_THEME = "structor_indigo"
DETAILED_TITLE = "Detailed AI Report"
DETAILED_SUBTITLE = "Advanced Project Analysis"
DETAILED_THEME = "structor_detailed"
DETAILED_CONTENTS = (
    "1. Executive Summary",
    "2. Project Analysis",
    "3. Technical Specifications",
    "4. Architecture Overview",
    "5. Implementation Plan",
    "6. Risk Assessment",
    "7. Resource Allocation",
    "8. Timeline & Milestones",
    "9. Success Metrics",
    "10. Conclusion",
)
DETAILED_PLACEHOLDER = (
    "Detailed analysis content would appear here...",
    "This is a template for detailed AI analysis reports.",
)

_COLOR_SPLIT = re.compile(r"[,\s]+")


def _format_date(value: Optional[str]) -> str:
    if not value:
        return NOT_SPECIFIED
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return text
    return parsed.strftime("%d/%m/%Y")


def _number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _budget(project: ProjectRecord) -> str:
    return f"{_number(project.budget or 0)} {project.currency or config.DEFAULT_CURRENCY}"


def project_title(project: ProjectRecord) -> str:
    return (project.title or "").strip() or UNTITLED_PROJECT


def is_color_question(question: QuestionRecord) -> bool:
    return "color" in (question.type or "").lower()


def parse_colors(answer: Any) -> List[str]:
    """
    Accept a comma/whitespace separated string or a list of values and
    return normalized '#rrggbb' strings. Invalid entries are dropped.
    """
    if answer is None:
        return []
    if isinstance(answer, (list, tuple)):
        raw = [str(v) for v in answer]
    else:
        raw = _COLOR_SPLIT.split(str(answer))

    colors: List[str] = []
    for value in raw:
        value = value.strip()
        if not value:
            continue
        normalized = normalize_hex(value)
        if normalized is None:
            logger.warning("Dropping invalid color value %r", value)
            continue
        colors.append(normalized)
    return colors


def _answer_text(answer: Any) -> str:
    if answer is None:
        return ""
    if isinstance(answer, bool):
        return "Yes" if answer else "No"
    if isinstance(answer, (list, tuple)):
        return ", ".join(str(v) for v in answer)
    return str(answer)


def group_questions(questions: Iterable[QuestionRecord]) -> List[Tuple[str, List[QuestionRecord]]]:
    """Group by section key in first-seen order; each group sorted by `order`."""
    groups: Dict[str, Tuple[str, List[QuestionRecord]]] = {}
    for question in questions:
        key = question.section or "general"
        if key not in groups:
            groups[key] = (question.section_name or DEFAULT_SECTION_NAME, [])
        groups[key][1].append(question)
    return [(name, sorted(items, key=lambda q: q.order)) for name, items in groups.values()]


def question_card(index: int, question: QuestionRecord) -> QACardBlock:
    text = (question.question or "").strip() or "Untitled question"
    if is_color_question(question):
        return QACardBlock(
            index=index,
            question=text,
            answer_kind=AnswerKind.COLOR_SWATCH_LIST,
            colors=parse_colors(question.answer),
        )
    return QACardBlock(index=index, question=text, answer=_answer_text(question.answer))


def _fits(lines: Sequence[str], width: float, limit: float, style: dict) -> bool:
    return measure_block(RawStructuredTextBlock(lines=tuple(lines)), width, style) <= limit


def _split_tall_line(line: str, width: float, limit: float, style: dict) -> List[str]:
    """Break one line taller than a page into runs of words that each fit."""
    if _fits([line], width, limit, style):
        return [line]
    stripped = line.lstrip()
    lead = line[: len(line) - len(stripped)]
    wrapped = wrap_text(stripped, str(_s(style, "font_name", "Helvetica")), float(_s(style, "small_size", 10)), width)

    pieces: List[str] = []
    current: List[str] = []
    for row in wrapped:
        if current and not _fits([lead + " ".join(current + [row])], width, limit, style):
            pieces.append(lead + " ".join(current))
            current = []
        current.append(row)
    if current:
        pieces.append(lead + " ".join(current))
    return pieces


def structured_blocks(
    text: Optional[str],
    width: Optional[float] = None,
    limit: Optional[float] = None,
    style: Optional[dict] = None,
) -> List[RawStructuredTextBlock]:
    """
    Split semi-structured text into blocks at blank lines. A run that would
    measure taller than one page's usable height is split further, so every
    block fits on a fresh page.
    """
    geometry = PageGeometry()
    width = width or geometry.content_width
    limit = limit or geometry.usable_height
    style = style or load_style()

    blocks: List[RawStructuredTextBlock] = []
    chunk: List[str] = []

    def flush() -> None:
        if chunk:
            blocks.append(RawStructuredTextBlock(lines=tuple(chunk)))
            chunk.clear()

    for raw in str(text or "").splitlines():
        if not raw.strip():
            flush()
            continue
        for line in _split_tall_line(raw, width, limit, style):
            if chunk and not _fits(chunk + [line], width, limit, style):
                flush()
            chunk.append(line)
    flush()
    return blocks


def build_project_spec(
    project: ProjectRecord,
    questions: Sequence[QuestionRecord] = (),
    template: Optional[str] = None,
    instructions: Optional[str] = None,
    theme: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> DocumentSpec:
    title = project_title(project)
    details = FieldListBlock(
        items=(
            ("Client", project.client or NOT_SPECIFIED),
            ("Category", project.category or NOT_SPECIFIED),
            ("Priority", project.priority or NOT_SPECIFIED),
            ("Start Date", _format_date(project.start_date)),
            ("End Date", _format_date(project.end_date)),
            ("Budget", _budget(project)),
        )
    )
    description = (project.description or "").strip() or NO_DESCRIPTION
    sections: List[Section] = [
        Section(title="Project Information", blocks=(TitleBlock(title), details, ParagraphBlock(description)))
    ]

    for number, (name, items) in enumerate(group_questions(questions), start=1):
        cards = [question_card(i, q) for i, q in enumerate(items, start=1)]
        sections.append(Section(title=f"{number}. {name}", blocks=cards))

    instruction_blocks = structured_blocks(instructions)
    if instruction_blocks:
        sections.append(Section(title="Instructions", blocks=instruction_blocks))

    template_blocks = structured_blocks(template)
    if template_blocks:
        sections.append(Section(title="Template Structure", blocks=template_blocks))

    return DocumentSpec(
        title=title,
        sections=sections,
        created_at=created_at or datetime.now(),
        theme=theme,
        author=config.BRAND_NAME,
    )


def risk_blocks(analysis: AnalysisRecord) -> List[RiskBlock]:
    return [
        RiskBlock(
            description=(risk.description or "").strip() or "Unspecified risk",
            severity=(risk.severity or "").strip() or "Low",
            mitigation=(risk.mitigation or "").strip(),
        )
        for risk in analysis.risks
    ]


def build_analysis_spec(
    project: ProjectRecord,
    analysis: Optional[AnalysisRecord],
    theme: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> DocumentSpec:
    analysis = analysis or AnalysisRecord()
    created_at = created_at or datetime.now()
    title = project_title(project)

    confidence = f"{_number(analysis.confidence)}%" if analysis.confidence else NOT_AVAILABLE
    overview = FieldListBlock(
        items=(
            ("Project Title", (project.title or "").strip() or NOT_AVAILABLE),
            ("Project ID", project.id or analysis.id or NOT_AVAILABLE),
            ("AI Analysis Date", created_at.strftime("%d/%m/%Y")),
            ("Analysis Confidence", confidence),
            ("Complexity Level", analysis.complexity or NOT_AVAILABLE),
        )
    )
    # the summary flows across pages instead of sitting in a clamped box
    summary = structured_blocks((analysis.executive_summary or "").strip() or NO_SUMMARY)
    sections: List[Section] = [
        Section(title="Executive Summary", blocks=(TitleBlock(ANALYSIS_TITLE), *summary, overview))
    ]

    if analysis.recommendations:
        cards = [
            QACardBlock(
                index=i,
                question=rec.title or "Recommendation",
                answer=rec.description or "No description",
                answer_prefix="",
            )
            for i, rec in enumerate(analysis.recommendations, start=1)
        ]
        sections.append(Section(title="AI Recommendations", blocks=cards))

    risks = risk_blocks(analysis)
    if risks:
        sections.append(Section(title="Risk Assessment", blocks=risks))

    requirements = structured_blocks(analysis.technical_requirements)
    if requirements:
        sections.append(Section(title="Technical Requirements", blocks=requirements))

    return DocumentSpec(
        title=f"{ANALYSIS_TITLE}: {title}",
        sections=sections,
        created_at=created_at,
        theme=theme or ANALYSIS_THEME,
        author=config.BRAND_NAME,
        footer_note=f"AI Analysis for: {(project.title or '').strip() or 'Project'}",
    )


def build_detailed_report_spec(
    project: ProjectRecord,
    analysis: Optional[AnalysisRecord],
    theme: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> DocumentSpec:
    """
    Cover, table of contents, then whichever of summary, technical
    specifications, implementation plan and risks the analysis carries.
    Without any of them a placeholder page stands in for the content.
    """
    created_at = created_at or datetime.now()
    cover = FieldListBlock(
        items=(
            ("Project", (project.title or "").strip() or "Project Analysis"),
            ("Generated", created_at.strftime("%d/%m/%Y")),
            ("Powered by", "Advanced AI Analysis"),
        )
    )
    sections: List[Section] = [
        Section(title="", blocks=(TitleBlock(DETAILED_TITLE), ParagraphBlock(DETAILED_SUBTITLE), cover)),
        Section(title="Table of Contents", blocks=structured_blocks("\n".join(DETAILED_CONTENTS))),
    ]

    if analysis is not None:
        summary = structured_blocks(analysis.executive_summary)
        if summary:
            sections.append(Section(title="Executive Summary", blocks=summary))

        if analysis.technical_specs:
            cards = [
                QACardBlock(
                    index=i,
                    question=(spec.title or "").strip() or "Specification",
                    answer=(spec.description or "").strip() or "No description",
                    answer_prefix="",
                )
                for i, spec in enumerate(analysis.technical_specs, start=1)
            ]
            sections.append(Section(title="Technical Specifications", blocks=cards))

        plan = structured_blocks(analysis.implementation_plan)
        if plan:
            sections.append(Section(title="Implementation Plan", blocks=plan))

        risks = risk_blocks(analysis)
        if risks:
            sections.append(Section(title="Risk Assessment", blocks=risks))

    if len(sections) == 2:
        sections.append(Section(title="Analysis Content", blocks=structured_blocks("\n".join(DETAILED_PLACEHOLDER))))

    return DocumentSpec(
        title=f"{DETAILED_TITLE}: {project_title(project)}",
        sections=sections,
        created_at=created_at,
        theme=theme or DETAILED_THEME,
        author=config.BRAND_NAME,
        footer_note="Detailed Report",
    )
