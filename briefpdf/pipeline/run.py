from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Sequence

from slugify import slugify

from .. import storage
from ..layout.assembler import generate
from ..layout.blocks import DocumentSpec
from ..layout.header import HeaderRenderer
from ..models import AnalysisRecord, DocumentKind, GeneratedDocument, ProjectRecord, QuestionRecord
from .build import build_analysis_spec, build_detailed_report_spec, build_project_spec, project_title
from .ingest import GenerationRequest


logger = logging.getLogger(__name__)


def output_filename(kind: DocumentKind, title: str, timestamp: Optional[float] = None) -> str:
    millis = int((time.time() if timestamp is None else timestamp) * 1000)
    slug = slugify(title or "", max_length=60) or "untitled"
    return f"{kind.value}-{slug}-{millis}.pdf"


def render_document(
    spec: DocumentSpec,
    kind: DocumentKind,
    title: str,
    header: Optional[HeaderRenderer] = None,
) -> GeneratedDocument:
    """
    Write `spec` under the PDF directory and record it in the registry.
    A failed generation or registry write leaves no file behind.
    """
    path = storage.pdf_path(output_filename(kind, title))
    try:
        rendered = generate(spec, path, header=header)
        row = storage.record_document(rendered, kind, title)
    except Exception:
        logger.exception("PDF generation failed for %s", path.name)
        path.unlink(missing_ok=True)
        raise
    logger.info("Generated %s (%d pages) -> %s", row.filename, row.page_count, row.url)
    return row


def generate_project_info(
    project: ProjectRecord,
    questions: Sequence[QuestionRecord] = (),
    template: Optional[str] = None,
    instructions: Optional[str] = None,
    theme: Optional[str] = None,
    header: Optional[HeaderRenderer] = None,
) -> GeneratedDocument:
    spec = build_project_spec(project, questions, template=template, instructions=instructions, theme=theme)
    return render_document(spec, DocumentKind.PROJECT_INFO, project_title(project), header=header)


def generate_analysis_report(
    project: ProjectRecord,
    analysis: Optional[AnalysisRecord],
    theme: Optional[str] = None,
    header: Optional[HeaderRenderer] = None,
) -> GeneratedDocument:
    spec = build_analysis_spec(project, analysis, theme=theme)
    return render_document(spec, DocumentKind.AI_ANALYSIS, project_title(project), header=header)


def generate_detailed_report(
    project: ProjectRecord,
    analysis: Optional[AnalysisRecord],
    theme: Optional[str] = None,
    header: Optional[HeaderRenderer] = None,
) -> GeneratedDocument:
    spec = build_detailed_report_spec(project, analysis, theme=theme)
    return render_document(spec, DocumentKind.DETAILED_REPORT, project_title(project), header=header)


def generate_both(
    request: GenerationRequest,
    theme: Optional[str] = None,
    header: Optional[HeaderRenderer] = None,
    detailed: bool = False,
) -> Dict[str, GeneratedDocument]:
    """Project brief and analysis report; `detailed` adds the detailed AI report."""
    info = generate_project_info(
        request.project,
        request.questions,
        template=request.template,
        instructions=request.instructions,
        theme=theme,
        header=header,
    )
    analysis = generate_analysis_report(request.project, request.analysis, theme=theme, header=header)
    documents = {DocumentKind.PROJECT_INFO.value: info, DocumentKind.AI_ANALYSIS.value: analysis}
    if detailed:
        documents[DocumentKind.DETAILED_REPORT.value] = generate_detailed_report(
            request.project, request.analysis, theme=theme, header=header
        )
    return documents
