from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Union

from sqlmodel import select

from . import config
from .layout.blocks import RenderedDocument
from .models import DocumentKind, GeneratedDocument, get_session, init_db

logger = logging.getLogger(__name__)


def pdf_dir(base_dir: Path | None = None) -> Path:
    root = base_dir or config.OUT_DIR
    path = root / config.PDF_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


def pdf_path(filename: str, base_dir: Path | None = None) -> Path:
    return pdf_dir(base_dir) / filename


def pdf_url(filename: str) -> str:
    return f"{config.PDF_URL_PREFIX}/{filename}"


def filename_from_url(value: str) -> str:
    """Accept either a bare filename or a public URL and return the filename."""
    name = str(value or "").strip().rstrip("/").split("/")[-1]
    if not name or ".." in name or "\\" in name:
        raise ValueError(f"Invalid PDF reference: {value!r}")
    return name


def record_document(rendered: RenderedDocument, kind: DocumentKind, project_title: str) -> GeneratedDocument:
    if rendered.path is None:
        raise ValueError("Only documents written to disk can be recorded")
    init_db()
    row = GeneratedDocument(
        document_id=rendered.document_id,
        kind=kind,
        project_title=project_title,
        filename=rendered.filename,
        path=str(rendered.path),
        url=pdf_url(rendered.filename),
        page_count=rendered.page_count,
    )
    with get_session() as session:
        session.add(row)
        session.commit()
        session.refresh(row)
    return row


def list_documents(project_title: str | None = None) -> List[GeneratedDocument]:
    init_db()
    with get_session() as session:
        statement = select(GeneratedDocument).order_by(GeneratedDocument.created_at)
        if project_title:
            statement = statement.where(GeneratedDocument.project_title == project_title)
        return list(session.exec(statement))


def delete_pdfs(file_urls: Union[str, Iterable[str]], base_dir: Path | None = None) -> dict:
    if isinstance(file_urls, str):
        file_urls = [file_urls]
    refs = list(file_urls)

    deleted: List[str] = []
    failed = 0
    for ref in refs:
        try:
            filename = filename_from_url(ref)
        except ValueError:
            logger.warning("Skipping invalid PDF reference %r", ref)
            failed += 1
            continue
        path = pdf_path(filename, base_dir=base_dir)
        if not path.exists():
            failed += 1
            continue
        path.unlink()
        deleted.append(filename)
        logger.info("Deleted PDF %s", filename)

    if deleted:
        init_db()
        with get_session() as session:
            rows = session.exec(select(GeneratedDocument).where(GeneratedDocument.filename.in_(deleted)))
            for row in rows:
                session.delete(row)
            session.commit()

    return {"deleted": len(deleted), "failed": failed, "total": len(refs)}
