from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel, Session, create_engine

from . import config


class DocumentKind(str, Enum):
    PROJECT_INFO = "doc-infos"
    AI_ANALYSIS = "ai-analysis"
    DETAILED_REPORT = "detailed-ai-report"


# ---------- input records (supplied by the calling service) ----------
class ProjectRecord(SQLModel):
    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    client: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    budget: Optional[float] = None
    currency: Optional[str] = None


class QuestionRecord(SQLModel):
    question: str = ""
    answer: Any = None
    section: str = "general"
    section_name: Optional[str] = None
    type: str = "text"
    order: int = 0


class Recommendation(SQLModel):
    title: Optional[str] = None
    description: Optional[str] = None


class Risk(SQLModel):
    description: str = ""
    severity: str = "Low"
    mitigation: Optional[str] = None


class TechnicalSpec(SQLModel):
    title: Optional[str] = None
    description: Optional[str] = None


class AnalysisRecord(SQLModel):
    id: Optional[str] = None
    executive_summary: Optional[str] = None
    confidence: Optional[float] = None
    complexity: Optional[str] = None
    recommendations: List[Recommendation] = Field(default_factory=list)
    risks: List[Risk] = Field(default_factory=list)
    technical_requirements: Optional[str] = None
    technical_specs: List[TechnicalSpec] = Field(default_factory=list)
    implementation_plan: Optional[str] = None


# ---------- document registry ----------
class GeneratedDocument(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    document_id: str = Field(index=True)
    kind: DocumentKind
    project_title: str
    filename: str = Field(index=True)
    path: str
    url: str
    page_count: int
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


engine = create_engine(f"sqlite:///{config.DB_PATH}")


def reset_engine() -> None:
    global engine
    engine = create_engine(f"sqlite:///{config.DB_PATH}")


def init_db() -> None:
    config.OUT_DIR.mkdir(parents=True, exist_ok=True)
    SQLModel.metadata.create_all(engine)


def get_session() -> Session:
    return Session(engine, expire_on_commit=False)
