"""
Document model for the layout engine.

A DocumentSpec is an ordered list of Sections, each an ordered list of Blocks.
Blocks are a closed set of frozen dataclasses; renderers dispatch on the block
class, never on string fields inside the content.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union


class AnswerKind(str, Enum):
    TEXT = "text"
    COLOR_SWATCH_LIST = "color_swatch_list"


@dataclass(frozen=True)
class TitleBlock:
    text: str


@dataclass(frozen=True)
class FieldListBlock:
    items: Tuple[Tuple[str, str], ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple((str(k), str(v)) for k, v in self.items))


@dataclass(frozen=True)
class ParagraphBlock:
    text: str


@dataclass(frozen=True)
class QACardBlock:
    index: int
    question: str
    answer: str = ""
    answer_kind: AnswerKind = AnswerKind.TEXT
    answer_prefix: str = "A: "
    # parsed hex colors, only used when answer_kind is COLOR_SWATCH_LIST
    colors: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", tuple(self.colors))


@dataclass(frozen=True)
class ColorSwatchBlock:
    hex_colors: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "hex_colors", tuple(self.hex_colors))


@dataclass(frozen=True)
class RawStructuredTextBlock:
    lines: Tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple(self.lines))


@dataclass(frozen=True)
class RiskBlock:
    description: str
    severity: str = "Low"
    mitigation: str = ""


Block = Union[
    TitleBlock,
    FieldListBlock,
    ParagraphBlock,
    QACardBlock,
    ColorSwatchBlock,
    RawStructuredTextBlock,
    RiskBlock,
]


@dataclass(frozen=True)
class Section:
    title: str
    blocks: Tuple[Block, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "blocks", tuple(self.blocks))


@dataclass(frozen=True)
class DocumentSpec:
    title: str
    sections: Tuple[Section, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    theme: Optional[str] = None
    author: str = ""
    # footer text left of the page number; defaults to the generation time
    footer_note: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "sections", tuple(self.sections))


@dataclass
class Cursor:
    x: float
    y: float
    page_index: int = 0


@dataclass(frozen=True)
class Placement:
    """Where one block landed: page index, top y, and drawn height."""

    section_index: int
    page_index: int
    y: float
    height: float
    kind: str


@dataclass(frozen=True)
class RenderedDocument:
    stream: bytes
    page_count: int
    document_id: str
    path: Optional[Path] = None
    placements: Tuple[Placement, ...] = ()

    @property
    def filename(self) -> str:
        return self.path.name if self.path is not None else f"{self.document_id}.pdf"
