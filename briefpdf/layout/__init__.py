from .assembler import generate
from .blocks import (
    AnswerKind,
    ColorSwatchBlock,
    DocumentSpec,
    FieldListBlock,
    ParagraphBlock,
    QACardBlock,
    RawStructuredTextBlock,
    RenderedDocument,
    Section,
    TitleBlock,
)

__all__ = [
    "AnswerKind",
    "ColorSwatchBlock",
    "DocumentSpec",
    "FieldListBlock",
    "ParagraphBlock",
    "QACardBlock",
    "RawStructuredTextBlock",
    "RenderedDocument",
    "Section",
    "TitleBlock",
    "generate",
]
