from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, List, NamedTuple, Optional, Type, TypeVar

from pydantic import ValidationError
from sqlmodel import SQLModel

from ..models import AnalysisRecord, ProjectRecord, QuestionRecord, Recommendation, Risk, TechnicalSpec


ModelT = TypeVar("ModelT", bound=SQLModel)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


class GenerationRequest(NamedTuple):
    project: ProjectRecord
    questions: List[QuestionRecord]
    template: Optional[str]
    instructions: Optional[str]
    analysis: Optional[AnalysisRecord]


def snake_case(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(key)).lower()


def _normalize_keys(value: Any) -> Any:
    """snake_case the keys of service records; template payloads keep theirs."""
    if isinstance(value, dict):
        return {snake_case(k): _normalize_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize_keys(v) for v in value]
    return value


def _record(model: Type[ModelT], data: Any, label: str) -> ModelT:
    if not isinstance(data, dict):
        raise ValueError(f"{label} must be an object")
    known = {k: v for k, v in data.items() if k in model.model_fields and v is not None and v != ""}
    try:
        return model.model_validate(known)
    except ValidationError as exc:
        raise ValueError(f"Invalid {label}: {exc}") from exc


def _text(value: Any, label: str) -> Optional[str]:
    """Template/instruction payloads may be plain text or a JSON structure."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict) and isinstance(value.get("structure"), str):
        return value["structure"]
    if isinstance(value, (dict, list)):
        return json.dumps(value, indent=2, ensure_ascii=False)
    raise ValueError(f"{label} must be text or a JSON structure")


def _project(data: Any) -> ProjectRecord:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("project must be an object")
    data = dict(data)
    client = data.get("client")
    if isinstance(client, dict):
        data["client"] = client.get("name")
    if "id" not in data and "_id" in data:
        data["id"] = data["_id"]
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return _record(ProjectRecord, data, "project")


def _analysis(data: Any) -> Optional[AnalysisRecord]:
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError("analysis must be an object")
    data = dict(data)
    data["recommendations"] = [_record(Recommendation, r, "recommendation") for r in data.get("recommendations") or []]
    data["risks"] = [_record(Risk, r, "risk") for r in data.get("risks") or []]
    data["technical_specs"] = [
        _record(TechnicalSpec, s, "technical spec") for s in data.get("technical_specs") or []
    ]
    if data.get("id") is not None:
        data["id"] = str(data["id"])
    return _record(AnalysisRecord, data, "analysis")


def parse_request(data: Any) -> GenerationRequest:
    if not isinstance(data, dict):
        raise ValueError("Request must be a JSON object")
    questions_data = _normalize_keys(data.get("questions")) or []
    if not isinstance(questions_data, list):
        raise ValueError("questions must be a list")
    questions = [_record(QuestionRecord, q, f"question #{i + 1}") for i, q in enumerate(questions_data)]

    return GenerationRequest(
        project=_project(_normalize_keys(data.get("project"))),
        questions=questions,
        template=_text(data.get("template"), "template"),
        instructions=_text(data.get("instructions"), "instructions"),
        analysis=_analysis(_normalize_keys(data.get("analysis"))),
    )


def load_request(path: Path) -> GenerationRequest:
    if not path.exists():
        raise FileNotFoundError(f"Request not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Request is not valid JSON: {exc}") from exc
    return parse_request(data)
