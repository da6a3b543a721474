from __future__ import annotations

import json

from typer.testing import CliRunner

from briefpdf.main import app

runner = CliRunner()


def _request(tmp_path):
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps(
            {
                "project": {"title": "Acme Site", "description": "Marketing site.", "client": {"name": "Acme"}},
                "questions": [{"question": "Primary color?", "answer": "#ff0000, #00ff00", "type": "color", "section": "branding"}],
                "analysis": {"executiveSummary": "Solid plan.", "confidence": 90},
            }
        ),
        encoding="utf-8",
    )
    return path


def test_generate_list_and_delete(tmp_path, out_dir) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path)), "--out", str(out_dir)])
    assert result.exit_code == 0, result.output
    assert "doc-infos: doc-infos-acme-site-" in result.output
    assert "ai-analysis: ai-analysis-acme-site-" in result.output

    pdfs = sorted(p.name for p in (out_dir / "pdfs").glob("*.pdf"))
    assert len(pdfs) == 2

    listed = runner.invoke(app, ["list", "--out", str(out_dir), "--project", "Acme Site"])
    assert listed.exit_code == 0, listed.output
    assert all(name in listed.output for name in pdfs)

    deleted = runner.invoke(app, ["delete", pdfs[0], f"/uploads/pdfs/{pdfs[1]}", "--out", str(out_dir)])
    assert deleted.exit_code == 0, deleted.output
    assert "Deleted: 2" in deleted.output
    assert list((out_dir / "pdfs").glob("*.pdf")) == []

    empty = runner.invoke(app, ["list", "--out", str(out_dir)])
    assert "No documents" in empty.output


def test_generate_detailed_report(tmp_path, out_dir) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path)), "--out", str(out_dir), "--detailed"])
    assert result.exit_code == 0, result.output
    assert "detailed-ai-report: detailed-ai-report-acme-site-" in result.output
    assert len(list((out_dir / "pdfs").glob("*.pdf"))) == 3


def test_generate_with_preview(tmp_path, out_dir) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path)), "--out", str(out_dir), "--preview"])
    assert result.exit_code == 0, result.output
    assert len(list((out_dir / "pdfs").glob("*.png"))) == 2


def test_generate_missing_request(tmp_path, out_dir) -> None:
    result = runner.invoke(app, ["generate", str(tmp_path / "nope.json"), "--out", str(out_dir)])
    assert result.exit_code == 1


def test_generate_unknown_theme(tmp_path, out_dir) -> None:
    result = runner.invoke(app, ["generate", str(_request(tmp_path)), "--out", str(out_dir), "--theme", "neon"])
    assert result.exit_code != 0
    assert list(out_dir.glob("pdfs/*.pdf")) == []
