from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from . import config, storage
from .layout.style import THEME_OVERRIDES
from .models import reset_engine
from .pipeline.ingest import load_request
from .pipeline.preview import render_previews
from .pipeline.run import generate_both

app = typer.Typer(help="Project brief and analysis PDF generator")


def _use_out_dir(out: Optional[Path]) -> None:
    if out:
        config.set_out_dir(out)
        reset_engine()


@app.command()
def generate(
    request: Path = typer.Argument(..., help="JSON request with project, questions, template, analysis"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    theme: Optional[str] = typer.Option(None, "--theme", help="Theme name"),
    preview: bool = typer.Option(False, "--preview", help="Also render a PNG of page 1"),
    detailed: bool = typer.Option(False, "--detailed", help="Also write the detailed AI report"),
    verbose: bool = typer.Option(False, "--verbose", help="Log progress to stderr"),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if theme and theme not in THEME_OVERRIDES:
        raise typer.BadParameter(f"Unknown theme {theme!r}; choose from {', '.join(sorted(THEME_OVERRIDES))}")
    _use_out_dir(out)
    try:
        req = load_request(request)
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=1)

    documents = generate_both(req, theme=theme, detailed=detailed)
    for kind, doc in documents.items():
        typer.echo(f"{kind}: {doc.filename} ({doc.page_count} pages) {doc.url}")
        if preview:
            for png in render_previews(Path(doc.path)):
                typer.echo(f"  preview: {png}")


@app.command("list")
def list_cmd(
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
    project: Optional[str] = typer.Option(None, "--project", help="Filter by project title"),
) -> None:
    _use_out_dir(out)
    documents = storage.list_documents(project_title=project)
    if not documents:
        typer.echo("No documents")
        return
    for doc in documents:
        typer.echo(f"{doc.created_at:%Y-%m-%d %H:%M} {doc.kind.value} {doc.filename} {doc.page_count}p {doc.project_title}")


@app.command()
def delete(
    files: List[str] = typer.Argument(..., help="PDF filenames or /uploads/pdfs/ URLs"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory"),
) -> None:
    _use_out_dir(out)
    result = storage.delete_pdfs(files)
    typer.echo(f"Deleted: {result['deleted']}")
    typer.echo(f"Failed: {result['failed']}")
    typer.echo(f"Total: {result['total']}")


if __name__ == "__main__":
    app()
