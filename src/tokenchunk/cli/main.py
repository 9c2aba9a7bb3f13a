import json
from pathlib import Path
from typing import List, Optional

import typer

from ..core import config as config_module
from ..core.logging import log, setup_logging
from ..chunking.engine import Chunk, chunk_auto, chunk_code, chunk_document
from ..chunking.tokens import TokenizerUnavailableError
from ..chunking.verify import verify_chunks

app = typer.Typer(add_completion=False, help="tokenchunk CLI")

MODES = ("auto", "code", "document")


@app.callback()
def _init(
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        help="Config file (.tokenchunk.yaml auto-discovered)",
    ),
) -> None:
    config_module.SETTINGS = config_module.Settings.load_config(config_file)
    setup_logging(config_module.SETTINGS.LOG_FORMAT)  # type: ignore[arg-type]


def _chunk_options(
    max_tokens: Optional[int], max_lines: Optional[int], overlap_tokens: Optional[int]
) -> dict:
    options = config_module.SETTINGS.chunking_config()
    if max_tokens is not None:
        options["chunk_max_tokens"] = max_tokens
    if max_lines is not None:
        options["chunk_max_line"] = max_lines
    if overlap_tokens is not None:
        options["chunk_overlap_tokens"] = overlap_tokens
    return options


def _run_chunker(path: Path, mode: str, options: dict) -> tuple[str, List[Chunk]]:
    if mode not in MODES:
        typer.echo(f"❌ Unknown mode '{mode}', expected one of: {', '.join(MODES)}", err=True)
        raise typer.Exit(1)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"❌ Cannot read {path}: {e}", err=True)
        raise typer.Exit(1) from e

    try:
        if mode == "code":
            chunks = chunk_code(content, options)
        elif mode == "document":
            chunks = chunk_document(content, options)
        else:
            chunks = chunk_auto(content, str(path), options)
    except TokenizerUnavailableError as e:
        log.error("chunk.tokenizer_unavailable", path=str(path), error=str(e))
        typer.echo(f"❌ Tokenizer unavailable: {e}", err=True)
        raise typer.Exit(2) from e

    return content, chunks


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def config() -> None:
    """Show effective settings."""
    for k, v in config_module.SETTINGS.model_dump().items():
        typer.echo(f"{k}={v}")


@app.command()
def chunk(
    path: Path = typer.Argument(..., help="File to chunk"),
    mode: str = typer.Option("auto", "--mode", help="auto|code|document"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum tokens per code chunk"),
    max_lines: Optional[int] = typer.Option(None, "--max-lines", help="Maximum lines per code chunk"),
    overlap_tokens: Optional[int] = typer.Option(None, "--overlap-tokens", help="Overlap budget between code chunks"),
) -> None:
    """
    Chunk a file and print one JSON object per chunk (NDJSON).

    Example:
        tokenchunk chunk src/app.ts                    # Code defaults
        tokenchunk chunk README.md                     # Document strategy by extension
        tokenchunk chunk notes.log --mode document     # Force document strategy
    """
    options = _chunk_options(max_tokens, max_lines, overlap_tokens)
    _, chunks = _run_chunker(path, mode, options)

    for item in chunks:
        typer.echo(json.dumps(item.to_dict(), ensure_ascii=False))

    log.info("chunk.complete", path=str(path), mode=mode, chunks=len(chunks))


@app.command()
def verify(
    path: Path = typer.Argument(..., help="File to chunk and verify"),
    mode: str = typer.Option("auto", "--mode", help="auto|code|document"),
    max_tokens: Optional[int] = typer.Option(None, "--max-tokens", help="Maximum tokens per code chunk"),
    max_lines: Optional[int] = typer.Option(None, "--max-lines", help="Maximum lines per code chunk"),
    overlap_tokens: Optional[int] = typer.Option(None, "--overlap-tokens", help="Overlap budget between code chunks"),
) -> None:
    """Chunk a file and check coverage, progress and token accounting."""
    options = _chunk_options(max_tokens, max_lines, overlap_tokens)
    content, chunks = _run_chunker(path, mode, options)

    report = verify_chunks(content, chunks)
    typer.echo(json.dumps(report.to_dict()))

    if not report.ok:
        log.warning("verify.failed", path=str(path), **report.to_dict())
        raise typer.Exit(1)
    log.info("verify.ok", path=str(path), chunks=report.chunk_count)


if __name__ == "__main__":
    app()
