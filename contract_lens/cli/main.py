"""Main CLI application"""

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from contract_lens.exceptions import ContractLensError
from contract_lens.models.analysis import ContractAnalysis, Severity
from contract_lens.models.chat import ExtractedDocument
from contract_lens.utils.config import get_settings

app = typer.Typer(
    name="contract-lens",
    help="Contract risk analysis with an LLM",
    add_completion=False,
)

console = Console()

SEVERITY_STYLES = {
    Severity.LOW: "green",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
    Severity.CRITICAL: "bold red",
}


def configure_logging(level: str) -> None:
    """Route stdlib logging through rich"""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def _load_pdf(path: Path) -> ExtractedDocument:
    from contract_lens.services.pdf_extractor import extract_document

    settings = get_settings()
    return extract_document(path.read_bytes(), max_pages=settings.max_pages, filename=path.name)


def _fail(e: ContractLensError, json_output: bool) -> None:
    if json_output:
        print(json.dumps({"error": e.kind, "message": e.message, "details": e.details}, ensure_ascii=False))
    else:
        console.print(f"[red]{e.kind}: {e.message}[/red]")
        for violation in e.details.get("violations", []):
            console.print(f"  - {violation}")
    raise typer.Exit(code=1)


@app.callback()
def main():
    """Contract risk analysis with an LLM"""
    configure_logging(get_settings().log_level)


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the HTTP API"""
    import uvicorn

    console.print(f"[blue]Serving ContractLens API on http://{host}:{port}[/blue]")
    uvicorn.run(
        "contract_lens.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@app.command("extract")
def extract(
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF contract"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show the text extracted from each page of a PDF"""
    try:
        document = _load_pdf(pdf)
    except ContractLensError as e:
        _fail(e, json_output)

    if json_output:
        print(document.model_dump_json(indent=2))
        return

    table = Table(title=f"{pdf.name}: {document.pages_processed}/{document.total_pages} pages")
    table.add_column("Page", justify="right", style="cyan")
    table.add_column("Chars", justify="right")
    table.add_column("Preview")
    for page in document.pages:
        preview = page.text[:80] + "..." if len(page.text) > 80 else page.text
        table.add_row(str(page.page), str(len(page.text)), preview)
    console.print(table)


def _print_analysis(analysis: ContractAnalysis) -> None:
    console.print(Panel.fit(
        f"[bold]{analysis.contract_title}[/bold] ({analysis.language})\n"
        f"Overall risk score: [bold]{analysis.overall_risk_score}/100[/bold]",
        border_style="blue",
    ))

    if analysis.top_risks:
        console.print("\n[bold]Top risks[/bold]")
        for risk in analysis.top_risks:
            style = SEVERITY_STYLES[risk.severity]
            console.print(f"  [{style}]{risk.severity.value}[/{style}] {risk.title} (p. {risk.page}): {risk.reason}")

    table = Table(title="Flagged clauses")
    table.add_column("Type", style="cyan")
    table.add_column("Title")
    table.add_column("Severity")
    table.add_column("Confidence", justify="right")
    table.add_column("Pages")
    for clause in analysis.clauses:
        style = SEVERITY_STYLES[clause.severity]
        pages = ", ".join(str(e.page) for e in clause.evidence)
        table.add_row(
            clause.clause_type.value,
            clause.title,
            f"[{style}]{clause.severity.value}[/{style}]",
            f"{clause.confidence:.0%}",
            pages,
        )
    console.print(table)

    if analysis.recommended_actions:
        console.print("\n[bold]Recommended actions[/bold]")
        for action in analysis.recommended_actions:
            console.print(f"  - {action}")


@app.command("analyze")
def analyze(
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF contract"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Extract a PDF and run a full risk analysis"""
    from contract_lens.services.analysis import AnalysisOrchestrator
    from contract_lens.services.rate_limiter import RateLimiter
    from contract_lens.utils.llm import get_provider

    settings = get_settings()
    try:
        document = _load_pdf(pdf)
        orchestrator = AnalysisOrchestrator(
            get_provider(settings),
            RateLimiter(max_requests=settings.rate_limit_per_hour, window_seconds=settings.rate_limit_window_seconds),
            settings,
        )
        if not json_output:
            console.print(f"[blue]Analyzing {pdf.name} ({document.pages_processed} pages)...[/blue]")
        analysis = asyncio.run(orchestrator.analyze_contract(document.full_text, document.pages, caller_key="cli"))
    except ContractLensError as e:
        _fail(e, json_output)

    if json_output:
        print(analysis.model_dump_json(indent=2))
    else:
        _print_analysis(analysis)


@app.command("ask")
def ask(
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF contract"),
    question: str = typer.Argument(..., help="Question about the contract"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Ask a question about a PDF contract and get an answer with page citations"""
    from contract_lens.services.chat import ChatResponder
    from contract_lens.utils.llm import get_provider

    settings = get_settings()
    try:
        document = _load_pdf(pdf)
        responder = ChatResponder(get_provider(settings), settings)
        answer = asyncio.run(responder.answer(question, document.pages))
    except ContractLensError as e:
        _fail(e, json_output)

    if json_output:
        print(answer.model_dump_json(indent=2))
        return

    console.print(Panel(answer.answer, title="Answer", border_style="green"))
    for citation in answer.citations:
        console.print(f"  - [cyan]Page {citation.page}[/cyan]: {citation.excerpt}")


if __name__ == "__main__":
    app()
