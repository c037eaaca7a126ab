"""
Resume RAG Command Line Interface

Provides CLI commands for searching, questioning and matching a resume
corpus, either from a JSON corpus file or from MongoDB.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="resume-rag",
    help="Retrieval and matching engine for resumes and job postings",
    add_completion=False,
)
console = Console()

CorpusOption = typer.Option(
    None, "--corpus", "-C", help="JSON file with 'resumes' and 'jobs' lists"
)
MongoOption = typer.Option(False, "--mongo", help="Read documents from MongoDB")
RoleOption = typer.Option("candidate", "--role", "-r", help="Caller role (candidate/recruiter/admin)")


def _load_store(corpus: Optional[Path], mongo: bool):
    """Build the document store selected on the command line."""
    from resume_rag.data.models import Job, Resume
    from resume_rag.data.store import InMemoryDocumentStore, MongoDocumentStore

    if mongo:
        from resume_rag.data.database import get_database_manager

        db_manager = get_database_manager()
        if not db_manager.check_sync_connection():
            console.print("[red]Error: Could not connect to MongoDB.[/red]")
            raise typer.Exit(1)
        return MongoDocumentStore(db_manager)

    if corpus is None:
        console.print("[red]Error: Provide --corpus FILE or --mongo.[/red]")
        raise typer.Exit(1)

    if not corpus.exists():
        console.print(f"[red]Error: Corpus file not found: {corpus}[/red]")
        raise typer.Exit(1)

    try:
        payload = json.loads(corpus.read_text(encoding="utf-8"))
        resumes = [Resume.model_validate(item) for item in payload.get("resumes", [])]
        jobs = [Job.model_validate(item) for item in payload.get("jobs", [])]
    except (OSError, ValueError) as e:
        console.print(f"[red]Error reading corpus: {e}[/red]")
        raise typer.Exit(1)

    return InMemoryDocumentStore(resumes=resumes, jobs=jobs)


def _build_orchestrator(corpus: Optional[Path], mongo: bool):
    from resume_rag.core.retrieval import RetrievalOrchestrator

    return RetrievalOrchestrator(_load_store(corpus, mongo))


def _filters(
    experience: Optional[str],
    location: Optional[str],
    skills: Optional[list[str]],
    companies: Optional[list[str]],
    education: Optional[str],
) -> dict:
    filters = {
        "experience_level": experience,
        "location": location,
        "skills": skills or [],
        "companies": companies or [],
        "education": education,
    }
    return {k: v for k, v in filters.items() if v}


@app.command()
def version():
    """Show application version."""
    from resume_rag import __app_name__, __version__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show system information and configuration."""
    from resume_rag.utils.config import get_settings

    settings = get_settings()

    table = Table(title="Resume RAG Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Database Host", settings.database.host)
    table.add_row("Database Name", settings.database.name)
    table.add_row("AI Provider Mode", settings.ai.provider)
    table.add_row("OpenAI Configured", str(settings.openai.is_configured))
    table.add_row("OpenAI Embedding Model", settings.openai.embedding_model)
    table.add_row("Ollama URL", settings.ollama.url)
    table.add_row("Ollama Embedding Model", settings.ollama.embedding_model)
    table.add_row("Minimum Similarity", f"{settings.retrieval.min_similarity:.2f}")
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def init_db():
    """Create MongoDB indexes for resumes and jobs."""
    from pymongo.errors import PyMongoError

    from resume_rag.data.database import get_database_manager

    console.print("[yellow]Initializing database...[/yellow]")

    db_manager = get_database_manager()

    console.print("  Checking database connection...")
    if not db_manager.check_sync_connection():
        console.print("[red]Error: Could not connect to MongoDB.[/red]")
        console.print("[dim]Make sure MongoDB is running and connection settings are correct.[/dim]")
        raise typer.Exit(1)

    console.print("  [green]✓[/green] Connected to MongoDB")

    try:
        console.print("  Creating indexes...")
        db_manager.ensure_indexes()
        console.print("  [green]✓[/green] Indexes created")
    except PyMongoError as e:
        console.print(f"[red]Error initializing database: {e}[/red]")
        raise typer.Exit(1)

    console.print("\n[green]Database initialized successfully![/green]")


@app.command()
def providers():
    """Detect the active AI provider."""
    from resume_rag.ml.providers import get_ai_service

    console.print("[yellow]Detecting AI provider...[/yellow]")

    service = get_ai_service()
    provider = service.initialize()

    table = Table(title="AI Provider")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Active Provider", service.active_provider)
    table.add_row("Embedding Model", provider.embedding_model)
    table.add_row("Chat Model", provider.chat_model)
    table.add_row("Available", "yes" if provider.is_available else "degraded")

    console.print(table)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    k: int = typer.Option(10, "--limit", "-k", help="Maximum number of results"),
    role: str = RoleOption,
    experience: Optional[str] = typer.Option(None, "--experience", "-e", help="Experience level filter"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Location substring filter"),
    skills: Optional[list[str]] = typer.Option(None, "--skill", "-s", help="Skill filter (repeatable)"),
    companies: Optional[list[str]] = typer.Option(None, "--company", help="Company filter (repeatable)"),
    education: Optional[str] = typer.Option(None, "--education", help="Degree substring filter"),
    corpus: Optional[Path] = CorpusOption,
    mongo: bool = MongoOption,
):
    """Semantic search over processed resumes."""
    from resume_rag.core.exceptions import ResumeRAGError

    orchestrator = _build_orchestrator(corpus, mongo)

    try:
        response = orchestrator.search(
            query,
            k=k,
            filters=_filters(experience, location, skills, companies, education),
            role=role,
        )
    except ResumeRAGError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        orchestrator.close()

    if not response.documents:
        console.print(f"[yellow]{response.message}[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"{response.total_results} result(s) for '{response.query}'")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Candidate", style="cyan")
    table.add_column("Similarity", justify="right")
    table.add_column("Position")
    table.add_column("Snippet")

    for i, doc in enumerate(response.documents, 1):
        table.add_row(
            str(i),
            doc["candidate_name"],
            f"{doc['similarity']:.2f}",
            doc.get("current_position") or "-",
            doc["snippet"],
        )

    console.print(table)


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about the resume corpus"),
    k: int = typer.Option(5, "--limit", "-k", help="Number of resumes used as evidence"),
    role: str = RoleOption,
    requester: Optional[str] = typer.Option(None, "--requester", help="Requester id for job context"),
    job_context: bool = typer.Option(False, "--job-context", help="Include the requester's open jobs"),
    corpus: Optional[Path] = CorpusOption,
    mongo: bool = MongoOption,
):
    """Answer a question using retrieved resumes as evidence."""
    from resume_rag.core.exceptions import ResumeRAGError

    orchestrator = _build_orchestrator(corpus, mongo)

    try:
        response = orchestrator.ask(
            question,
            k=k,
            role=role,
            include_job_context=job_context,
            requester_id=requester,
        )
    except ResumeRAGError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        orchestrator.close()

    console.print("\n[bold]Answer:[/bold]")
    console.print(response.answer)

    if response.sources:
        console.print("\n[bold]Sources:[/bold]")
        for source in response.sources:
            console.print(
                f"  • {source.candidate_name} "
                f"[dim](similarity {source.similarity:.2f})[/dim]: {source.snippet}"
            )

    meta = response.metadata
    console.print(
        f"\n[dim]{meta.provider} | {meta.model or '-'} | "
        f"{meta.sources_used} source(s) | {meta.processing_time_ms} ms[/dim]"
    )


@app.command()
def match_job(
    job_id: str = typer.Argument(..., help="Job ID to match candidates against"),
    top_n: int = typer.Option(10, "--top", "-n", help="Number of top matches to show"),
    role: str = RoleOption,
    corpus: Optional[Path] = CorpusOption,
    mongo: bool = MongoOption,
):
    """Rank processed resumes against a job posting."""
    from resume_rag.core.exceptions import JobNotFoundError, ResumeRAGError
    from resume_rag.utils.constants import MatchScoreLevel

    orchestrator = _build_orchestrator(corpus, mongo)

    try:
        response = orchestrator.match_job(job_id, top_n=top_n, role=role)
    except JobNotFoundError:
        console.print(f"[red]Error: Job not found: {job_id}[/red]")
        raise typer.Exit(1)
    except ResumeRAGError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)
    finally:
        orchestrator.close()

    console.print(f"  Job: [cyan]{response.job_title}[/cyan] at {response.company or '-'}")

    if not response.matches:
        console.print(f"[yellow]{response.message}[/yellow]")
        raise typer.Exit(0)

    level_colors = {
        MatchScoreLevel.EXCELLENT: "green",
        MatchScoreLevel.GOOD: "blue",
        MatchScoreLevel.FAIR: "yellow",
    }

    table = Table(title=f"Top {len(response.matches)} Matches for {response.job_title}")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Candidate", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Level", justify="center")
    table.add_column("Semantic", justify="right")
    table.add_column("Skills", justify="right")
    table.add_column("Experience", justify="right")

    for i, match in enumerate(response.matches, 1):
        level = MatchScoreLevel.from_score(match.overall_score)
        color = level_colors.get(level, "red")
        table.add_row(
            str(i),
            match.candidate_name,
            f"{match.overall_score:.2f}",
            f"[{color}]{level.value.upper()}[/{color}]",
            f"{match.semantic_similarity:.2f}",
            f"{match.skills_match:.2f}",
            f"{match.experience_match:.2f}",
        )

    console.print(table)

    top = response.matches[0]
    if top.evidence:
        console.print("\n[bold]Top Match Evidence:[/bold]")
        for line in top.evidence:
            console.print(f"  • {line}")
    if top.missing_skills:
        console.print(f"  [yellow]Missing:[/yellow] {', '.join(top.missing_skills)}")


@app.command()
def analytics(
    days: int = typer.Option(30, "--days", "-d", help="Timeframe for recent uploads"),
    corpus: Optional[Path] = CorpusOption,
    mongo: bool = MongoOption,
):
    """Show corpus statistics."""
    orchestrator = _build_orchestrator(corpus, mongo)
    try:
        stats = orchestrator.search_analytics(timeframe_days=days)
    finally:
        orchestrator.close()

    console.print("[bold cyan]Corpus Statistics[/bold cyan]")
    console.print(f"[dim]{'─' * 50}[/dim]")
    console.print(f"  Processed resumes: [green]{stats['total_resumes']}[/green]")
    console.print(f"  Uploaded in last {days} days: [green]{stats['recent_uploads']}[/green]")

    if stats["top_skills"]:
        table = Table(title="Top Skills")
        table.add_column("Skill", style="cyan")
        table.add_column("Count", justify="right", style="green")
        for item in stats["top_skills"]:
            table.add_row(item["skill"], str(item["count"]))
        console.print(table)

    console.print("\n[bold]Experience Distribution:[/bold]")
    for band, count in stats["experience_distribution"].items():
        console.print(f"  {band}: {count}")


@app.command()
def suggest(
    partial: str = typer.Argument("", help="Partial query text"),
    limit: int = typer.Option(10, "--limit", "-l", help="Maximum suggestions"),
    corpus: Optional[Path] = CorpusOption,
    mongo: bool = MongoOption,
):
    """Suggest search queries."""
    orchestrator = _build_orchestrator(corpus, mongo)
    try:
        suggestions = orchestrator.query_suggestions(partial, limit=limit)
    finally:
        orchestrator.close()

    if not suggestions:
        console.print("[yellow]No suggestions.[/yellow]")
        raise typer.Exit(0)

    for suggestion in suggestions:
        console.print(f"  • {suggestion}")


if __name__ == "__main__":
    app()
