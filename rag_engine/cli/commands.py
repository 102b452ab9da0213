"""
Main CLI commands for rag-engine.

This module defines the command-line interface for building indexes,
searching them, asking questions, and inspecting stored chunks.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from rag_engine import __version__
from rag_engine.config.settings import settings

# Initialize console for rich output
console = Console()

# Set up logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _fail(message: str) -> None:
    console.print(f"[red]❌ {escape(message)}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="rag-engine")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def main(verbose: bool) -> None:
    """
    rag-engine: Educational RAG system built around an exact vector store.

    Index Markdown and text documents with one embedding per chunk or with
    HyPE question embeddings, then search and query the index.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")
    else:
        logging.getLogger().setLevel(settings.log_level.upper())


@main.command()
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("--hype", is_flag=True, help="Build a HyPE (question embedding) index")
@click.option("--index", "index_path", type=click.Path(), help="Index file to write")
def ingest(path: str, hype: bool, index_path: str | None) -> None:
    """Chunk, embed and index every document in PATH."""
    kind = "HyPE" if hype else "basic"
    console.print(f"[blue]📄 Building {kind} index from: {path}[/blue]")

    try:
        from rag_engine.rag.pipeline import RAGPipeline

        with console.status("[dim]📄 Processing documents..."):
            result = RAGPipeline().ingest_directory(path, hype=hype, index_path=index_path)
    except Exception as e:
        logger.error(f"Ingestion error: {e}", exc_info=True)
        _fail(f"Error processing documents: {str(e)}")
        return

    console.print(
        f"[green]✅ Processed {result.documents_processed} documents "
        f"into {result.chunks_created} chunks[/green]"
    )
    console.print(
        f"[blue]📊 {result.embeddings_created} embeddings in "
        f"{result.ingestion_time:.2f}s[/blue]"
    )
    for error in result.errors:
        console.print(f"[yellow]⚠️ {error}[/yellow]")
    console.print(f"[dim]💾 Index written to {result.index_path}[/dim]")


@main.command()
@click.argument("query")
@click.option("--hype", is_flag=True, help="Search the HyPE index")
@click.option("--top-k", type=int, help="Number of chunks to retrieve")
@click.option("--index", "index_path", type=click.Path(), help="Index file to load")
def search(query: str, hype: bool, top_k: int | None, index_path: str | None) -> None:
    """Show the chunks most similar to QUERY."""
    try:
        from rag_engine.rag.pipeline import RAGPipeline
        from rag_engine.rag.retriever import DocumentRetriever

        pipeline = RAGPipeline()
        store = pipeline.load_store(hype, index_path)
        retriever = DocumentRetriever(store, pipeline.embedding_generator)
        retrieval = retriever.retrieve_relevant_documents(query, top_k)
    except Exception as e:
        _fail(f"Search failed: {str(e)}")
        return

    if not retrieval.results:
        console.print("[yellow]📝 No chunks indexed yet[/yellow]")
        return

    table = Table(title=f"Results for: {query}", border_style="blue")
    table.add_column("#", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Chunk", style="cyan")
    table.add_column("Source")
    if hype:
        table.add_column("Matched question", style="green")
    table.add_column("Preview", style="dim")

    for result in retrieval.results:
        preview = result.chunk.content[:80].replace("\n", " ")
        row = [
            str(result.rank + 1),
            f"{result.score:.3f}",
            result.chunk.id,
            result.chunk.title,
        ]
        if hype:
            row.append(result.matched_label or "")
        row.append(preview)
        table.add_row(*row)

    console.print(table)


@main.command()
@click.argument("question")
@click.option("--hype", is_flag=True, help="Retrieve from the HyPE index")
@click.option("--top-k", type=int, help="Number of chunks to retrieve")
@click.option("--show-sources", is_flag=True, help="Show source chunks")
def ask(question: str, hype: bool, top_k: int | None, show_sources: bool) -> None:
    """Ask a single question to the RAG system."""
    console.print(f"[blue]❓ Question:[/blue] {question}")

    try:
        from rag_engine.rag.pipeline import RAGPipeline

        with console.status("[dim]🔍 Searching index and generating answer..."):
            result = RAGPipeline().ask(question, hype=hype, top_k=top_k)
    except Exception as e:
        _fail(f"Error processing query: {str(e)}")
        return

    console.print("\n[bold green]🤖 Answer:[/bold green]")
    console.print(Panel(result.answer, border_style="green"))
    console.print(
        f"[dim]⏱️ Response time: {result.total_time:.2f}s | "
        f"📄 Chunks used: {len(result.results)}[/dim]"
    )

    if show_sources and result.results:
        console.print(f"\n[blue]📄 Sources ({len(result.results)} chunks):[/blue]")
        for source in result.results:
            console.print(
                f"\n[bold]{source.rank + 1}. {source.chunk.title}[/bold] "
                f"[dim](score: {source.score:.3f})[/dim]"
            )
            if source.matched_label:
                console.print(f"   [green]{source.matched_label}[/green]")
            console.print(f"   [dim]{source.chunk.content[:200]}[/dim]")


@main.command()
@click.option("--hype", is_flag=True, help="Describe the HyPE index")
@click.option("--index", "index_path", type=click.Path(), help="Index file to load")
def stats(hype: bool, index_path: str | None) -> None:
    """Show statistics about a persisted index."""
    try:
        from rag_engine.rag.pipeline import RAGPipeline

        store = RAGPipeline().load_store(hype, index_path)
    except Exception as e:
        _fail(f"Error getting statistics: {str(e)}")
        return

    store_stats = store.get_statistics()
    table = Table(title="Knowledge Base", border_style="blue")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Index Type", store_stats.index_type)
    table.add_row("Documents", str(store_stats.document_count))
    table.add_row("Text Chunks", str(store_stats.chunk_count))
    table.add_row("Embeddings", str(store_stats.embedding_count))
    table.add_row("Embedding Dimension", str(store_stats.embedding_dimension))
    table.add_row("Database Size", f"{store_stats.db_size_mb:.1f} MB")
    table.add_row("Last Updated", store_stats.last_updated)

    console.print(table)


@main.command()
@click.option("--hype", is_flag=True, help="Inspect the HyPE index")
@click.option("--count", type=int, default=10, help="Number of chunks to inspect")
@click.option("--search", "text", type=str, help="Only chunks containing this text")
def inspect(hype: bool, count: int, text: str | None) -> None:
    """Inspect stored chunks to debug content quality."""
    try:
        from rag_engine.rag.pipeline import RAGPipeline

        store = RAGPipeline().load_store(hype)
    except Exception as e:
        _fail(f"Inspection failed: {str(e)}")
        return

    chunks = store.chunks
    if not chunks:
        console.print("[yellow]📝 No chunks found in index[/yellow]")
        return

    console.print(f"[blue]🔍 Inspecting chunks (total: {len(chunks)})[/blue]")
    if text:
        chunks = [chunk for chunk in chunks if text.lower() in chunk.content.lower()]
        console.print(f"[dim]Found {len(chunks)} chunks containing '{text}'[/dim]")

    labels = {}
    if hype:
        labels = {
            record.chunk.id: [item.label for item in record.embeddings]
            for record in store.records
        }

    for chunk in chunks[:count]:
        console.print(f"\n[bold]--- {chunk.id} ---[/bold]")
        console.print(f"[dim]Source: {chunk.title} (#{chunk.sequence})[/dim]")
        console.print(f"[dim]Size: {len(chunk.content)} chars[/dim]")
        for label in labels.get(chunk.id, []):
            console.print(f"[green]  ? {label}[/green]")
        content_preview = chunk.content[:300]
        if len(chunk.content) > 300:
            content_preview += "..."
        console.print(content_preview)


@main.command()
@click.option("--check", is_flag=True, help="Also check that Ollama serves the embedding model")
def config(check: bool) -> None:
    """Show the current configuration."""
    is_valid, errors = settings.is_valid()

    table = Table(title="Configuration", border_style="yellow")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Embedding Model", settings.embedding_model)
    table.add_row("Chat Model", settings.chat_model)
    table.add_row("Question Model", settings.question_gen_model)
    table.add_row("Ollama URL", settings.ollama_base_url)
    table.add_row("Chunk Size", str(settings.chunk_size))
    table.add_row("Chunk Overlap", str(settings.chunk_overlap))
    table.add_row("Semantic Chunking", str(settings.semantic_chunking))
    table.add_row("Top-K Retrieval", str(settings.top_k_retrieval))
    table.add_row("Questions per Chunk", str(settings.questions_per_chunk))
    table.add_row("Index", str(Path(settings.index_path)))
    table.add_row("HyPE Index", str(Path(settings.hype_index_path)))

    console.print(table)

    if check:
        from rag_engine.vector_store.embeddings import EmbeddingGenerator

        with console.status("[dim]🔍 Checking Ollama..."):
            is_available, status = EmbeddingGenerator().check_ollama_connection()
        if is_available:
            console.print(f"[green]✅ {escape(status)}[/green]")
        else:
            is_valid = False
            errors = [*errors, status]

    if not is_valid:
        for error in errors:
            console.print(f"[red]❌ {escape(error)}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
