"""
Complete RAG pipeline orchestrating ingestion, retrieval and generation.

Ingestion reads documents, chunks them, embeds either the chunks
themselves (basic index) or hypothetical questions generated for each
chunk (HyPE index), and persists the resulting store. Querying loads the
persisted store, retrieves, and generates a grounded answer.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from rag_engine.config.settings import settings
from rag_engine.document_processor import DocumentExtractor, TextChunk, TextChunker
from rag_engine.rag.generator import AnswerGenerator
from rag_engine.rag.hype import QuestionGenerator
from rag_engine.rag.retriever import DocumentRetriever
from rag_engine.vector_store import (
    EmbeddingGenerator,
    HyPEVectorStore,
    SearchResult,
    VectorStore,
)

# Set up logging
logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Summary of an ingestion run."""

    documents_processed: int
    chunks_created: int
    embeddings_created: int
    index_path: Path
    ingestion_time: float
    errors: list[str] = field(default_factory=list)


@dataclass
class RAGResult:
    """Complete result of a RAG pipeline execution."""

    question: str
    answer: str
    results: list[SearchResult]
    retrieval_time: float
    generation_time: float
    total_time: float
    model_used: str


class RAGPipeline:
    """
    Complete RAG (Retrieval-Augmented Generation) pipeline.

    Collaborators are created on first use, so a pipeline used only for
    ingestion never builds a chat model and vice versa.
    """

    def __init__(
        self,
        embedding_generator: EmbeddingGenerator | None = None,
        answer_generator: AnswerGenerator | None = None,
        question_generator: QuestionGenerator | None = None,
        chunker: TextChunker | None = None,
        extractor: DocumentExtractor | None = None,
    ):
        self._embedding_generator = embedding_generator
        self._answer_generator = answer_generator
        self._question_generator = question_generator
        self.chunker = chunker or TextChunker()
        self.extractor = extractor or DocumentExtractor()

        logger.info("RAG Pipeline initialized")

    @property
    def embedding_generator(self) -> EmbeddingGenerator:
        if self._embedding_generator is None:
            self._embedding_generator = EmbeddingGenerator()
        return self._embedding_generator

    @property
    def answer_generator(self) -> AnswerGenerator:
        if self._answer_generator is None:
            self._answer_generator = AnswerGenerator()
        return self._answer_generator

    @property
    def question_generator(self) -> QuestionGenerator:
        if self._question_generator is None:
            self._question_generator = QuestionGenerator(self.answer_generator)
        return self._question_generator

    def build_store(self, chunks: list[TextChunk]) -> VectorStore:
        """
        Embed chunk contents and index them one embedding per chunk.

        Args:
            chunks: Chunks to index

        Returns:
            A populated VectorStore
        """
        store = VectorStore()
        if not chunks:
            return store

        embeddings = self.embedding_generator.embed([chunk.content for chunk in chunks])
        store.add_many(chunks, embeddings)
        return store

    def build_hype_store(self, chunks: list[TextChunk]) -> HyPEVectorStore:
        """
        Generate and embed hypothetical questions for every chunk.

        Args:
            chunks: Chunks to index

        Returns:
            A populated HyPEVectorStore whose labels are the questions
        """
        store = HyPEVectorStore()
        total_questions = 0

        for position, chunk in enumerate(chunks, 1):
            logger.info(f"Processing chunk {position}/{len(chunks)}: {chunk.id}")
            questions = self.question_generator.generate(chunk.content)
            embeddings = self.embedding_generator.embed(questions)
            store.add_chunk_with_embeddings(chunk, embeddings, questions)
            total_questions += len(questions)

        if chunks:
            logger.info(
                f"Generated {total_questions} questions for {len(chunks)} chunks "
                f"({total_questions / len(chunks):.2f} per chunk)"
            )
        return store

    def ingest_directory(
        self,
        directory_path: str,
        hype: bool = False,
        index_path: str | Path | None = None,
    ) -> IngestionResult:
        """
        Read, chunk, embed and persist every supported document in a directory.

        An empty directory still produces (an empty) index file.

        Args:
            directory_path: Directory holding .md/.txt documents
            hype: Build a HyPE index instead of a basic one
            index_path: Destination (defaults to the configured index path)

        Returns:
            IngestionResult describing the run
        """
        start_time = time.time()
        target = Path(index_path) if index_path else settings.get_index_path(hype)

        processing = self.extractor.process_directory(directory_path)
        chunks = self.chunker.chunk_multiple_documents(processing.documents)

        if not chunks:
            logger.warning(f"No chunks generated; persisting empty index to {target}")

        store = self.build_hype_store(chunks) if hype else self.build_store(chunks)
        written = store.persist(target)

        return IngestionResult(
            documents_processed=processing.processed,
            chunks_created=len(chunks),
            embeddings_created=store.embedding_count,
            index_path=written,
            ingestion_time=time.time() - start_time,
            errors=processing.errors,
        )

    def load_store(
        self, hype: bool = False, index_path: str | Path | None = None
    ) -> VectorStore | HyPEVectorStore:
        """Load the persisted index of the chosen flavour."""
        target = Path(index_path) if index_path else settings.get_index_path(hype)
        store_class = HyPEVectorStore if hype else VectorStore
        return store_class.load(target)

    def ask(
        self,
        question: str,
        hype: bool = False,
        top_k: int | None = None,
        index_path: str | Path | None = None,
    ) -> RAGResult:
        """
        Process a question through the complete RAG pipeline.

        Args:
            question: User question
            hype: Query the HyPE index instead of the basic one
            top_k: Number of chunks to retrieve
            index_path: Index file to load (defaults to the configured path)

        Returns:
            RAGResult with answer and metadata
        """
        if not question.strip():
            raise ValueError("Question cannot be empty")

        logger.info(f"Processing question: '{question[:50]}...'")
        start_time = time.time()

        store = self.load_store(hype, index_path)
        retriever = DocumentRetriever(store, self.embedding_generator)
        retrieval = retriever.retrieve_relevant_documents(question, top_k)

        generation = self.answer_generator.generate_answer(question, retrieval.results)

        return RAGResult(
            question=question,
            answer=generation.answer,
            results=retrieval.results,
            retrieval_time=retrieval.retrieval_time,
            generation_time=generation.generation_time,
            total_time=time.time() - start_time,
            model_used=generation.model_used,
        )
