"""
Shared test fixtures for the Resume RAG test suite.

Sets environment variables before any package imports so settings and
logging pick up the testing profile, then provides factory fixtures for
resumes and jobs, an in-memory document store and deterministic stub AI
providers. Nothing here touches the network or MongoDB.
"""

import os

# === Set environment BEFORE any resume_rag imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("DB_NAME", "resume_rag_test")

from datetime import datetime
from typing import Any, Optional

import pytest

from resume_rag.core.exceptions import ProviderError
from resume_rag.core.retrieval import RetrievalOrchestrator
from resume_rag.data.models import (
    Education,
    ExtractedData,
    Job,
    PersonalInfo,
    Resume,
    Skill,
    WorkExperience,
)
from resume_rag.data.store import InMemoryDocumentStore
from resume_rag.ml.ethics.pii_redactor import PIIRedactor
from resume_rag.ml.providers import AIProvider, AIService
from resume_rag.utils.config import AISettings, AppSettings
from resume_rag.utils.constants import ProcessingStatus


# ---------------------------------------------------------------------------
# Stub AI provider
# ---------------------------------------------------------------------------


class StubProvider(AIProvider):
    """Deterministic provider: fixed vectors per text, canned answers."""

    name = "stub"
    unavailable_message = "Stub provider is unavailable."

    def __init__(
        self,
        vectors: Optional[dict[str, list[float]]] = None,
        default_vector: Optional[list[float]] = None,
        answer: str = "Jane is the strongest Python candidate (Resume 1).",
        fail_generation: bool = False,
        available: bool = True,
        configured: bool = True,
    ):
        super().__init__(max_length=8000, cooldown_seconds=60.0)
        self.vectors = vectors or {}
        self.default_vector = default_vector
        self.answer = answer
        self.fail_generation = fail_generation
        self.available = available
        self.is_configured = configured
        self.prompts: list[str] = []
        self.embedded: list[str] = []
        self.probe_calls = 0

    @property
    def embedding_model(self) -> str:
        return "stub-embed"

    @property
    def chat_model(self) -> str:
        return "stub-chat"

    @property
    def evidence_chars(self) -> int:
        return 1000

    def _embed(self, text: str) -> list[float]:
        self.embedded.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        return list(self.default_vector) if self.default_vector is not None else []

    def _extract(self, text: str) -> dict[str, Any]:
        return {"personal_info": {"name": "Stub Person"}, "skills": [{"name": "Python"}]}

    def _generate(
        self,
        prompt: str,
        system_prompt: Optional[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        self.prompts.append(prompt)
        if self.fail_generation:
            raise ProviderError("generation failed", provider=self.name)
        return self.answer

    def check_availability(self) -> bool:
        self.probe_calls += 1
        return self.available


def make_ai_service(provider: AIProvider, mode: str = "ollama") -> AIService:
    """AIService pinned to a stub provider."""
    settings = AppSettings(ai=AISettings(provider=mode))
    return AIService(settings=settings, openai_provider=provider, ollama_provider=provider)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_resume():
    """Factory that returns a callable to build processed Resume documents."""
    redactor = PIIRedactor()

    def _factory(
        name: str = "Jane Smith",
        email: str = "jane.smith@example.com",
        phone: str = "555-123-4567",
        skills: tuple[str, ...] = ("Python", "Django"),
        years: Optional[float] = 6.0,
        position: str = "Senior Engineer",
        company: str = "TechCorp",
        degree: str = "Bachelor of Science",
        location: str = "San Francisco, CA",
        embedding: tuple[float, ...] = (1.0, 0.0, 0.0),
        status: ProcessingStatus = ProcessingStatus.COMPLETED,
        created_at: Optional[datetime] = None,
        text: Optional[str] = None,
        **kwargs: Any,
    ) -> Resume:
        if text is None:
            text = (
                f"{name}\n{email} | {phone}\n"
                f"{position} with {', '.join(skills)} experience. "
                f"Built data pipelines at {company} for analytics teams. "
                "Enjoys hiking and photography on weekends."
            )
        info = PersonalInfo(name=name, email=email, phone=phone)
        extra: dict[str, Any] = {"created_at": created_at} if created_at else {}
        return Resume(
            filename="resume.pdf",
            text=text,
            redacted_text=redactor.redact(text, info),
            personal_info=info,
            extracted_data=ExtractedData(
                skills=[Skill(name=s) for s in skills],
                experience=[
                    WorkExperience(
                        company=company, position=position, start_date="2018-01", end_date="present"
                    )
                ],
                education=[
                    Education(institution="State University", degree=degree, field="Computer Science")
                ],
            ),
            embedding=list(embedding),
            embedding_model="stub-embed",
            status=status,
            years_of_experience=years,
            current_position=position,
            current_company=company,
            location=location,
            **extra,
            **kwargs,
        )

    return _factory


@pytest.fixture
def make_job():
    """Factory that returns a callable to build Job postings."""

    def _factory(
        title: str = "Senior Python Engineer",
        company: str = "Acme Corp",
        skills: tuple[str, ...] = ("Python", "Django"),
        experience_level: str = "senior",
        embedding: tuple[float, ...] = (1.0, 0.0, 0.0),
        posted_by: Optional[str] = "recruiter-1",
        **kwargs: Any,
    ) -> Job:
        return Job(
            title=title,
            company=company,
            description="Build and scale Python APIs for our analytics platform.",
            requirements=["5+ years of backend development"],
            skills=list(skills),
            experience_level=experience_level,
            embedding=list(embedding),
            posted_by=posted_by,
            **kwargs,
        )

    return _factory


# ---------------------------------------------------------------------------
# Corpus fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def corpus(make_resume):
    """
    Four resumes against the query vector (1, 0, 0):

    jane 1.0, bob 0.6, carol 0.0 (below the floor), dave failed processing.
    """
    return {
        "jane": make_resume(created_at=datetime(2024, 3, 1)),
        "bob": make_resume(
            name="Bob Jones",
            email="bob.jones@example.com",
            phone="555-987-6543",
            skills=("JavaScript", "React"),
            years=3.0,
            position="Frontend Developer",
            company="WebWorks",
            location="New York, NY",
            embedding=(0.6, 0.8, 0.0),
            created_at=datetime(2024, 2, 1),
        ),
        "carol": make_resume(
            name="Carol White",
            email="carol@example.com",
            phone="555-222-3333",
            skills=("Excel",),
            years=1.0,
            position="Analyst",
            company="Numbers Inc",
            degree="Associate of Arts",
            embedding=(0.0, 0.0, 1.0),
            created_at=datetime(2024, 1, 1),
        ),
        "dave": make_resume(
            name="Dave Brown",
            email="dave@example.com",
            embedding=(),
            status=ProcessingStatus.FAILED,
        ),
    }


@pytest.fixture
def store(corpus):
    return InMemoryDocumentStore(resumes=corpus.values())


@pytest.fixture
def stub_provider():
    return StubProvider(default_vector=[1.0, 0.0, 0.0])


@pytest.fixture
def ai_service(stub_provider):
    return make_ai_service(stub_provider)


@pytest.fixture
def app_settings():
    return AppSettings()


@pytest.fixture
def orchestrator(store, ai_service, app_settings):
    orch = RetrievalOrchestrator(store, ai_service=ai_service, settings=app_settings)
    yield orch
    orch.close()


@pytest.fixture
def make_provider():
    """Factory that returns a callable to build StubProvider instances."""
    return StubProvider


@pytest.fixture
def make_service():
    """Factory that returns a callable to pin an AIService to a provider."""
    return make_ai_service
