"""
Prompt templates for retrieval-augmented answers.
"""

from typing import Any

from resume_rag.data.models import EvidenceItem, Job

ANSWER_SYSTEM_PROMPT = (
    "You are a helpful assistant that analyzes resume databases to answer questions "
    "about candidates. Always provide specific evidence and cite which resume(s) your "
    "information comes from."
)

ANSWER_PROMPT = """You are an AI assistant helping with resume analysis and candidate search. Based on the provided resume data, answer the user's query in a helpful and accurate manner.

User Query: "{query}"

Available Resume Data:
{context}
{job_context}
Instructions:
1. Answer the query directly and concisely
2. Cite specific evidence from the resumes (use the resume numbers) when making claims
3. If comparing candidates, be fair and highlight different strengths
4. Use professional, recruiter-friendly language
5. If the query asks for specific numbers or counts, provide them accurately
6. Mention relevant skills, experience, and qualifications
7. If no perfect matches exist, suggest the closest alternatives

Provide a comprehensive answer that would be useful for a recruiter or hiring manager:"""

NOT_SPECIFIED = "Not specified"


def _join(values: list[str]) -> str:
    values = [v for v in values if v]
    return ", ".join(values) if values else NOT_SPECIFIED


def format_resume_context(view: dict[str, Any], excerpt: str) -> str:
    """Summarise a role-redacted resume view as a context block for the prompt."""
    extracted = view.get("extracted_data") or {}

    skills = [s.get("name", "") for s in (extracted.get("skills") or [])[:10]]
    experience = [
        f"{e.get('position') or 'Unknown role'} at {e.get('company') or 'Unknown company'} "
        f"({e.get('start_date') or '?'} - {e.get('end_date') or '?'})"
        for e in (extracted.get("experience") or [])[:3]
    ]
    education = [
        f"{e.get('degree') or 'Degree'} in {e.get('field') or 'unspecified field'} "
        f"from {e.get('institution') or 'unknown institution'}"
        for e in (extracted.get("education") or [])[:2]
    ]

    return "\n".join([
        f"- Years of Experience: {view.get('years_of_experience') or 0}",
        f"- Current Position: {view.get('current_position') or NOT_SPECIFIED}",
        f"- Key Skills: {_join(skills)}",
        f"- Work Experience: {_join(experience)}",
        f"- Education: {_join(education)}",
        f"- Relevant Text Excerpt: {excerpt}",
    ])


def format_job_context(jobs: list[Job], description_chars: int) -> str:
    """Describe the requester's open positions as secondary context."""
    if not jobs:
        return ""
    lines = [
        f"- {job.title} at {job.company or 'Unknown company'}: {job.description[:description_chars]}"
        for job in jobs
    ]
    return "\nOpen Positions:\n" + "\n".join(lines) + "\n"


def build_answer_prompt(
    query: str,
    evidence: list[EvidenceItem],
    job_context: str,
    evidence_chars: int,
) -> str:
    """Assemble the bounded answer prompt from the top evidence items."""
    blocks = []
    for index, item in enumerate(evidence, start=1):
        body = (item.excerpt or item.snippet)[:evidence_chars]
        blocks.append(f"Resume {index} ({item.candidate_name}, similarity {item.similarity:.2f}):\n{body}")
    return ANSWER_PROMPT.format(
        query=query,
        context="\n\n".join(blocks),
        job_context=job_context,
    )
