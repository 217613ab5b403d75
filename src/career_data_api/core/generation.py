from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

import pydantic

from career_data_api.core.agents.llm_client import LLMClient, Message, get_llm_client
from career_data_api.core.context import build_context, render_context
from career_data_api.core.prompts import DocumentKind, build_system_prompt
from career_data_api.db.repository import CareerStore
from career_data_api.db.utils import is_blank
from career_data_api.errors import ValidationError, missing_fields_error
from career_data_api.schemas import GenerationResult, JobInfo

logger = logging.getLogger(__name__)

_NOUNS = {
    DocumentKind.RESUME: "resume",
    DocumentKind.COVER_LETTER: "cover letter",
}

REVISION_PLACEHOLDER = (
    "I've created a {noun} based on the job description. Please provide feedback for revisions."
)


def parse_kind(kind: DocumentKind | str) -> DocumentKind:
    try:
        return DocumentKind(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in DocumentKind)
        raise ValidationError(
            f"Unknown document kind: {kind}. Use one of: {allowed}", ["kind"]
        ) from None


def validate_job_info(job_info: JobInfo | Mapping[str, Any] | None) -> JobInfo:
    if isinstance(job_info, JobInfo):
        parsed = job_info
    else:
        try:
            parsed = JobInfo.model_validate(dict(job_info or {}))
        except pydantic.ValidationError as exc:
            names = [".".join(str(p) for p in err["loc"]) for err in exc.errors()]
            raise ValidationError(f"Invalid jobInfo fields: {', '.join(names)}", names) from exc
    missing = [
        name
        for name, value in (("description", parsed.description), ("jobType", parsed.job_type))
        if is_blank(value)
    ]
    if missing:
        raise missing_fields_error(missing, prefix="Missing required fields in jobInfo")
    return parsed


def _require(name: str, value: Optional[str]) -> str:
    if is_blank(value):
        raise missing_fields_error([name], prefix="Missing required field")
    return value


# -----------------------------
# User turns
# -----------------------------
def _job_block(job_info: JobInfo) -> str:
    return f"**Job Type:** {job_info.job_type}\n\n**Job Description:**\n{job_info.description}"


def build_request_message(
    kind: DocumentKind,
    job_info: JobInfo,
    *,
    question: Optional[str] = None,
    additional_context: Optional[str] = None,
    current_answer: Optional[str] = None,
) -> str:
    """Opening user turn describing the job opportunity."""
    if kind is DocumentKind.APPLICATION_ANSWER:
        message = (
            "Please help me answer the following job application question:\n\n"
            f"{_job_block(job_info)}\n\n**Question:**\n{question}"
        )
        if current_answer:
            message += f"\n\n**Current Answer (to improve upon):**\n{current_answer}"
    else:
        message = (
            f"Please create a tailored {_NOUNS[kind]} for the following job opportunity:\n\n"
            f"{_job_block(job_info)}"
        )
    if additional_context:
        message += f"\n\n**Additional Context:**\n{additional_context}"
    return message


def build_revision_messages(
    kind: DocumentKind,
    job_info: JobInfo,
    feedback: str,
    *,
    question: Optional[str] = None,
    current_answer: Optional[str] = None,
) -> List[Message]:
    """The fixed user / assistant / user conversation used for revisions."""
    if kind is DocumentKind.APPLICATION_ANSWER:
        prior = current_answer
        noun = "answer"
    else:
        noun = _NOUNS[kind]
        prior = REVISION_PLACEHOLDER.format(noun=noun)
    return [
        {"role": "user", "content": build_request_message(kind, job_info, question=question)},
        {"role": "assistant", "content": prior},
        {
            "role": "user",
            "content": f"Please revise the {noun} based on the following feedback:\n\n{feedback}",
        },
    ]


def _system_prompt(kind: DocumentKind, store: Optional[CareerStore]) -> str:
    context = build_context(store)
    return build_system_prompt(kind, render_context(context))


# -----------------------------
# Operations
# -----------------------------
def generate_document(
    kind: DocumentKind | str,
    job_info: JobInfo | Mapping[str, Any],
    additional_context: Optional[str] = None,
    *,
    question: Optional[str] = None,
    current_answer: Optional[str] = None,
    store: Optional[CareerStore] = None,
    llm: Optional[LLMClient] = None,
) -> GenerationResult:
    """Generate a fresh document tailored to one job.

    Args:
        kind: resume, cover-letter or application-answer.
        job_info: Mapping or model with a non-empty description and jobType.
        additional_context: Optional extra instructions appended to the request.
        question: Application question; required for application-answer.
        current_answer: Optional existing answer to improve (application-answer only).
        store: Career store to read context from; defaults to the process store.
        llm: Model client; defaults to the configured provider.

    Returns:
        Generated content and token usage.
    """
    kind = parse_kind(kind)
    job = validate_job_info(job_info)
    if kind is DocumentKind.APPLICATION_ANSWER:
        _require("question", question)
    else:
        current_answer = None

    system_prompt = _system_prompt(kind, store)
    message = build_request_message(
        kind,
        job,
        question=question,
        additional_context=additional_context,
        current_answer=current_answer,
    )
    client = llm or get_llm_client()
    logger.info("Generating %s for job type %s", kind.value, job.job_type)
    return client.complete(system_prompt, [{"role": "user", "content": message}])


def revise_document(
    kind: DocumentKind | str,
    job_info: JobInfo | Mapping[str, Any],
    feedback: str,
    *,
    question: Optional[str] = None,
    current_answer: Optional[str] = None,
    store: Optional[CareerStore] = None,
    llm: Optional[LLMClient] = None,
) -> GenerationResult:
    """Revise a previously generated document from caller feedback.

    Application answers are revised from the caller's ``current_answer``;
    resumes and cover letters use a fixed acknowledgement as the prior turn.
    """
    kind = parse_kind(kind)
    job = validate_job_info(job_info)
    _require("feedback", feedback)
    if kind is DocumentKind.APPLICATION_ANSWER:
        missing = [
            name
            for name, value in (("question", question), ("currentAnswer", current_answer))
            if is_blank(value)
        ]
        if missing:
            raise missing_fields_error(missing)

    system_prompt = _system_prompt(kind, store)
    messages = build_revision_messages(
        kind, job, feedback, question=question, current_answer=current_answer
    )
    client = llm or get_llm_client()
    logger.info("Revising %s for job type %s", kind.value, job.job_type)
    return client.complete(system_prompt, messages)
