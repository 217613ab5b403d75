from __future__ import annotations

from enum import Enum
from typing import Dict


class DocumentKind(str, Enum):
    RESUME = "resume"
    COVER_LETTER = "cover-letter"
    APPLICATION_ANSWER = "application-answer"


PERSONAS: Dict[DocumentKind, str] = {
    DocumentKind.RESUME: (
        "You are an expert resume writer and career coach. You write concise, "
        "achievement-driven resumes that pass applicant tracking systems and read well "
        "to hiring managers. Use only the career data below; never invent employers, "
        "dates, metrics, credentials, or technologies."
    ),
    DocumentKind.COVER_LETTER: (
        "You are an expert cover letter writer. You write persuasive, specific cover "
        "letters that connect a candidate's real experience to the needs of one role. "
        "Use only the career data below; never invent employers, dates, metrics, "
        "credentials, or technologies."
    ),
    DocumentKind.APPLICATION_ANSWER: (
        "You are an expert at answering job application questions. You write honest, "
        "specific answers grounded in the candidate's real experience. Use only the "
        "career data below; never invent employers, dates, metrics, credentials, or "
        "technologies."
    ),
}

GUIDELINES: Dict[DocumentKind, str] = {
    DocumentKind.RESUME: """## Structure
1. Header: name and contact details from the profile.
2. Professional summary: 2-3 sentences aimed at the target role.
3. Experience: most relevant roles first within reverse-chronological order; 3-5 bullets each.
4. Skills: grouped, limited to skills relevant to the job.
5. Projects: only when they strengthen the application.
6. Education.

## Best practices
- Start every bullet with a strong action verb and quantify results with recorded metrics.
- Mirror important keywords from the job description where the career data supports them.
- Prefer featured experiences and projects when space is limited.
- Keep the resume to one page of content for under ten years of experience, two otherwise.

## Output format
Return the resume in clean Markdown with `#` for the name and `##` for section headings.
Return only the resume, with no commentary before or after it.""",
    DocumentKind.COVER_LETTER: """## Structure
1. Opening: name the role and give one compelling reason you fit it.
2. Body: two or three paragraphs, each tying a specific achievement to a job requirement.
3. Closing: restate interest, invite next steps, and thank the reader.

## Best practices
- Keep it between 250 and 400 words.
- Use the professional mission and value propositions to explain motivation.
- Reference the company's needs as stated in the job description; do not speculate beyond it.
- Write in a confident, warm, professional first-person voice. Avoid cliches.

## Output format
Return the letter as plain text paragraphs with a salutation and sign-off using the
candidate's name. Return only the letter, with no commentary before or after it.""",
    DocumentKind.APPLICATION_ANSWER: """## Structure
- Answer the question directly in the first sentence.
- Support the answer with one or two concrete examples from the career data.
- For behavioral questions, follow Situation, Task, Action, Result.

## Best practices
- Match the length to the question: 100-250 words unless the question asks otherwise.
- Tie the answer back to the role described in the job description.
- When a current answer is provided, keep its facts and improve clarity, specificity, and fit.

## Output format
Return only the answer text in first person, with no heading or commentary.""",
}


def build_system_prompt(kind: DocumentKind | str, context_text: str) -> str:
    """Compose the system instruction for one document kind.

    The result depends only on ``kind`` and ``context_text``, so repeated calls
    with the same career data produce a byte-identical, cacheable prompt.
    """
    kind = DocumentKind(kind)
    return (
        f"{PERSONAS[kind]}\n\n"
        "# Career Data\n\n"
        f"{context_text}\n\n"
        "# Guidelines\n\n"
        f"{GUIDELINES[kind]}"
    )
