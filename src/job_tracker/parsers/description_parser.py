import re
from pathlib import Path

DEFAULT_TITLE = "Software Engineer"
DEFAULT_COMPANY = "Company"

_TITLE_PREFIX = re.compile(r"^(position:|role:|job title:)\s*", re.IGNORECASE)
_COMPANY_PREFIX = re.compile(r"^(company:|organization:|at )\s*", re.IGNORECASE)
_LOCATION_PREFIX = re.compile(r"^location:\s*", re.IGNORECASE)
_CITY_REGION = re.compile(r"\b\w+,\s*\w+\b")


def normalize_description(text: str) -> str:
    """Clean and normalize pasted job description text."""
    # Remove excessive whitespace
    text = re.sub(r'\n{3,}', '\n\n', text)
    text = re.sub(r'[ \t]+', ' ', text)
    # Strip leading/trailing whitespace per line
    lines = [line.strip() for line in text.splitlines()]
    return '\n'.join(lines).strip()


def load_description_file(file_path: str) -> str:
    """Load a job description from a text file."""
    return normalize_description(Path(file_path).read_text(encoding="utf-8"))


def guess_job_header(description: str) -> tuple[str, str, str | None]:
    """Guess (title, company, location) from the top of a job description.

    Only the first five non-empty lines are considered. The first short line
    is taken as the title and the second short line as the company unless a
    labelled line ("Role:", "Company:") says otherwise.
    """
    lines = [line.strip() for line in description.splitlines() if line.strip()]
    title = ""
    company = ""
    location = ""

    for i, line in enumerate(lines[:5]):
        lower = line.lower()

        if not title and (
            lower.startswith(("position:", "role:", "job title:"))
            or "we are looking for" in lower
            or "we are seeking" in lower
            or (i == 0 and len(line) < 100 and "company" not in lower)
        ):
            title = _TITLE_PREFIX.sub("", line).strip()
            continue

        if not company and (
            lower.startswith(("company:", "organization:", "at "))
            or (i == 1 and len(line) < 50 and "location" not in lower)
        ):
            company = _COMPANY_PREFIX.sub("", line).strip()
            continue

        if not location and (
            lower.startswith("location:")
            or "based in" in lower
            or "remote" in lower
            or _CITY_REGION.search(line)
        ):
            location = _LOCATION_PREFIX.sub("", line).strip()

    # Fallbacks when no pattern matched
    if not title and lines:
        title = lines[0] if len(lines[0]) < 100 else DEFAULT_TITLE
    if not company and len(lines) > 1:
        company = lines[1] if len(lines[1]) < 50 else DEFAULT_COMPANY

    return title or DEFAULT_TITLE, company or DEFAULT_COMPANY, location or None
