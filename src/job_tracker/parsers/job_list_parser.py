"""Parse freeform, copy-pasted job application lists into structured records.

A typical paste from a notes app looks like::

    Job Applications
    15 Jan
    - Anthropic
    - Headway - Sr. Software Engineer (Remote)
    - Notion ❌
    Reached out to Jane on LinkedIn
    16 January
    1. Google (Seattle)

Date headers set the application date for the lines below them, separator and
action lines are skipped, and every other line goes through an ordered chain
of matchers (``dash`` -> ``parenthetical`` -> ``whole_line``). Lines that
yield no company become human-readable warnings instead of exceptions.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from job_tracker.models.job import (
    DEFAULT_TITLE,
    JobListParseResult,
    JobStatus,
    ParsedJob,
)

logger = logging.getLogger(__name__)

MONTHS: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

DATE_HEADER = re.compile(
    r"^(\d{1,2})\s+(" + "|".join(sorted(MONTHS, key=len, reverse=True)) + r")$",
    re.IGNORECASE,
)

NOISE_PATTERNS = [
    re.compile(r"^job applications?$", re.IGNORECASE),
    re.compile(r"^applications?$", re.IGNORECASE),
    re.compile(r"^-+$"),
    re.compile(r"^=+$"),
    re.compile(r"^[-•*\s]+$"),
    re.compile(
        r"^[-•*]?\s*(contacted|reached out|messaged|applied|updated|reuploaded)\b",
        re.IGNORECASE,
    ),
    re.compile(r"^[-•*]?\s*reached out to .+(on|via) linkedin", re.IGNORECASE),
]

LOCATION_KEYWORDS = (
    "remote",
    "vancouver",
    "seattle",
    "san francisco",
    "bay area",
    "toronto",
    "montreal",
    "calgary",
    "new york",
    "nyc",
    "austin",
    "boston",
    "los angeles",
    "london",
    "berlin",
    "canada",
    "usa",
)
_LOCATION_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(k) for k in LOCATION_KEYWORDS) + r")\b",
    re.IGNORECASE,
)

REJECTED_MARK = "❌"

_BULLET = re.compile(r"^[-•*]\s*")
_NUMBERED = re.compile(r"^\d+\.\s*")
_DASH_SPLIT = re.compile(r"^(.+?)\s+[-–—]\s+(.+)$")
_TRAILING_PAREN = re.compile(r"^(.*?)\s*\(([^)]+)\)$")
_PAREN_SPLIT = re.compile(r"^([^(]+)(\([^)]*\))?(.*)$")
_PAREN_REMNANT = re.compile(r"\s*\([^)]*\).*$")
_CONTACT_SUFFIX = re.compile(r"\s*\b(contacted|reached out|messaged)\b.*$", re.IGNORECASE)


@dataclass
class EntryMatch:
    """Raw fields pulled out of a job line, before cleanup."""

    company: str
    title: str = ""
    location: str = ""
    notes: str = ""
    pattern: str = "whole_line"


@dataclass
class ParseState:
    """Accumulator carried from line to line."""

    now: datetime
    year: int
    default_title: str = DEFAULT_TITLE
    current_date: datetime | None = None
    jobs: list[ParsedJob] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


# --- Line classification -----------------------------------------------------


def match_date_header(line: str) -> tuple[int, int] | None:
    """Return (day, month) for lines like "15 Jan" or "16 January"."""
    match = DATE_HEADER.match(line)
    if not match:
        return None
    return int(match.group(1)), MONTHS[match.group(2).lower()]


def is_noise_line(line: str) -> bool:
    """Separators, section titles and notes about an already-listed job."""
    return any(pattern.search(line) for pattern in NOISE_PATTERNS)


def is_location(text: str) -> bool:
    return bool(_LOCATION_PATTERN.search(text))


# --- Entry matchers ------------------------------------------------------------


def match_dash(line: str) -> EntryMatch | None:
    """``Company - Title`` or ``Company - Title (Location)``."""
    match = _DASH_SPLIT.match(line)
    if not match:
        return None
    company, remainder = match.group(1).strip(), match.group(2).strip()
    paren = _TRAILING_PAREN.match(remainder)
    if paren:
        return EntryMatch(
            company=company,
            title=paren.group(1).strip(),
            location=paren.group(2).strip(),
            pattern="dash",
        )
    return EntryMatch(company=company, title=remainder, pattern="dash")


def match_parenthetical(line: str) -> EntryMatch | None:
    """``Company``, ``Company (Seattle)`` or ``Company (referral) trailing text``."""
    match = _PAREN_SPLIT.match(line)
    if not match:
        return None
    entry = EntryMatch(company=match.group(1).strip(), pattern="parenthetical")

    parenthetical = match.group(2)
    if parenthetical:
        content = parenthetical.strip("()").strip()
        if is_location(content):
            entry.location = content
        else:
            entry.notes = content

    remainder = drop_unmatched_parens(match.group(3) or "")
    if remainder:
        entry.notes = f"{entry.notes}. {remainder}" if entry.notes else remainder
    return entry


def match_whole_line(line: str) -> EntryMatch:
    return EntryMatch(company=line, pattern="whole_line")


MATCHERS: tuple[Callable[[str], EntryMatch | None], ...] = (
    match_dash,
    match_parenthetical,
    match_whole_line,
)


# --- Field cleanup -------------------------------------------------------------


def clean_company(company: str) -> str:
    # Very short names ("3M", "HP") are trusted as-is
    if len(company) <= 2:
        return company.strip()
    company = _PAREN_REMNANT.sub("", company)
    return _CONTACT_SUFFIX.sub("", company).strip()


def clean_title(title: str) -> str:
    if not title:
        return ""
    title = _PAREN_REMNANT.sub("", title)
    return _CONTACT_SUFFIX.sub("", title).strip()


def clean_location(location: str) -> str:
    if not location:
        return ""
    return _CONTACT_SUFFIX.sub("", location).strip()


def drop_unmatched_parens(text: str) -> str:
    """Remove parentheses that have no partner, e.g. the ``(`` in ``Acme (``."""
    chars = list(text)
    open_positions: list[int] = []
    for i, char in enumerate(chars):
        if char == "(":
            open_positions.append(i)
        elif char == ")":
            if open_positions:
                open_positions.pop()
            else:
                chars[i] = ""
    for i in open_positions:
        chars[i] = ""
    return "".join(chars).strip()


def strip_prefixes(line: str) -> str:
    """Remove a leading bullet and/or ``N.`` numbering."""
    line = _BULLET.sub("", line.strip())
    return _NUMBERED.sub("", line).strip()


# --- Entry and list parsing ------------------------------------------------------


def parse_job_entry(
    line: str,
    application_date: datetime,
    default_title: str = DEFAULT_TITLE,
) -> ParsedJob | None:
    """Parse one job line; None when no company can be recovered."""
    rejected = REJECTED_MARK in line
    text = strip_prefixes(line.replace(REJECTED_MARK, "").replace("\ufe0f", ""))
    if not text:
        return None

    entry = None
    for matcher in MATCHERS:
        entry = matcher(text)
        if entry is not None:
            break

    company = clean_company(entry.company)
    if not company:
        return None

    return ParsedJob(
        company=company,
        title=clean_title(entry.title) or default_title,
        application_date=application_date,
        status=JobStatus.REJECTED if rejected else JobStatus.APPLIED,
        location=clean_location(entry.location) or None,
        notes=entry.notes.strip() or None,
        pattern=entry.pattern,
    )


def scan_line(state: ParseState, line_number: int, raw_line: str) -> ParseState:
    """Fold one source line into the parse state."""
    line = raw_line.strip()
    if not line:
        return state

    header = match_date_header(line)
    if header is not None:
        day, month = header
        try:
            state.current_date = datetime(state.year, month, day)
        except ValueError:
            # "31 Feb" is still a header; the previous date stays in effect
            logger.debug("Ignoring impossible date header on line %d: %s", line_number, line)
        return state

    if is_noise_line(line):
        return state

    job = parse_job_entry(line, state.current_date or state.now, state.default_title)
    if job is None:
        state.errors.append(f'Line {line_number}: Could not parse "{line}"')
    else:
        state.jobs.append(job)
    return state


def parse_job_list(
    text: str,
    *,
    year: int | None = None,
    now: datetime | None = None,
    default_title: str = DEFAULT_TITLE,
) -> JobListParseResult:
    """Parse a pasted job list into jobs plus per-line warnings.

    Args:
        text: Freeform, newline-delimited text.
        year: Year applied to "15 Jan"-style headers. Defaults to the year of ``now``.
        now: Date used for jobs listed before any header. Defaults to the current time.
        default_title: Title used when a line names only the company.

    Returns:
        JobListParseResult with jobs in source order and warnings in
        encounter order. Never raises for malformed lines.
    """
    now = now or datetime.now()
    state = ParseState(now=now, year=year or now.year, default_title=default_title)
    for line_number, line in enumerate((text or "").split("\n"), start=1):
        state = scan_line(state, line_number, line)

    logger.debug("Parsed %d jobs with %d warnings", len(state.jobs), len(state.errors))
    return JobListParseResult(jobs=state.jobs, errors=state.errors)
