"""Demo-mode obfuscation: hide real company names and descriptions."""

from __future__ import annotations

import zlib

from job_tracker.models.job import Job

FAKE_COMPANIES = [
    "TechCorp Solutions",
    "InnovateTech Inc",
    "Digital Dynamics",
    "CloudVision Systems",
    "NextGen Software",
    "DataFlow Technologies",
    "CyberCore Industries",
    "SmartTech Ventures",
    "FutureSoft Corporation",
    "ByteStream Solutions",
    "NeuralNet Systems",
    "QuantumCode Labs",
    "AlgoTech Partners",
    "DevStream Inc",
    "CloudScale Solutions",
    "TechFusion Corp",
    "CodeCraft Industries",
    "DataMind Technologies",
    "SoftwarePlus LLC",
    "InnoCore Systems",
]

LOREM_WORDS = (
    "lorem ipsum dolor sit amet consectetur adipiscing elit sed do eiusmod tempor "
    "incididunt ut labore et dolore magna aliqua enim ad minim veniam quis nostrud "
    "exercitation ullamco laboris nisi aliquip ex ea commodo consequat duis aute irure "
    "in reprehenderit voluptate velit esse cillum fugiat nulla pariatur excepteur sint "
    "occaecat cupidatat non proident sunt culpa qui officia deserunt mollit anim id est laborum"
).split()


def fake_company(job_id: str) -> str:
    """Same job id always maps to the same fake company."""
    return FAKE_COMPANIES[zlib.crc32(job_id.encode("utf-8")) % len(FAKE_COMPANIES)]


def lorem_ipsum(target_length: int) -> str:
    """Lorem ipsum text of roughly ``target_length`` characters."""
    if target_length <= 0:
        return ""
    words: list[str] = []
    length = 0
    while length < target_length:
        word = LOREM_WORDS[len(words) % len(LOREM_WORDS)]
        words.append(word)
        length += len(word) + 1
    text = " ".join(words)
    return text[0].upper() + text[1:] + "."


def obfuscate_job(job: Job) -> Job:
    return job.model_copy(update={
        "company": fake_company(job.id),
        "description": lorem_ipsum(len(job.description)) if job.description else job.description,
    })


def obfuscate_jobs(jobs: list[Job]) -> list[Job]:
    return [obfuscate_job(job) for job in jobs]
