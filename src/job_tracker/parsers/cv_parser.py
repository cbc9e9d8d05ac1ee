import re
from pathlib import Path

_BULLETS = r"[●•◦◆■▪★○]"


def load_cv(file_path: str | Path) -> str:
    """Load a CV file (PDF, DOCX, TXT, MD) and return clean plain text."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return clean_cv_text(_read_pdf(path))
    elif suffix in (".docx", ".doc"):
        return clean_cv_text(_read_docx(path))
    elif suffix in (".txt", ".md"):
        return clean_cv_text(path.read_text(encoding="utf-8"))
    else:
        raise ValueError(f"Unsupported file format: {path.suffix}")


def clean_cv_text(text: str) -> str:
    """Normalize CV text before it is used as prompt context.

    Removes BOM and zero-width characters, turns decorative bullets into
    "- ", collapses runs of spaces and squeezes blank lines.
    """
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)
    text = re.sub(rf"^(\s*){_BULLETS}\s*", r"\1- ", text, flags=re.MULTILINE)

    lines = [re.sub(r"[ \t]{2,}", " ", line).rstrip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _read_pdf(path: Path) -> str:
    import fitz  # pymupdf

    doc = fitz.open(str(path))
    pages = [page.get_text() for page in doc]
    doc.close()
    return "\n".join(pages)


def _read_docx(path: Path) -> str:
    from docx import Document

    doc = Document(str(path))
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
