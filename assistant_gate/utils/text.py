import re

from assistant_gate.domain.models import Fragment


_CITATION_RX = re.compile(r"\[.*?\]|【.*?】")
_DOUBLE_EMPHASIS_RX = re.compile(r"\*\*(.*?)\*\*")
_PARAGRAPH_RX = re.compile(r"\n\s*\n+")

TELEGRAM_MAX_CHARS = 4096


def normalize_reply(text: str) -> str:
    """Drop citation markers and turn **bold** into Telegram-style *bold*."""
    text = _CITATION_RX.sub("", text)
    return _DOUBLE_EMPHASIS_RX.sub(r"*\1*", text)


def split_paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_RX.split(text) if p.strip()]


def build_fragments(text: str) -> list[Fragment]:
    return [Fragment(body=p) for p in split_paragraphs(normalize_reply(text))]


def chunk_text(text: str, limit: int = TELEGRAM_MAX_CHARS) -> list[str]:
    if len(text) <= limit:
        return [text]

    chunks: list[str] = []
    rest = text
    while len(rest) > limit:
        cut = rest.rfind("\n", 0, limit)
        if cut <= 0:
            cut = rest.rfind(" ", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(rest[:cut].rstrip())
        rest = rest[cut:].lstrip()
    if rest:
        chunks.append(rest)
    return chunks


def format_hours(seconds: float) -> str:
    hours = seconds / 3600
    if hours == int(hours):
        return str(int(hours))
    return f"{hours:.1f}"
