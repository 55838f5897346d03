"""Free-text search over catalog records.

Ranking: full-query substring match first, then the share of query tokens
found in the record, with rapidfuzz's token_set_ratio breaking ties.
Accents and case are ignored; a query token matches any record token it
is a prefix of ("ing" matches "Ingeniería").
"""

import re
import unicodedata
from typing import Iterable, List, Protocol, Set, Tuple, TypeVar

from rapidfuzz import fuzz


class Searchable(Protocol):
    def search_text(self) -> str: ...


T = TypeVar("T", bound=Searchable)

_TOKEN = re.compile(r"[a-z0-9]+")


def normalize_text(text: str) -> str:
    """Lowercase and strip accents."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


def tokenize(text: str) -> Set[str]:
    return set(_TOKEN.findall(normalize_text(text)))


def score_record(query: str, text: str) -> float:
    """Relevance of a record text for a query; 0 means no match."""
    norm_query = normalize_text(query).strip()
    norm_text = normalize_text(text)
    if not norm_query:
        return 0.0

    query_tokens = tokenize(norm_query)
    text_tokens = tokenize(norm_text)
    matched = {
        q for q in query_tokens
        if any(t.startswith(q) for t in text_tokens)
    }
    substring = norm_query in norm_text
    if not substring and not matched:
        return 0.0

    overlap = len(matched) / len(query_tokens) if query_tokens else 0.0
    fuzzy = fuzz.token_set_ratio(norm_query, norm_text) / 100
    return (2.0 if substring else 0.0) + overlap + fuzzy * 0.1


def search_records(query: str, records: Iterable[T], limit: int = 20) -> List[T]:
    """Rank records against a query.

    Args:
        query: Free text.
        records: Records exposing search_text().
        limit: Maximum results.

    Returns:
        Matching records, best first. Empty query returns nothing.
    """
    if not (query or "").strip():
        return []

    scored: List[Tuple[float, int, T]] = []
    for position, record in enumerate(records):
        score = score_record(query, record.search_text())
        if score > 0:
            scored.append((score, position, record))

    scored.sort(key=lambda item: (-item[0], item[1]))
    return [record for _, _, record in scored[:limit]]
