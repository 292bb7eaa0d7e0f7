import re

from rapidfuzz.distance import JaroWinkler

from .normalize import clean

CORPORATE_PATTERN = re.compile(r"LLC|CORP|INC|L\.P\.|TRUST|REALTY")
ORG_PATTERN = re.compile(r"LLC|CORP|INC")

_ENTITY_SUFFIXES = re.compile(
    r"\b(LLC|L\.L\.C|INC|CORP|CORPORATION|CO|LP|L\.P|LTD|COMPANY|THE)\b\.?"
)


def looks_corporate(name: str | None) -> bool:
    return bool(CORPORATE_PATTERN.search(clean(name).upper()))


def normalize_entity(name: str | None) -> str:
    s = clean(name).upper()
    s = _ENTITY_SUFFIXES.sub(" ", s)
    s = re.sub(r"[^A-Z0-9 ]", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def org_result_relevant(query_name: str, result_name: str) -> bool:
    """Whether an organization search hit is plausibly the queried company."""
    q = normalize_entity(query_name)
    r = normalize_entity(result_name)
    if not q or not r:
        return False

    if JaroWinkler.similarity(q, r) >= 0.75:
        return True

    query_words = {w for w in q.split(" ") if len(w) > 2}
    result_words = {w for w in r.split(" ") if len(w) > 2}
    if not query_words:
        return False
    overlap = len(query_words & result_words) / len(query_words)
    if overlap >= 0.5:
        return True

    return q in r or r in q
