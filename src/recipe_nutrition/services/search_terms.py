"""Query cleaning for FoodData Central searches."""

import re

MAX_QUERY_LENGTH = 200
MAX_VARIANTS = 10

_SYMBOLS = re.compile(r"[™®©]")
_BRACKETED = re.compile(r"\([^)]*\)|\[[^\]]*\]|\{[^}]*\}")
_QUOTES = re.compile(r"[\"“”'‘’]")
_NOISE = re.compile(r"[+*#@!?\u00b0%,\u2014\u2013/]")
_PERIOD = re.compile(r"\.(?!\d)")
_DESCRIPTORS = re.compile(
    r"\b(fresh|raw|cooked|dried|frozen|canned|chopped|diced|minced|sliced"
    r"|shredded|grated|julienned|peeled|organic|free-range|grass-fed"
    r"|wild-caught|extra|virgin|pure|natural|whole|part-skim|low-fat|non-fat"
    r"|reduced-fat|unsalted|salted|sweetened|unsweetened)\b"
)

SUBSTITUTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\bboneless\s+skinless\s+chicken\b"), "chicken breast"),
    (re.compile(r"\bground\s+beef\b"), "beef ground"),
    (re.compile(r"\bextra\s+virgin\s+olive\s+oil\b"), "olive oil"),
    (re.compile(r"\bheavy\s+cream\b"), "cream"),
    (re.compile(r"\bsour\s+cream\b"), "cream sour"),
    (re.compile(r"\ball\s+purpose\s+flour\b"), "flour wheat"),
    (re.compile(r"\bbrown\s+sugar\b"), "sugar brown"),
    (re.compile(r"\bwhite\s+sugar\b"), "sugar"),
)


def clean_search_term(ingredient: str) -> str:
    """Strip descriptors, symbols and bracketed notes from an ingredient name."""
    lowered = ingredient.lower().strip()
    cleaned = _SYMBOLS.sub("", lowered)
    cleaned = _BRACKETED.sub("", cleaned)
    cleaned = re.sub(r"\s*&\s*", " and ", cleaned)
    cleaned = _QUOTES.sub("", cleaned)
    cleaned = _NOISE.sub(" ", cleaned)
    cleaned = _PERIOD.sub(" ", cleaned)
    cleaned = _DESCRIPTORS.sub("", cleaned)
    cleaned = re.sub(r"-+", "-", " ".join(cleaned.split()))
    result = cleaned.strip(" -") or lowered
    return result[:MAX_QUERY_LENGTH].strip()


def search_variants(ingredient: str) -> list[str]:
    """Progressively simpler queries to try in order, most specific first."""
    original = " ".join(ingredient.lower().split())
    if not original:
        return []

    variants: list[str] = []

    def add(candidate: str) -> None:
        candidate = candidate.strip()
        if candidate and candidate not in variants:
            variants.append(candidate)

    cleaned = clean_search_term(ingredient)
    minimal = " ".join(_QUOTES.sub("", _SYMBOLS.sub("", original)).split())
    add(cleaned)
    add(minimal)
    add(clean_search_term(re.split(r"[,;]", original)[0]))

    words = cleaned.split()
    if len(words) >= 2:
        add(" ".join(words[-2:]))
    if len(words) >= 3:
        add(" ".join(words[-3:]))
    if len(words) >= 2 and len(words[-1]) > 2:
        add(words[-1])

    for variant in variants[:3]:
        if variant.endswith("s"):
            if len(variant) > 3:
                add(variant[:-1])
        else:
            add(variant + "s")

    for pattern, replacement in SUBSTITUTIONS:
        for source in (minimal, cleaned):
            substituted = pattern.sub(replacement, source)
            if substituted != source:
                add(clean_search_term(substituted))

    return variants[:MAX_VARIANTS]
