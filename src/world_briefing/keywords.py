"""Salient-term extraction across an article set."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Sequence

from .models import RawArticle

WORD_PATTERN = re.compile(r"[a-z]{3,}")

# Filler words ignored when counting terms.
STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by
    is are was were be been has had have do does did
    will would could should may might shall can this that
    it its from as not no so if than then more also
    into over after before about up out new says said he
    she they their his her who what when where how why
    all being some any each which us we our you
    """.split()
)

MAX_KEYWORDS = 8
MIN_FREQUENCY = 2


@dataclass(frozen=True)
class Keyword:
    term: str
    frequency: int


def article_text(article: RawArticle) -> str:
    return f"{article.title} {article.snippet}".lower()


def extract_keywords(
    articles: Sequence[RawArticle],
    limit: int = MAX_KEYWORDS,
    min_frequency: int = MIN_FREQUENCY,
) -> List[Keyword]:
    """
    Count each non-stop-word term once per article and keep the most common.

    Terms below `min_frequency` articles are dropped; ties keep the order in
    which terms were first seen.
    """
    freq: Dict[str, int] = {}
    for article in articles:
        seen = set()
        for word in WORD_PATTERN.findall(article_text(article)):
            if word in STOP_WORDS or word in seen:
                continue
            seen.add(word)
            freq[word] = freq.get(word, 0) + 1

    ranked = sorted(
        (item for item in freq.items() if item[1] >= min_frequency),
        key=lambda item: item[1],
        reverse=True,
    )
    return [Keyword(term=term, frequency=count) for term, count in ranked[:limit]]
