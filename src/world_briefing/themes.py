"""Partition articles into keyword-labelled themes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Set

from .keywords import Keyword, article_text
from .models import Article

OTHER_HEADLINES = "Other Headlines"
MAX_THEME_ARTICLES = 4
MAX_OTHER_ARTICLES = 5
MIN_THEME_MATCHES = 2


@dataclass
class Theme:
    label: str
    articles: List[Article] = field(default_factory=list)


def theme_label(term: str) -> str:
    return term[:1].upper() + term[1:]


def group_by_theme(articles: Sequence[Article], keywords: Sequence[Keyword]) -> List[Theme]:
    """
    Walk keywords in rank order and give each one a theme of up to four unused
    articles mentioning it. A keyword with fewer than two unused matches opens no
    theme. Leftovers (first five, original order) become "Other Headlines".
    """
    texts = [article_text(a) for a in articles]
    used: Set[int] = set()
    themes: List[Theme] = []

    for keyword in keywords:
        matching = [
            i for i, text in enumerate(texts) if i not in used and keyword.term in text
        ]
        if len(matching) < MIN_THEME_MATCHES:
            continue
        taken = matching[:MAX_THEME_ARTICLES]
        used.update(taken)
        themes.append(Theme(label=theme_label(keyword.term), articles=[articles[i] for i in taken]))

    remaining = [a for i, a in enumerate(articles) if i not in used][:MAX_OTHER_ARTICLES]
    if remaining:
        themes.append(Theme(label=OTHER_HEADLINES, articles=remaining))
    return themes
