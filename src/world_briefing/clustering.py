"""Group near-duplicate articles and pick one representative per story.

Clustering is a greedy pairwise pass over titles: O(n^2) comparisons for the
n articles of one region (a few dozen in practice), so no index is needed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence, Set

from .models import Article, RawArticle

SIMILARITY_THRESHOLD = 0.5
MIN_TOKEN_LENGTH = 4

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


@dataclass
class Cluster:
    members: List[RawArticle]
    representative: Article

    @property
    def size(self) -> int:
        return len(self.members)


def title_tokens(title: str) -> Set[str]:
    """Lower-cased alphanumeric title words longer than three characters."""
    cleaned = _NON_ALNUM.sub("", title.lower())
    return {token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH}


def similarity(a: Set[str], b: Set[str]) -> float:
    """Shared tokens over the smaller token set (floored at 1)."""
    return len(a & b) / max(min(len(a), len(b)), 1)


def _rank(article: RawArticle) -> tuple:
    return (article.image is not None, len(article.snippet), article.published_at)


def pick_representative(members: Sequence[RawArticle]) -> RawArticle:
    """
    Prefer an image, then a longer snippet, then the newer timestamp.

    Only a strictly better candidate replaces the current best, so ties keep the
    earliest member.
    """
    best = members[0]
    for candidate in members[1:]:
        if _rank(candidate) > _rank(best):
            best = candidate
    return best


def _to_article(article: RawArticle) -> Article:
    if isinstance(article, Article):
        return article.model_copy()
    return Article(**article.model_dump())


def _annotate(members: List[RawArticle]) -> Article:
    chosen = pick_representative(members)
    representative = _to_article(chosen)
    if len(members) > 1:
        representative.covered_by = len(members)
        representative.other_sources = [
            m.source_name for m in members if m is not chosen
        ]
    return representative


def cluster_articles(articles: Sequence[RawArticle]) -> List[Cluster]:
    """Greedy clustering; clusters come back in first-seen order."""
    tokens = [title_tokens(a.title) for a in articles]
    clustered = [False] * len(articles)
    clusters: List[Cluster] = []

    for i, article in enumerate(articles):
        if clustered[i]:
            continue
        clustered[i] = True
        members: List[RawArticle] = [article]
        for j in range(i + 1, len(articles)):
            if clustered[j]:
                continue
            if similarity(tokens[i], tokens[j]) >= SIMILARITY_THRESHOLD:
                clustered[j] = True
                members.append(articles[j])
        clusters.append(Cluster(members=members, representative=_annotate(members)))

    return clusters


def deduplicate(articles: Sequence[RawArticle]) -> List[Article]:
    return [cluster.representative for cluster in cluster_articles(articles)]
