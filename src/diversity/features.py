"""Feature extraction for diversity analysis."""

from collections.abc import Iterable, Sequence
from urllib.parse import urlsplit

from src.content.models import StoredContent, TopicCategory
from src.diversity.constants import (
    INTERNAL_SOURCE,
    NEUTRAL_PERSPECTIVE,
    SENTIMENT_PERSPECTIVES,
)
from src.diversity.models import ContentFeatures


DEFAULT_PERSPECTIVE_KEYWORDS: tuple[str, ...] = (
    "conservative",
    "liberal",
    "progressive",
)


def extract_source_domain(link_url: str | None) -> str:
    """Return the host of a link URL, or "internal" when absent or unparsable.

    Args:
        link_url: Link shared by the content.

    Returns:
        Lower-cased host name or the internal source label.
    """
    if not link_url:
        return INTERNAL_SOURCE
    try:
        host = urlsplit(link_url).hostname
    except ValueError:
        return INTERNAL_SOURCE
    return host or INTERNAL_SOURCE


class FeatureExtractor:
    """Converts stored content into flat ContentFeatures records.

    Extraction never fails; missing metadata falls back to raw tags,
    the OTHER category and the neutral perspective.
    """

    def __init__(self, perspective_keywords: Sequence[str] | None = None) -> None:
        """Initialize the extractor.

        Args:
            perspective_keywords: Topic keywords mapped to a perspective,
                checked in order.
        """
        keywords = (
            perspective_keywords
            if perspective_keywords is not None
            else DEFAULT_PERSPECTIVE_KEYWORDS
        )
        self._perspective_keywords = [k.lower() for k in keywords]

    def extract(self, content: StoredContent) -> ContentFeatures:
        """Extract features from one content item.

        Args:
            content: Content to describe.

        Returns:
            ContentFeatures for the item.
        """
        metadata = content.extracted_metadata
        if metadata is not None:
            topics = [t.name for t in metadata.topics]
            categories = [t.category for t in metadata.topics] or [TopicCategory.OTHER]
            sentiment = (
                metadata.sentiment.overall_sentiment.value
                if metadata.sentiment is not None
                else None
            )
            language = (
                metadata.language.detected_language
                if metadata.language is not None
                else content.language_code
            )
        else:
            topics = list(content.tags)
            categories = [TopicCategory.OTHER]
            sentiment = None
            language = content.language_code

        return ContentFeatures(
            content_id=content.id,
            author_id=content.author_id,
            topics=topics,
            topic_categories=categories,
            content_type=content.content_type.value.lower(),
            sentiment=sentiment.lower() if sentiment else None,
            language=language,
            source=extract_source_domain(content.link_url),
            perspective=self.infer_perspective(topics, sentiment),
            created_at=content.created_at,
            engagement_pattern=content.engagement_pattern,
        )

    def extract_all(self, items: Iterable[StoredContent]) -> list[ContentFeatures]:
        """Extract features from many items, preserving order."""
        return [self.extract(item) for item in items]

    def infer_perspective(self, topics: Sequence[str], sentiment: str | None) -> str:
        """Infer a perspective label.

        A topic containing a perspective keyword wins (keywords checked in
        order); otherwise sentiment decides; otherwise neutral.

        Args:
            topics: Topic names of the content.
            sentiment: Sentiment value, if known.

        Returns:
            Perspective label.
        """
        lowered = [topic.lower() for topic in topics]
        for keyword in self._perspective_keywords:
            if any(keyword in topic for topic in lowered):
                return keyword
        if sentiment:
            return SENTIMENT_PERSPECTIVES.get(sentiment.lower(), NEUTRAL_PERSPECTIVE)
        return NEUTRAL_PERSPECTIVE


def extract_features(
    items: Iterable[StoredContent],
    perspective_keywords: Sequence[str] | None = None,
) -> list[ContentFeatures]:
    """Pure function wrapper for feature extraction.

    Args:
        items: Content to describe.
        perspective_keywords: Optional override of the perspective keywords.

    Returns:
        One ContentFeatures per item, in input order.
    """
    return FeatureExtractor(perspective_keywords).extract_all(items)
