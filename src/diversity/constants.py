"""Constants for the diversity module."""

# Score used when there is not enough data for a confident judgment
NEUTRAL_SCORE: float = 0.5

# Source label for content without a parsable link
INTERNAL_SOURCE: str = "internal"

# Topic label for history items that carry no topics
UNKNOWN_TOPIC: str = "unknown"

# Perspective labels inferred from sentiment
NEUTRAL_PERSPECTIVE: str = "neutral"
CRITICAL_PERSPECTIVE: str = "critical"
SUPPORTIVE_PERSPECTIVE: str = "supportive"

# Sentiment values mapped to perspectives
SENTIMENT_PERSPECTIVES: dict[str, str] = {
    "negative": CRITICAL_PERSPECTIVE,
    "positive": SUPPORTIVE_PERSPECTIVE,
}
