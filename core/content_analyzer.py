import logging
from itertools import combinations
from typing import Any, Iterable, List

from core.text_similarity import relevance, term_frequency, tokenize, cosine_similarity
from models.analysis import (
    ConsistencyResult, PageAnalysisResult, RelevanceResult, SentimentResult, SentimentType
)

logger = logging.getLogger(__name__)

POSITIVE_WORDS = frozenset([
    "good", "great", "excellent", "amazing", "awesome", "nice", "wonderful",
    "fantastic", "terrific", "outstanding", "superb", "brilliant", "perfect",
    "success", "successful", "completed", "approved", "confirmed", "valid",
    "correct", "right", "yes", "ok", "okay", "saved", "created", "added",
    "updated", "modified", "deleted", "removed", "welcome", "congratulations"
])

NEGATIVE_WORDS = frozenset([
    "bad", "poor", "terrible", "awful", "horrible", "wrong", "error",
    "fail", "failed", "failure", "invalid", "incorrect", "not", "no",
    "denied", "rejected", "unauthorized", "forbidden", "missing", "required",
    "empty", "blank", "null", "undefined", "exception", "warning",
    "alert", "danger", "critical", "severe", "fatal", "sorry"
])

HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"

def _preview(content: str, limit: int = 50) -> str:
    return content[:limit] + "..." if len(content) > limit else content

def _element_texts(elements: Iterable[Any]) -> List[str]:
    texts = []
    for element in elements:
        text = element.inner_text()
        if text:
            texts.append(text)
    return texts

class ContentAnalyzer:
    """Keyword sentiment, topic relevance and cross-element consistency of page text"""

    def __init__(self, positive_words: Iterable[str] = POSITIVE_WORDS,
                 negative_words: Iterable[str] = NEGATIVE_WORDS):
        self.positive_words = frozenset(positive_words)
        self.negative_words = frozenset(negative_words)

    def analyze_sentiment(self, content: str) -> SentimentResult:
        """Score = (positive - negative) / tokens; above 0.1 positive, below -0.1 negative."""
        if not content:
            return SentimentResult(type=SentimentType.NEUTRAL, score=0.0, explanation="Empty content")

        tokens = tokenize(content)
        positive_count = 0
        negative_count = 0
        for token in tokens:
            if token in self.positive_words:
                positive_count += 1
            elif token in self.negative_words:
                negative_count += 1

        score = (positive_count - negative_count) / len(tokens) if tokens else 0.0

        if score > 0.1:
            sentiment_type = SentimentType.POSITIVE
        elif score < -0.1:
            sentiment_type = SentimentType.NEGATIVE
        else:
            sentiment_type = SentimentType.NEUTRAL
        explanation = f"{sentiment_type.value.capitalize()} sentiment detected with score {score:.2f}"

        logger.debug(f"Sentiment analysis: content='{_preview(content)}', score={score}, type={sentiment_type.value}")
        return SentimentResult(type=sentiment_type, score=score, explanation=explanation)

    def analyze_relevance(self, content: str, topic: str) -> RelevanceResult:
        if not content or not topic:
            return RelevanceResult(score=0.0, explanation="Empty content or topic")

        similarity = relevance(content, topic)

        if similarity > 0.7:
            explanation = f"High relevance to topic '{topic}'"
        elif similarity > 0.4:
            explanation = f"Moderate relevance to topic '{topic}'"
        else:
            explanation = f"Low relevance to topic '{topic}'"

        logger.debug(f"Relevance analysis: content='{_preview(content)}', topic='{topic}', similarity={similarity}")
        return RelevanceResult(score=similarity, explanation=explanation)

    def analyze_consistency(self, texts: List[str]) -> ConsistencyResult:
        """Average pairwise cosine similarity of the given texts (stop words kept)."""
        if not texts:
            return ConsistencyResult(score=0.0, explanation="No elements provided")

        texts = [text for text in texts if text]
        if not texts:
            return ConsistencyResult(score=0.0, explanation="No text found in elements")

        frequencies = [term_frequency(tokenize(text)) for text in texts]
        similarities = [cosine_similarity(tf1, tf2) for tf1, tf2 in combinations(frequencies, 2)]
        average = sum(similarities) / len(similarities) if similarities else 0.0

        if average > 0.8:
            explanation = "High consistency across elements"
        elif average > 0.5:
            explanation = "Moderate consistency across elements"
        else:
            explanation = "Low consistency across elements"

        logger.debug(f"Consistency analysis: elements={len(texts)}, average_similarity={average}")
        return ConsistencyResult(score=average, explanation=explanation)

    def analyze_element_consistency(self, elements: List[Any]) -> ConsistencyResult:
        if not elements:
            return ConsistencyResult(score=0.0, explanation="No elements provided")
        return self.analyze_consistency(_element_texts(elements))

    def analyze_page(self, page: Any, topic: str) -> PageAnalysisResult:
        """
        Analyze the visible text of a page against a topic.

        Headings are counted twice so they weigh more than body text.

        Args:
            page: Playwright Page
            topic: Topic the page is expected to be about

        Returns:
            PageAnalysisResult with overall and per element group relevance
        """
        if page is None or not topic:
            return PageAnalysisResult(score=0.0, explanation="Invalid page or topic")

        try:
            headings = _element_texts(page.query_selector_all(HEADING_SELECTOR))
            paragraphs = _element_texts(page.query_selector_all("p"))
            links = _element_texts(page.query_selector_all("a"))

            parts = [page.title()]
            for heading in headings:
                parts.extend([heading, heading])
            parts.extend(paragraphs)
            parts.extend(links)
            all_text = " ".join(parts)

            page_relevance = self.analyze_relevance(all_text, topic)
            sentiment = self.analyze_sentiment(all_text)

            element_analysis = {}
            if headings:
                element_analysis['headings'] = self.analyze_relevance(" ".join(headings), topic)
            if paragraphs:
                element_analysis['paragraphs'] = self.analyze_relevance(" ".join(paragraphs), topic)

            logger.info(f"Page analysis: url='{page.url}', topic='{topic}', "
                        f"relevance={page_relevance.score}, sentiment={sentiment.type.value}")

            return PageAnalysisResult(
                score=page_relevance.score,
                explanation=f"Page analysis for topic '{topic}'",
                relevance=page_relevance,
                sentiment=sentiment,
                element_analysis=element_analysis
            )
        except Exception as e:
            logger.error(f"Failed to analyze page: {e}")
            return PageAnalysisResult(score=0.0, explanation=f"Error analyzing page: {e}")
