from pydantic import BaseModel, Field
from typing import Dict, Optional
from enum import Enum

class SentimentType(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

class SentimentResult(BaseModel):
    type: SentimentType = Field(..., description="Detected sentiment")
    score: float = Field(..., ge=-1.0, le=1.0, description="(positive - negative) / token count")
    explanation: str = Field(..., description="Human readable explanation")

class RelevanceResult(BaseModel):
    score: float = Field(..., ge=0.0, le=1.0, description="Cosine similarity to the topic")
    explanation: str = Field(..., description="Human readable explanation")

class ConsistencyResult(BaseModel):
    score: float = Field(..., ge=0.0, le=1.0, description="Average pairwise similarity")
    explanation: str = Field(..., description="Human readable explanation")

class PageAnalysisResult(BaseModel):
    score: float = Field(..., description="Overall relevance score of the page")
    explanation: str = Field(..., description="Human readable explanation")
    relevance: Optional[RelevanceResult] = Field(None, description="Relevance of the whole page text")
    sentiment: Optional[SentimentResult] = Field(None, description="Sentiment of the whole page text")
    element_analysis: Dict[str, RelevanceResult] = Field(default_factory=dict, description="Relevance per element group")

class ValidationResult(BaseModel):
    valid: bool = Field(..., description="Whether the value is valid")
    message: str = Field(..., description="Validation message")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in the verdict")
