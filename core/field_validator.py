"""
Field Validator Module
Pattern and example based validation of form field values and page content.

A validator is an immutable snapshot of training examples and the patterns
derived from them. Training or loading returns a new validator.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from core.text_similarity import levenshtein_similarity
from models.analysis import ValidationResult

logger = logging.getLogger(__name__)

MODEL_SUFFIX = ".model"

BUILTIN_PATTERNS = {
    'email': r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$",
    'phone': r"^\+?[0-9\s()-]{7,}$",
    'date': r"^\d{1,4}[/-]\d{1,2}[/-]\d{1,4}$",
    'name': r"^[a-zA-Z\s'-]{2,}$",
    'address': r"^[a-zA-Z0-9\s,.-]{5,}$",
    'zipcode': r"^\d{5}(-\d{4})?$",
}

ERROR_MARKERS = ("error", "invalid", "failed", "not found", "required")
SUCCESS_MARKERS = ("success", "completed", "saved", "updated", "created")

def _result(valid: bool, message: str, confidence: Optional[float] = None) -> ValidationResult:
    if confidence is None:
        confidence = 1.0 if valid else 0.0
    return ValidationResult(valid=valid, message=message, confidence=confidence)

def generate_pattern(field_type: str, examples: Iterable[str]) -> Optional["re.Pattern"]:
    """
    Build the validation pattern for a field type.

    Known field types use a fixed pattern. Other types accept word characters,
    whitespace and every character that occurs in all examples.
    """
    examples = list(examples)
    if not examples:
        return None

    if field_type in BUILTIN_PATTERNS:
        return re.compile(BUILTIN_PATTERNS[field_type], re.ASCII)

    common_chars = "".join(dict.fromkeys(
        char for char in "".join(examples)
        if all(char in example for example in examples)
    ))
    if common_chars:
        return re.compile(r"^[" + re.escape(common_chars) + r"\w\s]+$", re.ASCII)
    return re.compile(r"^.+$")

def _most_similar(value: str, examples: Iterable[str]) -> Tuple[str, float]:
    best_example, best_similarity = "", 0.0
    for example in examples:
        similarity = levenshtein_similarity(value, example)
        if similarity > best_similarity:
            best_example, best_similarity = example, similarity
    return best_example, best_similarity

class FieldValidator:
    def __init__(self, training_data: Dict[str, Iterable[str]] = None):
        self._training_data: Dict[str, Tuple[str, ...]] = {
            field_type: tuple(examples)
            for field_type, examples in (training_data or {}).items()
        }
        self._patterns = {}
        for field_type, examples in self._training_data.items():
            pattern = generate_pattern(field_type, examples)
            if pattern is not None:
                self._patterns[field_type] = pattern

    @property
    def field_types(self) -> List[str]:
        return sorted(self._training_data)

    def examples(self, field_type: str) -> Tuple[str, ...]:
        return self._training_data.get(field_type, ())

    def pattern(self, field_type: str) -> Optional[str]:
        pattern = self._patterns.get(field_type)
        return pattern.pattern if pattern else None

    @classmethod
    def load(cls, model_dir: Union[str, Path]) -> "FieldValidator":
        """Load training examples from <model_dir>/<field_type>.model files."""
        model_dir = Path(model_dir)
        training_data = {}
        if not model_dir.is_dir():
            logger.info(f"No model directory at {model_dir}, starting untrained")
            return cls()

        for model_file in sorted(model_dir.glob(f"*{MODEL_SUFFIX}")):
            field_type = model_file.name[:-len(MODEL_SUFFIX)]
            try:
                examples = model_file.read_text(encoding='utf-8').splitlines()
            except OSError as e:
                logger.error(f"Failed to load model for field type {field_type}: {e}")
                continue
            training_data[field_type] = examples
            logger.info(f"Loaded model for field type: {field_type} with {len(examples)} examples")

        return cls(training_data)

    def save(self, model_dir: Union[str, Path]) -> List[Path]:
        """Write one example per line to <model_dir>/<field_type>.model."""
        model_dir = Path(model_dir)
        model_dir.mkdir(parents=True, exist_ok=True)

        written = []
        for field_type, examples in self._training_data.items():
            model_file = model_dir / f"{field_type}{MODEL_SUFFIX}"
            model_file.write_text("".join(f"{example}\n" for example in examples), encoding='utf-8')
            written.append(model_file)
        logger.info(f"Saved {len(written)} models to {model_dir}")
        return written

    def train(self, field_type: str, examples: Iterable[str]) -> "FieldValidator":
        """Return a validator that also knows the given examples for field_type."""
        examples = list(examples or [])
        if not field_type or not examples:
            logger.warning(f"Invalid training data for field type: {field_type}")
            return self

        training_data = dict(self._training_data)
        training_data[field_type] = self.examples(field_type) + tuple(examples)
        logger.info(f"Trained model for field type: {field_type} with {len(training_data[field_type])} examples")
        return FieldValidator(training_data)

    def validate_field(self, field_type: str, value: Optional[str]) -> ValidationResult:
        """
        Validate a value against the field type's pattern and training examples.

        A close match to an example (> 0.8) is accepted regardless of the pattern,
        a distant one (< 0.3) rejects a pattern match.
        """
        if not field_type or value is None:
            return _result(False, "Invalid field type or value")

        pattern = self._patterns.get(field_type)
        if pattern is None:
            logger.warning(f"No pattern found for field type: {field_type}")
            return _result(False, f"No pattern found for field type: {field_type}")

        pattern_match = pattern.fullmatch(value) is not None
        matches = pattern_match

        examples = self.examples(field_type)
        if not examples:
            return _result(matches, f"Valid {field_type}" if matches else f"Invalid {field_type}")

        most_similar, similarity = _most_similar(value, examples)
        if similarity > 0.8:
            matches = True
        elif similarity < 0.3 and matches:
            matches = False

        logger.debug(f"Field validation: type={field_type}, value={value}, pattern_match={pattern_match}, "
                     f"similarity={similarity}, most_similar={most_similar}")
        return _result(matches, f"Valid {field_type}" if matches else f"Invalid {field_type}", similarity)

    def validate_element(self, element: Any, field_type: str) -> ValidationResult:
        """Validate the current value of a Playwright element handle."""
        if element is None:
            return _result(False, "Element is null")
        return self.validate_field(field_type, element.input_value())

    def validate_content(self, content: str, content_type: str) -> ValidationResult:
        if not content or not content_type:
            return _result(False, "Invalid content or content type")

        lowered = content.lower()
        kind = content_type.lower()

        if kind == "error_message":
            is_error = any(marker in lowered for marker in ERROR_MARKERS)
            return _result(is_error, "Valid error message" if is_error else "Not an error message")

        if kind == "success_message":
            is_success = any(marker in lowered for marker in SUCCESS_MARKERS)
            return _result(is_success, "Valid success message" if is_success else "Not a success message")

        if kind == "heading":
            is_heading = len(content) < 100 and not content.endswith((".", "!", "?"))
            return _result(is_heading, "Valid heading" if is_heading else "Not a heading")

        if kind == "paragraph":
            is_paragraph = len(content) > 50 and ". " in content
            return _result(is_paragraph, "Valid paragraph" if is_paragraph else "Not a paragraph")

        examples = self.examples(content_type)
        if examples:
            _, similarity = _most_similar(content, examples)
            is_valid = similarity > 0.6
            return _result(is_valid, f"Valid {content_type}" if is_valid else f"Invalid {content_type}", similarity)

        return _result(False, f"Unknown content type: {content_type}")
