"""
Question Supplier for the Trivia World session coordinator

Wraps the external trivia content provider, plus an offline YAML question bank
for development, behind one fallible fetch contract.
"""

import json
import logging
import random
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import yaml

from trivia_server.models import Question

logger = logging.getLogger(__name__)


class QuestionFetchError(Exception):
    """Raised when a batch of questions could not be obtained."""
    pass


class ContentValidationError(Exception):
    """Raised when question content is structurally invalid."""
    pass


def parse_question(item: Any, position: int) -> Question:
    """
    Build a Question from a provider record.

    Accepts both the trivia API shape (``question: {text}``, ``correctAnswer``,
    ``incorrectAnswers``) and the flat YAML shape (``question``,
    ``correct_answer``, ``incorrect_answers``).

    Raises:
        ContentValidationError: If required fields are missing or malformed
    """
    if not isinstance(item, dict):
        raise ContentValidationError(f"Question {position} must be a dictionary")

    prompt = item.get('question')
    if isinstance(prompt, dict):
        prompt = prompt.get('text')
    correct = item.get('correctAnswer', item.get('correct_answer'))
    incorrect = item.get('incorrectAnswers', item.get('incorrect_answers'))

    if not isinstance(prompt, str) or not prompt.strip():
        raise ContentValidationError(f"Question {position} has no prompt text")
    if not isinstance(correct, str) or not correct.strip():
        raise ContentValidationError(f"Question {position} has no correct answer")
    if not isinstance(incorrect, list) or not incorrect:
        raise ContentValidationError(f"Question {position} 'incorrect answers' must be a non-empty list")
    for j, answer in enumerate(incorrect):
        if not isinstance(answer, str) or not answer.strip():
            raise ContentValidationError(f"Question {position} incorrect answer {j} must be a non-empty string")

    incorrect_answers = tuple(a.strip() for a in incorrect)
    if correct.strip() in incorrect_answers:
        raise ContentValidationError(f"Question {position} lists its correct answer as incorrect")

    return Question(
        category=str(item.get('category') or '').strip(),
        difficulty=str(item.get('difficulty') or '').strip(),
        prompt=prompt.strip(),
        correct_answer=correct.strip(),
        incorrect_answers=incorrect_answers
    )


class QuestionSupplier(ABC):
    """Fallible source of question batches."""

    @abstractmethod
    def fetch(self, category: Optional[str], difficulty: Optional[str], count: int) -> List[Question]:
        """
        Fetch an ordered batch of questions.

        Raises:
            QuestionFetchError: On transport failure, malformed content or an empty result
        """


class TriviaApiQuestionSupplier(QuestionSupplier):
    """Fetches questions from The Trivia API over HTTP."""

    def __init__(self, api_url: str = 'https://the-trivia-api.com/v2/questions', timeout: float = 10.0):
        self.api_url = api_url
        self.timeout = timeout

    def build_url(self, category: Optional[str], difficulty: Optional[str], count: int) -> str:
        params = {'limit': count}
        if category:
            params['categories'] = category
        if difficulty:
            params['difficulties'] = difficulty
        return f"{self.api_url}?{urllib.parse.urlencode(params)}"

    def fetch(self, category: Optional[str], difficulty: Optional[str], count: int) -> List[Question]:
        url = self.build_url(category, difficulty, count)
        logger.info(f"Fetching {count} questions from {url}")

        request = urllib.request.Request(url, headers={'Accept': 'application/json'})
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                data = json.loads(response.read().decode('utf-8'))
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise QuestionFetchError(f"Trivia API request failed: {e}") from e
        except (ValueError, UnicodeDecodeError) as e:
            raise QuestionFetchError(f"Trivia API returned malformed JSON: {e}") from e

        if not isinstance(data, list):
            raise QuestionFetchError("Trivia API response must be a list of questions")

        try:
            questions = [parse_question(item, i) for i, item in enumerate(data)]
        except ContentValidationError as e:
            raise QuestionFetchError(f"Trivia API returned invalid question: {e}") from e

        if not questions:
            raise QuestionFetchError("Trivia API returned no questions")

        logger.info(f"Fetched {len(questions)} questions")
        return questions


class YamlQuestionSupplier(QuestionSupplier):
    """Serves questions from a local YAML question bank."""

    def __init__(self, yaml_file_path: str = 'questions.yaml', rng: Optional[random.Random] = None):
        """
        Args:
            yaml_file_path: Path to the YAML file containing questions
            rng: Random source used for sampling
        """
        self.yaml_file_path = yaml_file_path
        self.questions: List[Question] = []
        self._rng = rng or random.Random()
        self._loaded = False

    def load_questions_from_yaml(self) -> None:
        """
        Load questions from the YAML file.

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ContentValidationError: If YAML structure is invalid
            yaml.YAMLError: If YAML parsing fails
        """
        try:
            with open(self.yaml_file_path, 'r', encoding='utf-8') as file:
                data = yaml.safe_load(file)
            self.questions = self._parse_questions(data)
            self._loaded = True
            logger.info(f"Successfully loaded {len(self.questions)} questions from {self.yaml_file_path}")
        except FileNotFoundError:
            logger.error(f"YAML file not found: {self.yaml_file_path}")
            raise
        except yaml.YAMLError as e:
            logger.error(f"YAML parsing error: {e}")
            raise
        except ContentValidationError as e:
            logger.error(f"Content validation error: {e}")
            raise

    def _parse_questions(self, data: Any) -> List[Question]:
        if not isinstance(data, dict):
            raise ContentValidationError("YAML root must be a dictionary")
        if 'questions' not in data:
            raise ContentValidationError("YAML must contain 'questions' key")
        items = data['questions']
        if not isinstance(items, list) or not items:
            raise ContentValidationError("'questions' must be a non-empty list")
        return [parse_question(item, i) for i, item in enumerate(items)]

    @staticmethod
    def _matches(value: str, wanted: Optional[str]) -> bool:
        return not wanted or value.lower() == wanted.lower()

    def fetch(self, category: Optional[str], difficulty: Optional[str], count: int) -> List[Question]:
        if not self._loaded:
            try:
                self.load_questions_from_yaml()
            except (OSError, yaml.YAMLError, ContentValidationError) as e:
                raise QuestionFetchError(f"Question bank unavailable: {e}") from e

        pool = [q for q in self.questions
                if self._matches(q.category, category) and self._matches(q.difficulty, difficulty)]
        if not pool:
            raise QuestionFetchError(
                f"No questions match category={category!r} difficulty={difficulty!r}"
            )
        return self._rng.sample(pool, min(count, len(pool)))

    def get_question_count(self) -> int:
        return len(self.questions) if self._loaded else 0


def create_question_supplier(config) -> QuestionSupplier:
    """Build the supplier selected by configuration."""
    if config.question_source == 'file':
        return YamlQuestionSupplier(config.questions_file)
    return TriviaApiQuestionSupplier(config.trivia_api_url, config.trivia_api_timeout)
