from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
import json
import os

from nltk.stem import PorterStemmer

from .tokenizer import RegexMatchTokenizer, Token, Tokenizer, TokenType
from ..diagnostics import Diagnostic, LoadResult

STOP_WORDS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
DEFAULT_STOP_WORDS_FILE = os.path.join(STOP_WORDS_DIR, "stopwords-en.json")


class TokenPreprocessor(ABC):
    @abstractmethod
    def preprocess(self, token: Token, document: str) -> Token:
        raise NotImplementedError()

    def preprocess_all(self, tokens: list[Token], document: str) -> list[Token]:
        return [self.preprocess(token, document) for token in tokens]


class LowercasePreprocessor(TokenPreprocessor):
    def preprocess(self, token: Token, document: str) -> Token:
        token.processed_form = token.processed_form.lower()
        return token


def load_stop_words(path: Optional[str] = None) -> LoadResult:
    """
    Load a stop word list.

    A ``.json`` file must hold a JSON array of words, any other file is read
    as one word per line. A missing or unreadable file gives an empty set and
    a diagnostic.
    """
    path = path or DEFAULT_STOP_WORDS_FILE
    try:
        with open(path, 'r', encoding='utf-8') as f:
            if path.endswith(".json"):
                words = json.load(f)
            else:
                words = [line.strip() for line in f]
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        return LoadResult(set(), [Diagnostic(path, f"could not load stop words: {e}")])

    if not isinstance(words, list) or not all(isinstance(word, str) for word in words):
        return LoadResult(set(), [Diagnostic(path, "stop word file must hold a list of words")])

    return LoadResult({word.lower() for word in words if word}, [])


class StopWordsPreprocessor(TokenPreprocessor):
    """Preprocessor for removing stop words."""

    def __init__(self, stop_words: Iterable[str]):
        self.stop_words = set(stop_words)

    def preprocess(self, token: Token, document: str) -> Token:
        """
        If token is a stop word, replace its processed_form with empty string.
        """
        if token.token_type == TokenType.WORD and token.processed_form.lower() in self.stop_words:
            token.processed_form = ""
        return token


class NonsenseTokenPreprocessor(TokenPreprocessor):
    """Preprocessor for removing words shorter than a minimum length."""

    def __init__(self, min_word_length=2):
        self.min_word_length = min_word_length

    def preprocess(self, token: Token, document: str) -> Token:
        if token.token_type == TokenType.WORD and len(token.processed_form) < self.min_word_length:
            token.processed_form = ""
        return token


class StemPreprocessor(TokenPreprocessor):
    """Reduces words to their Porter stem ("running" -> "run")."""

    def __init__(self, mode: str = "NLTK_EXTENSIONS"):
        self.stemmer = PorterStemmer(mode=getattr(PorterStemmer, mode, PorterStemmer.NLTK_EXTENSIONS))

    def preprocess(self, token: Token, document: str) -> Token:
        if token.token_type == TokenType.WORD and token.processed_form:
            token.processed_form = self.stemmer.stem(token.processed_form, to_lowercase=False)
        return token


class PreprocessingPipeline:
    """Pipeline of token preprocessors."""

    def __init__(self, preprocessors, name="Default Pipeline", tokenizer: Optional[Tokenizer] = None):
        """
        Initialize a preprocessing pipeline.

        Args:
            preprocessors: List of preprocessor objects
            name: Name of the pipeline
            tokenizer: Tokenizer used by ``terms`` (defaults to RegexMatchTokenizer)
        """
        self.preprocessors = preprocessors
        self.name = name
        self.tokenizer = tokenizer or RegexMatchTokenizer()

    def preprocess(self, tokens: list[Token], document: str) -> list[Token]:
        """
        Apply all preprocessors to the tokens.

        Args:
            tokens: List of tokens to preprocess
            document: Original document text

        Returns:
            List of preprocessed tokens
        """
        for preprocessor in self.preprocessors:
            preprocessor.preprocess_all(tokens, document)

        return tokens

    def terms(self, text: str) -> List[str]:
        """
        Tokenize and preprocess text into the normalized term stream.

        Only word tokens that survive preprocessing are returned, in text order.
        """
        if not text:
            return []

        tokens = self.preprocess(self.tokenizer.tokenize(text), text)
        return [token.processed_form for token in tokens
                if token.token_type == TokenType.WORD and token.processed_form]


def create_pipeline(config: Dict[str, Any]) -> LoadResult:
    """
    Create a preprocessing pipeline based on configuration.

    Args:
        config: Configuration dictionary

    Returns:
        LoadResult with the PreprocessingPipeline and any stop word loading problems
    """
    preprocessors = []
    pipeline_name = []
    diagnostics = []

    preproc_config = config.get("preprocessing", {})
    stemming_config = config.get("stemming", {})

    if preproc_config.get("lowercase", True):
        preprocessors.append(LowercasePreprocessor())
        pipeline_name.append("Lowercase")

    stop_words_config = preproc_config.get("stop_words", {})
    if stop_words_config.get("use", True):
        stop_words, problems = load_stop_words(stop_words_config.get("file"))
        diagnostics.extend(problems)
        preprocessors.append(StopWordsPreprocessor(stop_words))
        pipeline_name.append(f"StopWords({len(stop_words)})")

    nonsense_config = preproc_config.get("nonsense_tokens", {})
    if nonsense_config.get("remove", False):
        min_word_length = nonsense_config.get("min_word_length", 2)
        preprocessors.append(NonsenseTokenPreprocessor(min_word_length=min_word_length))
        pipeline_name.append(f"NonsenseFilter(min={min_word_length})")

    if stemming_config.get("use", True):
        mode = stemming_config.get("mode", "NLTK_EXTENSIONS")
        preprocessors.append(StemPreprocessor(mode=mode))
        pipeline_name.append(f"Stemming({mode})")

    return LoadResult(PreprocessingPipeline(preprocessors, name="+".join(pipeline_name)), diagnostics)
