import re
from abc import ABC, abstractmethod
from enum import Enum


class TokenType(Enum):
    WORD = "word"
    NUMBER = "number"
    TAG = "tag"
    PUNCT = "punct"


class Token:
    """A piece of the original text together with its processed form."""

    def __init__(self, text: str, position: int, token_type: TokenType):
        self.text = text
        self.position = position
        self.token_type = token_type
        self.processed_form = text

    def __repr__(self):
        return f"Token({self.text!r}, {self.position}, {self.token_type.name}, {self.processed_form!r})"


class Tokenizer(ABC):
    @abstractmethod
    def tokenize(self, document: str) -> list[Token]:
        raise NotImplementedError()


class RegexMatchTokenizer(Tokenizer):
    """
    Tokenizer based on a single alternation regex. Words are runs of ASCII
    letters, so ``don't`` gives ``don`` and ``t`` and ``abc123`` gives a word
    and a number.
    Only attribute-free markup such as ``<P>`` is a tag, a stray ``<`` is punctuation.
    """

    PATTERNS = [
        (TokenType.TAG, r"</?[A-Za-z][A-Za-z0-9]*>"),
        (TokenType.WORD, r"[A-Za-z]+"),
        (TokenType.NUMBER, r"\d+"),
        (TokenType.PUNCT, r"[^\sA-Za-z\d]"),
    ]

    def __init__(self):
        self.regex = re.compile("|".join(f"(?P<{token_type.name}>{pattern})"
                                         for token_type, pattern in self.PATTERNS))

    def tokenize(self, document: str) -> list[Token]:
        tokens = []
        for match in self.regex.finditer(document):
            tokens.append(Token(match.group(), match.start(), TokenType[match.lastgroup]))
        return tokens
