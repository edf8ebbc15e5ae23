"""
Preprocessing module for text processing in information retrieval tasks.
Includes tokenization, lowercase conversion, stop word filtering, stemming,
TREC corpus reading and the term / document dictionaries.
"""
from .tokenizer import RegexMatchTokenizer, Token, TokenType
from .preprocess import PreprocessingPipeline, create_pipeline
from .document import Document, load_corpus
from .dictionary import IdMapping, build_dictionaries
