"""
TF-IDF search module for information retrieval using the TF-IDF weighting scheme.
Supports ranking documents by relevance to queries based on cosine similarity.
"""
from .vector_space import VectorSpaceModel, compute_cosine_similarity
from .tfidf_search import RetrievalEngine, TermLookup, TFIDFSearchEngine
