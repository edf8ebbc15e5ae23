from abc import ABC, abstractmethod
from typing import Optional


class SearchEngine(ABC):
    """Anything that ranks documents for a free-text query."""

    @abstractmethod
    def search(self, query: str, top_k: Optional[int] = None) -> list[tuple[str, float]]:
        raise NotImplementedError()
