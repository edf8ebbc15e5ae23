"""
Relevance evaluation: runs the three query variants of every topic, labels
the ranked results with their relevance grade and computes precision and
recall per topic and variant.
"""
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .interface import SearchEngine
from .topics import Query
from ..diagnostics import console

REPORT_TITLE = "Query Performance Comparison Report"


class QueryVariant(Enum):
    TITLE = "title"
    TITLE_DESC = "title+desc"
    TITLE_NARR = "title+narr"

    def compose(self, query: Query) -> str:
        """Query text for this variant."""
        if self is QueryVariant.TITLE:
            return query.title
        if self is QueryVariant.TITLE_DESC:
            return f"{query.title} {query.description}"
        return f"{query.title} {query.narrative}"


class RankedResult:
    """One retrieved document for one topic and query variant."""

    def __init__(self, topic: int, docno: str, rank: int, score: float,
                 variant: QueryVariant = QueryVariant.TITLE, relevance: int = 0):
        self.topic = topic
        self.docno = docno
        self.rank = rank
        self.score = score
        self.variant = variant
        self.relevance = relevance

    def to_output_format(self, precision: int = 6) -> str:
        return f"{self.topic:<8d}{self.docno:<20s}{self.rank:<8d}{self.score:<10.{precision}f}"

    def __repr__(self):
        return (f"RankedResult(topic={self.topic}, docno={self.docno!r}, rank={self.rank}, "
                f"score={self.score:.6f}, variant={self.variant.value!r}, relevance={self.relevance})")


class TopicMetrics:
    """Precision / recall of one topic for one query variant."""

    def __init__(self, retrieved: int, relevant_retrieved: int, total_relevant: int):
        self.retrieved = retrieved
        self.relevant_retrieved = relevant_retrieved
        self.total_relevant = total_relevant

    @property
    def precision(self) -> float:
        return self.relevant_retrieved / self.retrieved if self.retrieved > 0 else 0.0

    @property
    def recall(self) -> float:
        return self.relevant_retrieved / self.total_relevant if self.total_relevant > 0 else 0.0

    def __repr__(self):
        return (f"TopicMetrics(precision={self.precision:.4f}, recall={self.recall:.4f}, "
                f"{self.relevant_retrieved}/{self.total_relevant})")


def create_query_results(topic: int, scores: Sequence[Tuple[str, float]], variant: QueryVariant,
                         judgments: Mapping[int, Mapping[str, int]]) -> List[RankedResult]:
    """Number a ranking 1..n and attach the judged relevance (0 when unjudged)."""
    topic_judgments = judgments.get(topic, {})
    return [RankedResult(topic, docno, rank, score, variant, topic_judgments.get(docno, 0))
            for rank, (docno, score) in enumerate(scores, 1)]


def run_query_variants(queries: Iterable[Query], search_engine: SearchEngine,
                       judgments: Mapping[int, Mapping[str, int]],
                       variants: Sequence[QueryVariant] = tuple(QueryVariant),
                       verbose: bool = True) -> List[RankedResult]:
    """
    Run every variant of every query.

    Returns:
        All ranked results, topic by topic in query order, variants in the
        order given
    """
    results = []
    for query in queries:
        if verbose:
            console.print(f"Processing query #{query.number}: {query.title}", markup=False)
        for variant in variants:
            scores = search_engine.search(variant.compose(query))
            results.extend(create_query_results(query.number, scores, variant, judgments))
    return results


def compute_metrics(results: Sequence[RankedResult], topic_judgments: Mapping[str, int]) -> TopicMetrics:
    """
    Metrics of one retrieved set.

    A result counts as relevant when its document is judged 1. The number of
    relevant documents is the sum of the topic's grades, independent of what
    was retrieved.
    """
    relevant_retrieved = sum(1 for result in results if topic_judgments.get(result.docno, 0) == 1)
    total_relevant = sum(topic_judgments.values())
    return TopicMetrics(len(results), relevant_retrieved, total_relevant)


def evaluate(results: Iterable[RankedResult], judgments: Mapping[int, Mapping[str, int]],
             topics: Optional[Iterable[int]] = None,
             variants: Sequence[QueryVariant] = tuple(QueryVariant)
             ) -> Dict[int, Dict[QueryVariant, TopicMetrics]]:
    """
    Combined report keyed by topic (ascending) then variant.

    Args:
        results: Ranked results of any number of topics and variants
        judgments: {topic: {docno: grade}}
        topics: Topics to report; defaults to the topics present in ``results``.
            A topic or variant without results gets zero metrics.
        variants: Variants to report, in report order

    Returns:
        {topic: {variant: TopicMetrics}}
    """
    grouped: Dict[int, Dict[QueryVariant, List[RankedResult]]] = {}
    for result in results:
        grouped.setdefault(result.topic, {}).setdefault(result.variant, []).append(result)

    topic_numbers = set(grouped) if topics is None else set(topics)

    report = {}
    for topic in sorted(topic_numbers):
        topic_judgments = judgments.get(topic, {})
        by_variant = grouped.get(topic, {})
        report[topic] = {variant: compute_metrics(by_variant.get(variant, []), topic_judgments)
                         for variant in variants}
    return report


def save_ranked_results(results: Iterable[RankedResult], output_file: str, precision: int = 6,
                        variant: Optional[QueryVariant] = QueryVariant.TITLE, verbose: bool = True) -> int:
    """
    Write ranked results grouped by topic ascending, then rank ascending.

    Args:
        variant: Only results of this variant are written (all if None)

    Returns:
        Number of lines written
    """
    selected = [result for result in results if variant is None or result.variant is variant]
    selected.sort(key=lambda result: (result.topic, result.rank))

    with open(output_file, 'w', encoding='utf-8') as f:
        for result in selected:
            f.write(result.to_output_format(precision) + "\n")

    if verbose:
        console.print(f"Saving {len(selected)} results to [cyan]{output_file}[/cyan]")
        if not selected:
            console.print("[yellow]Warning: No results found for any queries[/yellow]")
    return len(selected)


def format_performance_report(report: Mapping[int, Mapping[QueryVariant, TopicMetrics]]) -> str:
    lines = [REPORT_TITLE, "=" * 34, ""]
    for topic, by_variant in report.items():
        lines.append(f"Topic {topic}:")
        for variant, metrics in by_variant.items():
            lines.append(f"  {variant.value}:")
            lines.append(f"    Precision: {metrics.precision:.4f}")
            lines.append(f"    Recall:    {metrics.recall:.4f}")
            lines.append(f"    Relevant Retrieved: {metrics.relevant_retrieved}/{metrics.total_relevant}")
            lines.append("")
        lines.append("")
    return "\n".join(lines) + "\n"


def save_performance_report(report: Mapping[int, Mapping[QueryVariant, TopicMetrics]], report_file: str) -> None:
    with open(report_file, 'w', encoding='utf-8') as f:
        f.write(format_performance_report(report))
