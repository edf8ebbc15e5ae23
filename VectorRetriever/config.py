"""
Configuration handling. The configuration is a JSON file that may contain
``//`` line comments; whatever it defines is merged over DEFAULT_CONFIG.
"""
import copy
import json
import os
from typing import Any, Dict, Optional

from .diagnostics import Diagnostic, LoadResult

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "config.json")

DEFAULT_CONFIG = {
    "corpus": {
        "directory": "ft911",
        "extension": ".txt",
        "encoding": "latin-1"
    },
    "preprocessing": {
        "lowercase": True,
        "stop_words": {"use": True, "file": None},
        "nonsense_tokens": {"remove": False, "min_word_length": 1}
    },
    "stemming": {
        "use": True,
        "mode": "NLTK_EXTENSIONS"
    },
    "evaluation": {
        "topics": "topics.txt",
        "qrels": "main.qrels"
    },
    "output": {
        "directory": "output",
        "forward_index": "forward_index.txt",
        "inverted_index": "inverted_index.txt",
        "word_ids": "word_ids.txt",
        "doc_ids": "doc_ids.txt",
        "parser_output": "parser_output.txt",
        "compressed_index": "inverted_index.pkl.gz",
        "ranked_results": "vsm_output.txt",
        "performance_report": "performance_report.txt",
        "score_precision": 6
    }
}


def strip_comments(content: str) -> str:
    """Remove ``//`` line comments and blank lines from JSON text."""
    filtered_lines = []
    for line in content.splitlines():
        line_without_comment = line.split("//")[0]
        if line_without_comment.strip():
            filtered_lines.append(line_without_comment)
    return "\n".join(filtered_lines)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_file: Optional[str] = None) -> LoadResult:
    """
    Load configuration from a JSON file, handling comments.

    Args:
        config_file: Path to configuration file (defaults to the bundled config.json)

    Returns:
        LoadResult with the merged configuration dictionary. Problems with the
        file are reported as diagnostics and the defaults are used instead.
    """
    config_file = config_file or DEFAULT_CONFIG_PATH
    diagnostics = []

    if not os.path.exists(config_file):
        diagnostics.append(Diagnostic(config_file, "configuration file not found, using default settings"))
        return LoadResult(copy.deepcopy(DEFAULT_CONFIG), diagnostics)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        diagnostics.append(Diagnostic(config_file, f"could not read configuration: {e}, using default settings"))
        return LoadResult(copy.deepcopy(DEFAULT_CONFIG), diagnostics)

    try:
        loaded = json.loads(strip_comments(content))
    except json.JSONDecodeError as e:
        diagnostics.append(Diagnostic(config_file, f"invalid configuration: {e}, using default settings"))
        return LoadResult(copy.deepcopy(DEFAULT_CONFIG), diagnostics)

    if not isinstance(loaded, dict):
        diagnostics.append(Diagnostic(config_file, "configuration must be a JSON object, using default settings"))
        return LoadResult(copy.deepcopy(DEFAULT_CONFIG), diagnostics)

    return LoadResult(merge_config(DEFAULT_CONFIG, loaded), diagnostics)


def output_path(config: Dict[str, Any], name: str, output_dir: Optional[str] = None) -> str:
    """Resolve the path of a named output artefact."""
    directory = output_dir or config["output"]["directory"]
    return os.path.join(directory, config["output"][name])
