"""
Corpus loading utilities for the labeled SMS message dataset.

This module is responsible for:
- reading the data configuration from config/data.yaml
- loading a raw CSV corpus (train or test split) into a pandas DataFrame
- validating that the label and message columns exist
- turning each row into an immutable Document with a 1-based doc_id

The resulting list of Documents is the input to the bag-of-words
pipeline in spam_bow.features.pipeline.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
import yaml

from spam_bow.data.records import Document
from spam_bow.exceptions import ConfigurationError


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"

DEFAULT_TEXT_COLUMN = "Message"
DEFAULT_LABEL_COLUMN = "Category"

_REQUIRED_SECTIONS = ("dataset", "stopwords", "analysis")


def _load_yaml(path: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file and return it as a dictionary.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Dict[str, Any]
        Parsed YAML content.

    Raises
    ------
    ConfigurationError
        If the YAML file does not exist, is empty or is not a mapping.
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    if not isinstance(cfg, dict):
        raise ConfigurationError(f"Config file is empty or invalid: {path}")

    return cfg


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "dataset", "stopwords" and "analysis" sections.
    """
    cfg = _load_yaml(config_path)

    for section in _REQUIRED_SECTIONS:
        if section not in cfg:
            raise ConfigurationError(
                f'Missing "{section}" section in data config: {config_path}'
            )

    return cfg


def get_column_names(dataset_cfg: Dict[str, Any]) -> Tuple[str, str]:
    """
    Return the (text_column, label_column) pair configured for the corpus.
    """
    text_column = dataset_cfg.get("text_column", DEFAULT_TEXT_COLUMN)
    label_column = dataset_cfg.get("label_column", DEFAULT_LABEL_COLUMN)
    return text_column, label_column


def read_corpus_csv(
    csv_path: str,
    text_column: str = DEFAULT_TEXT_COLUMN,
    label_column: str = DEFAULT_LABEL_COLUMN,
) -> pd.DataFrame:
    """
    Read a labeled message corpus from CSV and validate its columns.

    Parameters
    ----------
    csv_path : str
        Path to the CSV file.
    text_column : str
        Name of the raw message column.
    label_column : str
        Name of the label column.

    Returns
    -------
    pd.DataFrame
        DataFrame with at least [label_column, text_column], in file order.

    Raises
    ------
    ConfigurationError
        If the file is missing, empty or unparsable, or a required
        column is absent.
    """
    if not os.path.exists(csv_path):
        raise ConfigurationError(f"Dataset CSV not found at: {csv_path}")

    # Keep every column as text: labels like "1"/"0" stay strings and
    # messages such as "NA" or "null" are not turned into missing values.
    try:
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError as exc:
        raise ConfigurationError(f"Dataset CSV is empty (no header row): {csv_path}") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Dataset CSV could not be parsed: {csv_path} ({exc})") from exc

    missing_cols = [col for col in (label_column, text_column) if col not in df.columns]
    if missing_cols:
        raise ConfigurationError(
            f"Missing required column(s) in dataset CSV {csv_path}: {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    return df.reset_index(drop=True)


def documents_from_frame(
    df: pd.DataFrame,
    text_column: str = DEFAULT_TEXT_COLUMN,
    label_column: str = DEFAULT_LABEL_COLUMN,
) -> List[Document]:
    """
    Build one Document per DataFrame row, assigning doc_id = row position + 1.

    Missing message values are treated as empty text: the document keeps its
    row in the matrix with all-zero counts. A missing label is a
    configuration error, since the document could not be joined to a class.

    Parameters
    ----------
    df : pd.DataFrame
        Corpus with label and message columns, in input order.
    text_column : str
        Name of the raw message column.
    label_column : str
        Name of the label column.

    Returns
    -------
    List[Document]
        Documents ordered by doc_id (1..N).

    Raises
    ------
    ConfigurationError
        If a required column is absent or a label value is missing.
    """
    missing_cols = [col for col in (label_column, text_column) if col not in df.columns]
    if missing_cols:
        raise ConfigurationError(
            f"Missing required field(s): {missing_cols}. "
            f"Available columns: {list(df.columns)}"
        )

    missing_labels = df[label_column].isna() | (df[label_column].astype(str).str.strip() == "")
    if missing_labels.any():
        positions = [int(i) + 1 for i in missing_labels.to_numpy().nonzero()[0][:10]]
        raise ConfigurationError(
            f"Missing '{label_column}' value for document(s) at position(s): {positions}"
        )

    texts = df[text_column].fillna("")

    documents = []
    for position, (label, text) in enumerate(zip(df[label_column], texts), start=1):
        documents.append(Document(doc_id=position, raw_text=str(text), label=str(label)))
    return documents


def count_missing_messages(df: pd.DataFrame, text_column: str = DEFAULT_TEXT_COLUMN) -> int:
    if text_column not in df.columns:
        return 0
    return int((df[text_column].fillna("") == "").sum())


def load_corpus(
    csv_path: str,
    text_column: str = DEFAULT_TEXT_COLUMN,
    label_column: str = DEFAULT_LABEL_COLUMN,
) -> List[Document]:
    """
    Convenience wrapper: read a corpus CSV and turn it into Documents.
    """
    df = read_corpus_csv(csv_path, text_column=text_column, label_column=label_column)
    return documents_from_frame(df, text_column=text_column, label_column=label_column)


def get_split_paths(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Dict[str, Optional[str]]:
    """
    Return the configured corpus paths keyed by split name.

    The training corpus is required; the test corpus is optional and
    reported as None when not configured.
    """
    cfg = load_data_config(config_path)
    dataset_cfg = cfg["dataset"]

    train_path = dataset_cfg.get("train_path")
    if not train_path:
        raise ConfigurationError(
            f'Missing "dataset.train_path" in data config: {config_path}'
        )

    return {
        "train": train_path,
        "test": dataset_cfg.get("test_path") or None,
    }
