"""
Tests for configuration, corpus loading and the end-to-end run.

These tests validate that:

- the shipped config files load and contain their required sections
- corpus CSVs are read in order with 1-based doc_ids
- missing columns, labels, config files or stopword lists are
  configuration errors raised before anything is written
- a full run writes a deterministic bag-of-words CSV and summary
"""

from __future__ import annotations

import json
import os
import sys

import pandas as pd
import pytest
import yaml

from scripts.run_bag_of_words import main as cli_main
from spam_bow.data.datasets import (
    documents_from_frame,
    get_split_paths,
    load_corpus,
    load_data_config,
    read_corpus_csv,
)
from spam_bow.exceptions import ConfigurationError
from spam_bow.run import run_bag_of_words
from spam_bow.utils.run_utils import get_parallel_settings, load_pipeline_config


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_CONFIG_PATH = os.path.join(REPO_ROOT, "config", "data.yaml")
PIPELINE_CONFIG_PATH = os.path.join(REPO_ROOT, "config", "pipeline.yaml")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_csv(path, rows):
    pd.DataFrame(rows, columns=["Category", "Message"]).to_csv(path, index=False)
    return str(path)


def _write_configs(tmp_path, train_path, test_path=None, stopwords_path=None):
    if stopwords_path is None:
        stopwords_path = tmp_path / "stop_words.txt"
        stopwords_path.write_text("now\nthe\nyou\nto\na\n", encoding="utf-8")

    data_cfg = {
        "dataset": {
            "train_path": str(train_path),
            "test_path": str(test_path) if test_path else None,
            "text_column": "Message",
            "label_column": "Category",
        },
        "stopwords": {"path": str(stopwords_path)},
        "analysis": {"top_n": 5, "high_frequency_threshold": 10},
    }
    pipeline_cfg = {
        "general": {"n_jobs": 1},
        "paths": {
            "output_dir": str(tmp_path / "outputs"),
            "logs_dir": str(tmp_path / "outputs" / "logs"),
        },
        "logging": {"level": "WARNING", "to_file": False},
        "save": {
            "write_csv": True,
            "write_sparse": True,
            "write_summary": True,
            "plot_top_terms": {"enabled": True, "top_k": 3},
        },
    }

    data_path = tmp_path / "data.yaml"
    pipeline_path = tmp_path / "pipeline.yaml"
    data_path.write_text(yaml.safe_dump(data_cfg), encoding="utf-8")
    pipeline_path.write_text(yaml.safe_dump(pipeline_cfg), encoding="utf-8")
    return str(data_path), str(pipeline_path)


TRAIN_ROWS = [
    ("spam", "FREE!! WIN cash NOW"),
    ("ham", "Are you coming to the party tonight?"),
    ("spam", "win win WIN a free prize, call now"),
    ("ham", "!!!"),
    ("ham", "NA"),
]


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def test_shipped_configs_have_required_sections():
    data_cfg = load_data_config(DATA_CONFIG_PATH)
    assert {"dataset", "stopwords", "analysis"} <= set(data_cfg)
    assert data_cfg["dataset"]["text_column"] == "Message"
    assert data_cfg["dataset"]["label_column"] == "Category"

    run_cfg = load_pipeline_config(PIPELINE_CONFIG_PATH)
    assert "paths" in run_cfg
    assert get_parallel_settings(run_cfg) == (1, None)


def test_missing_config_file_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        load_data_config(str(tmp_path / "missing.yaml"))
    with pytest.raises(ConfigurationError):
        load_pipeline_config(str(tmp_path / "missing.yaml"))


def test_missing_config_section_is_configuration_error(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text(yaml.safe_dump({"dataset": {}}), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="stopwords"):
        load_data_config(str(path))


def test_split_paths_require_train(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text(
        yaml.safe_dump({"dataset": {"test_path": "x.csv"}, "stopwords": {}, "analysis": {}}),
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="train_path"):
        get_split_paths(str(path))


# ---------------------------------------------------------------------------
# Corpus loading
# ---------------------------------------------------------------------------


def test_load_corpus_assigns_positional_doc_ids(tmp_path):
    """
    doc_ids are 1-based file positions, and cell values are kept as
    literal text.
    """
    csv_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)

    documents = load_corpus(csv_path)

    assert [d.doc_id for d in documents] == [1, 2, 3, 4, 5]
    assert documents[0].label == "spam"
    assert documents[0].raw_text == "FREE!! WIN cash NOW"
    # Literal "NA" text is a message, not a missing value.
    assert documents[4].raw_text == "NA"


def test_missing_column_is_configuration_error(tmp_path):
    csv_path = tmp_path / "bad.csv"
    pd.DataFrame({"Category": ["ham"], "Text": ["hi"]}).to_csv(csv_path, index=False)

    with pytest.raises(ConfigurationError, match="Message"):
        read_corpus_csv(str(csv_path))


@pytest.mark.parametrize(
    "content, match",
    [
        (b"", "empty"),
        (b"Category,Message\nham,hello\nspam,win,cash,now\n", "could not be parsed"),
        (b"Category,Message\nham,caf\xe9 \xff\n", "could not be parsed"),
    ],
    ids=["zero-bytes", "ragged-row", "invalid-utf8"],
)
def test_unreadable_corpus_is_configuration_error(tmp_path, content, match):
    """
    Empty, malformed or wrongly encoded corpus files are reported as
    configuration errors naming the file, never as raw pandas or codec
    exceptions.
    """
    csv_path = tmp_path / "corpus.csv"
    csv_path.write_bytes(content)

    with pytest.raises(ConfigurationError, match=match) as excinfo:
        read_corpus_csv(str(csv_path))

    assert str(csv_path) in str(excinfo.value)
    assert excinfo.value.__cause__ is not None


def test_missing_label_is_configuration_error():
    df = pd.DataFrame({"Category": ["ham", ""], "Message": ["hi", "there"]})

    with pytest.raises(ConfigurationError, match="position"):
        documents_from_frame(df)


def test_missing_message_becomes_empty_text():
    df = pd.DataFrame({"Category": ["ham", "spam"], "Message": ["hi", None]})

    documents = documents_from_frame(df)

    assert documents[1].raw_text == ""


# ---------------------------------------------------------------------------
# End-to-end run
# ---------------------------------------------------------------------------


def test_run_writes_outputs(tmp_path):
    """
    A full run writes the CSV table, sparse matrix, vocabulary, summary
    and chart for the train split, and the table for the test split.
    """
    train_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)
    test_path = _write_csv(tmp_path / "test.csv", [("ham", "see you at the party")])
    data_cfg, pipeline_cfg = _write_configs(tmp_path, train_path, test_path)

    results = run_bag_of_words(data_config_path=data_cfg, pipeline_config_path=pipeline_cfg)

    assert set(results) == {"train", "test"}
    assert results["train"].matrix.n_documents == 5
    assert results["test"].matrix.vocabulary == ("at", "party", "see")

    out_dir = tmp_path / "outputs"
    frame = pd.read_csv(out_dir / "bow_train_data.csv")
    assert list(frame.columns[:2]) == ["Category", "doc_id"]
    assert frame["doc_id"].tolist() == [1, 2, 3, 4, 5]
    assert frame.loc[0, ["cash", "free", "win"]].tolist() == [1, 1, 1]
    assert frame.iloc[3, 2:].sum() == 0
    assert "now" not in frame.columns

    summary = json.loads((out_dir / "bow_train_summary.json").read_text(encoding="utf-8"))
    assert summary["documents"] == 5
    assert summary["label_distribution"] == {"ham": 3, "spam": 2}
    assert summary["top_terms"][0] == {"term": "win", "frequency": 4}

    assert (out_dir / "bow_train_counts.npz").exists()
    vocab = (out_dir / "bow_train_vocabulary.txt").read_text(encoding="utf-8").split()
    assert vocab == list(results["train"].matrix.vocabulary)
    assert (out_dir / "bow_train_top_terms.png").exists()
    assert (out_dir / "bow_test_data.csv").exists()


def test_run_is_byte_identical_on_rerun(tmp_path):
    train_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)
    data_cfg, pipeline_cfg = _write_configs(tmp_path, train_path)
    out_csv = tmp_path / "outputs" / "bow_train_data.csv"

    run_bag_of_words(data_config_path=data_cfg, pipeline_config_path=pipeline_cfg)
    first = out_csv.read_bytes()
    run_bag_of_words(data_config_path=data_cfg, pipeline_config_path=pipeline_cfg)

    assert out_csv.read_bytes() == first


def test_missing_stopwords_aborts_without_output(tmp_path):
    train_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)
    data_cfg, pipeline_cfg = _write_configs(
        tmp_path, train_path, stopwords_path=tmp_path / "missing_stop_words.txt"
    )

    with pytest.raises(ConfigurationError, match="Stopword file not found"):
        run_bag_of_words(data_config_path=data_cfg, pipeline_config_path=pipeline_cfg)

    assert not (tmp_path / "outputs" / "bow_train_data.csv").exists()


def test_bad_test_split_aborts_before_train_output(tmp_path):
    """
    Every split is validated before processing, so a broken test split
    leaves no train output behind.
    """
    train_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)
    bad_test = tmp_path / "test.csv"
    pd.DataFrame({"Category": ["ham"], "Body": ["hi"]}).to_csv(bad_test, index=False)
    data_cfg, pipeline_cfg = _write_configs(tmp_path, train_path, bad_test)

    with pytest.raises(ConfigurationError):
        run_bag_of_words(data_config_path=data_cfg, pipeline_config_path=pipeline_cfg)

    assert not (tmp_path / "outputs" / "bow_train_data.csv").exists()


# ---------------------------------------------------------------------------
# Command-line wrapper
# ---------------------------------------------------------------------------


def test_cli_reports_configuration_error_with_exit_code(tmp_path, monkeypatch):
    """
    A configuration problem ends the CLI with exit code 2 and a logged
    message instead of a traceback.
    """
    train_path = tmp_path / "train.csv"
    train_path.write_bytes(b"")
    data_cfg, pipeline_cfg = _write_configs(tmp_path, str(train_path))
    monkeypatch.setattr(
        sys,
        "argv",
        ["run_bag_of_words", "--data-config", data_cfg, "--pipeline-config", pipeline_cfg],
    )

    assert cli_main() == 2

    assert not (tmp_path / "outputs" / "bow_train_data.csv").exists()


def test_cli_runs_end_to_end(tmp_path, monkeypatch):
    train_path = _write_csv(tmp_path / "train.csv", TRAIN_ROWS)
    data_cfg, pipeline_cfg = _write_configs(tmp_path, train_path)
    monkeypatch.setattr(
        sys,
        "argv",
        ["run_bag_of_words", "--data-config", data_cfg, "--pipeline-config", pipeline_cfg],
    )

    assert cli_main() == 0
    assert (tmp_path / "outputs" / "bow_train_data.csv").exists()
