from pathlib import Path

import pytest

from bert_qna.config import (
    DEFAULT_MODEL_URL,
    NO_ANSWER_THRESHOLD,
    ModelConfig,
    QAConfig,
    load_config,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


def test_defaults():
    cfg = QAConfig()
    assert (cfg.max_seq_len, cfg.max_query_len, cfg.doc_stride) == (384, 64, 128)
    assert (cfg.max_answer_len, cfg.predict_answer_num) == (32, 5)
    assert cfg.no_answer_threshold == NO_ANSWER_THRESHOLD

    model_cfg = ModelConfig()
    assert model_cfg.model_url == DEFAULT_MODEL_URL
    assert model_cfg.from_hub is True
    assert model_cfg.local_files_only is False


def test_unset_from_hub_defaults_to_true():
    assert ModelConfig(model_url="some/model").from_hub is True
    assert ModelConfig(model_url="/tmp/m", from_hub=False).local_files_only is True


def test_qa_config_is_immutable():
    cfg = QAConfig()
    with pytest.raises(AttributeError):
        cfg.max_seq_len = 10


@pytest.mark.parametrize("kwargs", [
    {"max_seq_len": 0},
    {"doc_stride": -1},
    {"predict_answer_num": 0},
])
def test_invalid_qa_config(kwargs):
    with pytest.raises(ValueError):
        QAConfig(**kwargs)


def test_load_config_casts_values(tmp_path):
    path = tmp_path / "qa.yaml"
    path.write_text(
        "model_url: ./checkpoints/qa\n"
        "from_hub: 'false'\n"
        "max_seq_len: '256'\n"
        "doc_stride: 64\n"
        "no_answer_threshold: '1.5'\n"
    )
    model_cfg, qa_cfg = load_config(str(path))
    assert model_cfg.model_url == "./checkpoints/qa"
    assert model_cfg.from_hub is False
    assert qa_cfg.max_seq_len == 256
    assert qa_cfg.doc_stride == 64
    assert qa_cfg.max_query_len == 64
    assert qa_cfg.no_answer_threshold == 1.5


def test_load_config_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    model_cfg, qa_cfg = load_config(str(path))
    assert model_cfg == ModelConfig()
    assert qa_cfg == QAConfig()


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_shipped_config_matches_defaults():
    model_cfg, qa_cfg = load_config(str(REPO_ROOT / "config" / "mobilebert_squad.yaml"))
    assert model_cfg == ModelConfig()
    assert qa_cfg == QAConfig()


def test_short_window_with_default_query_limit_is_allowed():
    # the passage budget depends on the actual question length
    cfg = QAConfig(max_seq_len=32)
    assert (cfg.max_seq_len, cfg.max_query_len) == (32, 64)
