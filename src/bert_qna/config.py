"""
Runtime configuration for feature building, decoding and model loading.

Values can be read from a YAML file (see config/mobilebert_squad.yaml);
anything missing falls back to the defaults below.
"""
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_MODEL_URL = "csarron/mobilebert-uncased-squad-v2"

MAX_SEQ_LEN = 384
MAX_QUERY_LEN = 64
DOC_STRIDE = 128
MAX_ANSWER_LEN = 32
PREDICT_ANSWER_NUM = 5
# Below this combined start+end logit the model is signalling that the window
# holds no answer. Tuned on SQuAD 2.0 for the default checkpoint only.
NO_ANSWER_THRESHOLD = 4.3980759382247925

# [CLS] + [SEP] + [SEP]
NUM_SPECIAL_TOKENS = 3


@dataclass(frozen=True)
class QAConfig:
    """
    Immutable knobs shared by the feature builder and the answer decoder.

    Args:
        max_seq_len: Fixed model input length (question + passage window + specials)
        max_query_len: Maximum question length in sub-word tokens
        doc_stride: Step between consecutive passage windows, in sub-word tokens
        max_answer_len: Spans must be strictly shorter than this many sub-words
        predict_answer_num: Top-K used for start/end selection and for the final list
        no_answer_threshold: Candidates scoring below this are dropped
    """
    max_seq_len: int = MAX_SEQ_LEN
    max_query_len: int = MAX_QUERY_LEN
    doc_stride: int = DOC_STRIDE
    max_answer_len: int = MAX_ANSWER_LEN
    predict_answer_num: int = PREDICT_ANSWER_NUM
    no_answer_threshold: float = NO_ANSWER_THRESHOLD

    def __post_init__(self):
        for name in ("max_seq_len", "max_query_len", "doc_stride",
                     "max_answer_len", "predict_answer_num"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")


@dataclass
class ModelConfig:
    """
    Where to load the model and tokenizer from.

    `model_url` is a Hugging Face Hub id when `from_hub` is true, otherwise a
    local directory (no network access is attempted).
    """
    model_url: str = DEFAULT_MODEL_URL
    from_hub: Optional[bool] = None

    def __post_init__(self):
        if self.from_hub is None:
            self.from_hub = True

    @property
    def local_files_only(self) -> bool:
        return not self.from_hub


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def qa_config_from_dict(cfg: Dict[str, Any]) -> QAConfig:
    # robust type-casting (tolerates quoted yaml values)
    return QAConfig(
        max_seq_len=int(cfg.get("max_seq_len", MAX_SEQ_LEN)),
        max_query_len=int(cfg.get("max_query_len", MAX_QUERY_LEN)),
        doc_stride=int(cfg.get("doc_stride", DOC_STRIDE)),
        max_answer_len=int(cfg.get("max_answer_len", MAX_ANSWER_LEN)),
        predict_answer_num=int(cfg.get("predict_answer_num", PREDICT_ANSWER_NUM)),
        no_answer_threshold=float(cfg.get("no_answer_threshold", NO_ANSWER_THRESHOLD)),
    )


def model_config_from_dict(cfg: Dict[str, Any]) -> ModelConfig:
    from_hub = cfg.get("from_hub")
    return ModelConfig(
        model_url=str(cfg.get("model_url") or DEFAULT_MODEL_URL),
        from_hub=None if from_hub is None else _as_bool(from_hub),
    )


def load_config(cfg_path: str) -> Tuple[ModelConfig, QAConfig]:
    """Read a YAML config file into (ModelConfig, QAConfig)."""
    if not os.path.exists(cfg_path):
        raise FileNotFoundError(f"Config not found: {cfg_path}")
    with open(cfg_path, "r") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError(f"Expected a mapping at the top of {cfg_path}")
    return model_config_from_dict(cfg), qa_config_from_dict(cfg)
