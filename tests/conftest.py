"""Shared fixtures: an offline BERT word-piece tokenizer and a scripted model."""

import numpy as np
import pytest
from tokenizers import Tokenizer, models, normalizers, pre_tokenizers
from transformers import PreTrainedTokenizerFast

from bert_qna.tokenization import WordPieceTokenizer

VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]", "[MASK]",
    "the", "sky", "is", "blue", "during", "a", "clear", "day",
    ".", "?", ",", "what", "color", "how", "long", "sun", "##ny",
]

WINDOW_WORDS = ["the", "sky", "is", "blue", "during", "a", "clear", "day"]


@pytest.fixture
def tokenizer():
    backend = Tokenizer(models.WordPiece({w: i for i, w in enumerate(VOCAB)}, unk_token="[UNK]"))
    backend.normalizer = normalizers.BertNormalizer(lowercase=True)
    backend.pre_tokenizer = pre_tokenizers.BertPreTokenizer()
    hf_tokenizer = PreTrainedTokenizerFast(
        tokenizer_object=backend,
        unk_token="[UNK]", pad_token="[PAD]", cls_token="[CLS]",
        sep_token="[SEP]", mask_token="[MASK]",
    )
    return WordPieceTokenizer(hf_tokenizer)


def token_id(word):
    return VOCAB.index(word)


class ScriptedModel:
    """
    Stands in for QAModel.

    rows: {batch_row: ({position: start_logit}, {position: end_logit})}
    token_spikes: {token_id: (start_logit, end_logit)} applied wherever the
        token appears in the passage segment of any row
    """
    def __init__(self, rows=None, token_spikes=None, error=None):
        self.rows = rows or {}
        self.token_spikes = token_spikes or {}
        self.error = error
        self.calls = []

    def execute(self, input_ids, segment_ids, input_mask):
        input_ids = np.asarray(input_ids)
        segment_ids = np.asarray(segment_ids)
        self.calls.append(input_ids.shape)
        if self.error is not None:
            raise self.error
        start = np.zeros(input_ids.shape, dtype=np.float32)
        end = np.zeros(input_ids.shape, dtype=np.float32)
        for tid, (s, e) in self.token_spikes.items():
            hits = (input_ids == tid) & (segment_ids == 1)
            start[hits] = s
            end[hits] = e
        for row, (s_spikes, e_spikes) in self.rows.items():
            for pos, v in s_spikes.items():
                start[row, pos] = v
            for pos, v in e_spikes.items():
                end[row, pos] = v
        return start, end


class ExplodingTokenizer:
    def tokenize(self, text):
        raise AssertionError("tokenizer should not be reached")

    def process_input(self, text):
        raise AssertionError("tokenizer should not be reached")
