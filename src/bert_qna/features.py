"""
Feature construction: question + passage -> fixed-length model inputs.

Long passages are split into overlapping windows so an answer close to a
window edge is still seen whole by a neighbouring window. Every feature
keeps a map from sequence position back to the original passage token so
decoded spans can be turned into character offsets.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .config import DOC_STRIDE, NUM_SPECIAL_TOKENS
from .errors import InputTooLongError
from .tokenization import OriginalToken

# Logit position p is looked up at token_to_orig_map[p + OUTPUT_OFFSET];
# position 0 of the sequence is [CLS].
OUTPUT_OFFSET = 1


@dataclass
class Feature:
    input_ids: List[int]
    input_mask: List[int]
    segment_ids: List[int]
    orig_tokens: List[OriginalToken]
    # len == max_seq_len + OUTPUT_OFFSET; None for question/special/padding positions
    token_to_orig_map: List[Optional[int]]


def normalize_question(question: str) -> str:
    """Drop every '?', trim, and end with exactly one '?'."""
    return question.replace("?", "").strip() + "?"


def doc_spans(num_tokens: int, max_context_len: int, doc_stride: int = DOC_STRIDE) -> List[Tuple[int, int]]:
    """
    Sliding windows over the passage sub-words.

    Returns (start, length) pairs. Windows advance by `doc_stride` (or by the
    window length, if shorter) and stop at the first one that reaches the end.
    """
    if max_context_len < 1:
        raise ValueError(f"max_context_len must be positive, got {max_context_len}")
    spans = []
    start = 0
    while start < num_tokens:
        length = min(num_tokens - start, max_context_len)
        spans.append((start, length))
        if start + length == num_tokens:
            break
        start += min(length, doc_stride)
    return spans


def _split_passage(tokenizer, context: str) -> Tuple[List[OriginalToken], List[int], List[int]]:
    orig_tokens = tokenizer.process_input(context)
    token_to_orig_index: List[int] = []
    all_doc_tokens: List[int] = []
    for i, token in enumerate(orig_tokens):
        for sub_token in tokenizer.tokenize(token.text):
            token_to_orig_index.append(i)
            all_doc_tokens.append(sub_token)
    return orig_tokens, all_doc_tokens, token_to_orig_index


def build_features(
    tokenizer,
    question: str,
    context: str,
    max_query_len: int,
    max_seq_len: int,
    doc_stride: int = DOC_STRIDE,
) -> List[Feature]:
    """
    Tokenize a question/passage pair into one feature per passage window.

    Each feature is laid out as
        [CLS] question [SEP] passage-window [SEP] padding...
    with segment id 0 up to and including the first [SEP] and 1 afterwards.

    Args:
        tokenizer: Object exposing tokenize / process_input / cls_id / sep_id / pad_id
        question: Raw question text (normalized here)
        context: Passage text; offsets in the features index into this string
        max_query_len: Maximum question length in sub-words
        max_seq_len: Length every feature is padded to
        doc_stride: Window step in sub-words

    Returns:
        Features in left-to-right window order (empty for an empty passage).

    Raises:
        InputTooLongError: question has more than `max_query_len` sub-words, or leaves no
            room for passage tokens within `max_seq_len`
    """
    query = normalize_question(question)
    query_tokens = tokenizer.tokenize(query)
    if len(query_tokens) > max_query_len:
        raise InputTooLongError(
            f"The length of question token exceeds the limit ({max_query_len})."
        )

    orig_tokens, all_doc_tokens, token_to_orig_index = _split_passage(tokenizer, context)
    max_context_len = max_seq_len - len(query_tokens) - NUM_SPECIAL_TOKENS
    if max_context_len < 1:
        raise InputTooLongError(
            f"The question leaves no room for passage tokens within max_seq_len ({max_seq_len})."
        )

    features = []
    for start, length in doc_spans(len(all_doc_tokens), max_context_len, doc_stride):
        tokens = [tokenizer.cls_id] + list(query_tokens) + [tokenizer.sep_id]
        segment_ids = [0] * len(tokens)
        token_to_orig_map: List[Optional[int]] = [None] * (max_seq_len + OUTPUT_OFFSET)

        for split_index in range(start, start + length):
            token_to_orig_map[len(tokens) + OUTPUT_OFFSET] = token_to_orig_index[split_index]
            tokens.append(all_doc_tokens[split_index])
            segment_ids.append(1)
        tokens.append(tokenizer.sep_id)
        segment_ids.append(1)

        input_mask = [1] * len(tokens)
        pad = max_seq_len - len(tokens)
        features.append(Feature(
            input_ids=tokens + [tokenizer.pad_id] * pad,
            input_mask=input_mask + [0] * pad,
            segment_ids=segment_ids + [0] * pad,
            orig_tokens=orig_tokens,
            token_to_orig_map=token_to_orig_map,
        ))
    return features
