# src/bert_qna/decode.py
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import MAX_ANSWER_LEN, MAX_SEQ_LEN, NO_ANSWER_THRESHOLD, PREDICT_ANSWER_NUM
from .features import OUTPUT_OFFSET
from .tokenization import OriginalToken


@dataclass
class AnswerIndex:
    start: int
    end: int
    score: float


@dataclass
class Answer:
    """
    A ranked answer span.

    `start_index` / `end_index` are inclusive character offsets into `context`;
    `text` is that slice with surrounding whitespace trimmed. `is_answer` is
    False for the "no answer" result the model gives by pointing at [CLS].
    """
    text: str
    start_index: int
    end_index: int
    score: float
    context: str
    id: Optional[str] = None
    is_answer: bool = True

    @classmethod
    def no_answer(cls, score: float, context: str, id: Optional[str] = None) -> "Answer":
        return cls(text="", start_index=0, end_index=0, score=score,
                   context=context, id=id, is_answer=False)


def best_indexes(logits: Sequence[float], n_best: int = PREDICT_ANSWER_NUM,
                 max_seq_len: int = MAX_SEQ_LEN) -> List[int]:
    """Positions of the `n_best` highest logits; ties go to the lower position."""
    s = np.asarray(logits, dtype=np.float64)
    if s.shape[0] < max_seq_len:
        raise ValueError(f"Expected at least {max_seq_len} logits, got {s.shape[0]}")
    order = np.argsort(-s[:max_seq_len], kind="stable")
    return [int(i) for i in order[:n_best]]


def _maps_to_passage(token_to_orig_map: Sequence[Optional[int]], position: int) -> bool:
    shifted = position + OUTPUT_OFFSET
    return 0 <= shifted < len(token_to_orig_map) and token_to_orig_map[shifted] is not None


def candidate_spans(
    start_logits: Sequence[float],
    end_logits: Sequence[float],
    token_to_orig_map: Sequence[Optional[int]],
    n_best: int = PREDICT_ANSWER_NUM,
    max_answer_len: int = MAX_ANSWER_LEN,
    max_seq_len: int = MAX_SEQ_LEN,
) -> List[AnswerIndex]:
    """
    Pair the top start positions with the top end positions of one window.

    Only pairs lying inside the passage part of the window, with end >= start
    and fewer than `max_answer_len` sub-words, are kept. Returns candidates
    sorted by descending start+end logit (stable).
    """
    start_idx = best_indexes(start_logits, n_best, max_seq_len)
    end_idx = best_indexes(end_logits, n_best, max_seq_len)

    cands = []
    for i in start_idx:
        if not _maps_to_passage(token_to_orig_map, i):
            continue
        for j in end_idx:
            if not _maps_to_passage(token_to_orig_map, j):
                continue
            if j < i:
                continue
            if j - i + 1 >= max_answer_len:
                continue
            cands.append(AnswerIndex(i, j, float(start_logits[i]) + float(end_logits[j])))

    cands.sort(key=lambda c: c.score, reverse=True)
    return cands


def convert_back(
    orig_tokens: Sequence[OriginalToken],
    token_to_orig_map: Sequence[Optional[int]],
    start: int,
    end: int,
    context: str,
) -> Tuple[str, int, int]:
    """
    Map a sub-word span [start, end] back to the passage.

    The span runs from the first character of the start token up to the
    character before the token following the end token (or to the end of the
    end token when it is the last one).

    Returns:
        (trimmed_text, start_char, end_char), offsets inclusive and untrimmed
    """
    start_index = token_to_orig_map[start + OUTPUT_OFFSET]
    end_index = token_to_orig_map[end + OUTPUT_OFFSET]
    start_char = orig_tokens[start_index].char_offset

    if end_index < len(orig_tokens) - 1:
        end_char = orig_tokens[end_index + 1].char_offset - 1
    else:
        last = orig_tokens[end_index]
        end_char = min(last.char_offset + len(last.text), len(context) - 1)

    return context[start_char:end_char + 1].strip(), start_char, end_char


def best_answers(
    start_logits: Sequence[float],
    end_logits: Sequence[float],
    orig_tokens: Sequence[OriginalToken],
    token_to_orig_map: Sequence[Optional[int]],
    context: str,
    id: Optional[str] = None,
    n_best: int = PREDICT_ANSWER_NUM,
    max_answer_len: int = MAX_ANSWER_LEN,
    max_seq_len: int = MAX_SEQ_LEN,
    no_answer_threshold: float = NO_ANSWER_THRESHOLD,
) -> List[Answer]:
    """
    Decode one window's logits into at most `n_best` answers.

    Candidates are taken in score order until `n_best` are collected or one
    scores below `no_answer_threshold`. A span starting at position 0 ([CLS])
    becomes `Answer.no_answer`.
    """
    cands = candidate_spans(start_logits, end_logits, token_to_orig_map,
                            n_best=n_best, max_answer_len=max_answer_len,
                            max_seq_len=max_seq_len)
    answers: List[Answer] = []
    for cand in cands:
        if len(answers) >= n_best or cand.score < no_answer_threshold:
            break
        if cand.start > 0:
            text, start_char, end_char = convert_back(
                orig_tokens, token_to_orig_map, cand.start, cand.end, context
            )
            answers.append(Answer(text, start_char, end_char, cand.score, context, id))
        else:
            answers.append(Answer.no_answer(cand.score, context, id))
    return answers


def merge_answers(per_feature: Iterable[List[Answer]],
                  n_best: int = PREDICT_ANSWER_NUM) -> List[Answer]:
    """Flatten the answers of every window and keep the global top `n_best` by score."""
    all_answers = [a for answers in per_feature for a in answers]
    all_answers.sort(key=lambda a: a.score, reverse=True)
    return all_answers[:n_best]
