"""
Word-piece tokenizer used to build model inputs.

Wraps a Hugging Face fast BERT tokenizer and exposes the two views the
feature builder needs:
- `tokenize`: sub-word ids for a piece of text (no special tokens)
- `process_input`: whitespace/punctuation-level tokens of the passage with
  the character offset where each one starts
"""
from dataclasses import dataclass
from typing import List

from transformers import AutoTokenizer


@dataclass(frozen=True)
class OriginalToken:
    text: str
    char_offset: int


class WordPieceTokenizer:
    def __init__(self, hf_tokenizer):
        self.hf_tokenizer = hf_tokenizer

    @classmethod
    def from_pretrained(cls, name_or_path: str, local_files_only: bool = False) -> "WordPieceTokenizer":
        tokenizer = AutoTokenizer.from_pretrained(
            name_or_path, use_fast=True, local_files_only=local_files_only
        )
        return cls(tokenizer)

    @property
    def cls_id(self) -> int:
        return self.hf_tokenizer.cls_token_id

    @property
    def sep_id(self) -> int:
        return self.hf_tokenizer.sep_token_id

    @property
    def pad_id(self) -> int:
        pad = self.hf_tokenizer.pad_token_id
        return 0 if pad is None else pad

    def tokenize(self, text: str) -> List[int]:
        # Encode word by word so literal "[SEP]" / "[CLS]" text is split like any
        # other punctuation and never yields a reserved id.
        ids: List[int] = []
        for token in self.process_input(text):
            ids.extend(self.hf_tokenizer.encode(token.text, add_special_tokens=False))
        return ids

    def process_input(self, text: str) -> List[OriginalToken]:
        # Same split the BERT pre-tokenizer applies before word-piece:
        # whitespace is dropped, every punctuation char is its own token.
        pre_tokenizer = self.hf_tokenizer.backend_tokenizer.pre_tokenizer
        words = pre_tokenizer.pre_tokenize_str(text)
        return [OriginalToken(word, start) for word, (start, _) in words]
