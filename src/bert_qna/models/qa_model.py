"""
Model execution: one forward pass over a batch of features.

The encoder is any module called as
    encoder(input_ids=..., attention_mask=..., token_type_ids=...)
that returns (start_logits, end_logits), each [B, L].
"""
from typing import Optional, Sequence, Tuple

import numpy as np
import torch
import torch.nn as nn

from ..config import MAX_SEQ_LEN


def select_device() -> torch.device:
    # Priority: CUDA -> MPS -> CPU
    if torch.cuda.is_available():
        return torch.device("cuda")
    if torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


class QAModel:
    """
    Runs a QA encoder in eval mode and hands logits back as numpy arrays.

    Args:
        encoder: Module producing (start_logits, end_logits)
        max_seq_len: Width every input row must have
        device: Target device (auto-selected when None)
    """
    def __init__(self, encoder: nn.Module, max_seq_len: int = MAX_SEQ_LEN,
                 device: Optional[torch.device] = None):
        self.device = device or select_device()
        self.max_seq_len = int(max_seq_len)
        self.encoder = encoder.to(self.device)
        self.encoder.eval()

    def _to_tensor(self, name: str, rows: Sequence[Sequence[int]]) -> torch.Tensor:
        arr = np.asarray(rows, dtype=np.int64)
        if arr.ndim != 2 or arr.shape[1] != self.max_seq_len:
            raise ValueError(
                f"{name} must have shape [batch, {self.max_seq_len}], got {list(arr.shape)}"
            )
        return torch.from_numpy(arr).to(self.device)

    def execute(
        self,
        input_ids: Sequence[Sequence[int]],
        segment_ids: Sequence[Sequence[int]],
        input_mask: Sequence[Sequence[int]],
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Score a batch of features.

        Args:
            input_ids: Token ids [B, max_seq_len]
            segment_ids: Segment ids [B, max_seq_len]
            input_mask: Attention mask [B, max_seq_len]

        Returns:
            (start_logits, end_logits) as float32 arrays [B, max_seq_len]
        """
        ids = seg = mask = start_logits = end_logits = None
        try:
            ids = self._to_tensor("input_ids", input_ids)
            seg = self._to_tensor("segment_ids", segment_ids)
            mask = self._to_tensor("input_mask", input_mask)
            with torch.no_grad():
                start_logits, end_logits = self.encoder(
                    input_ids=ids, attention_mask=mask, token_type_ids=seg
                )
                return (
                    start_logits.float().cpu().numpy(),
                    end_logits.float().cpu().numpy(),
                )
        finally:
            # release batch tensors (matters on accelerators)
            del ids, seg, mask, start_logits, end_logits

    def warm_up(self):
        """Run one all-ones batch so the first real query doesn't pay setup costs."""
        ones = np.ones((1, self.max_seq_len), dtype=np.int64)
        self.execute(ones, ones, ones)
