import inspect
from typing import Tuple
import torch
import torch.nn as nn
from transformers import AutoConfig, AutoModelForQuestionAnswering

class HFQAEncoder(nn.Module):
    """
    Thin wrapper around a Hugging Face extractive QA model (encoder + span head).
    Returns start and end logits [B, L].
    """
    def __init__(self, backbone: nn.Module):
        super().__init__()
        self.backbone = backbone
        self.config = getattr(backbone, "config", None)

    @classmethod
    def from_pretrained(cls, name: str, local_files_only: bool = False) -> "HFQAEncoder":
        config = AutoConfig.from_pretrained(name, local_files_only=local_files_only)
        backbone = AutoModelForQuestionAnswering.from_pretrained(
            name, config=config, local_files_only=local_files_only
        )
        return cls(backbone)

    def forward(self, input_ids, attention_mask=None, token_type_ids=None) -> Tuple[torch.Tensor, torch.Tensor]:
        # only pass token_type_ids if supported by the model
        kwargs = dict(input_ids=input_ids, attention_mask=attention_mask, return_dict=True)
        if "token_type_ids" in inspect.signature(self.backbone.forward).parameters:
            kwargs["token_type_ids"] = token_type_ids
        outputs = self.backbone(**kwargs)
        return outputs.start_logits, outputs.end_logits  # [B, L], [B, L]
