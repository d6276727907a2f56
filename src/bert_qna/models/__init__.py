from .encoders import HFQAEncoder
from .qa_model import QAModel, select_device

__all__ = ["HFQAEncoder", "QAModel", "select_device"]
