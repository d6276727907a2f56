from .config import ModelConfig, QAConfig, load_config
from .decode import Answer
from .errors import InputTooLongError, InvalidInputError
from .predict import QuestionAndAnswer, load

__all__ = [
    "Answer",
    "InputTooLongError",
    "InvalidInputError",
    "ModelConfig",
    "QAConfig",
    "QuestionAndAnswer",
    "load",
    "load_config",
]
