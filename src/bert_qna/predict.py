"""
Question answering over a passage.

`QuestionAndAnswer.find_answers` builds sliding-window features, scores all
windows with one model call, decodes each window and merges the results into
a single ranked list. Run as a script to answer one question or every
question of a SQuAD-format file.
"""
import argparse
import asyncio
import json
import os
from typing import Any, Dict, List, Optional

import numpy as np
from tqdm import tqdm

from .config import ModelConfig, QAConfig, load_config
from .decode import Answer, best_answers, merge_answers
from .errors import InvalidInputError
from .features import Feature, build_features
from .models import HFQAEncoder, QAModel
from .tokenization import WordPieceTokenizer
from .utils.logging import CSVLogger, ensure_dir


class QuestionAndAnswer:
    """
    Finds answer spans for a question in a passage.

    Args:
        tokenizer: Word-piece tokenizer (tokenize / process_input / cls_id / sep_id / pad_id)
        model: Anything with execute(input_ids, segment_ids, input_mask) -> (start, end)
        config: Window sizes, answer limits and the no-answer threshold
    """
    def __init__(self, tokenizer, model, config: Optional[QAConfig] = None):
        self.tokenizer = tokenizer
        self.model = model
        self.config = config or QAConfig()

    def process(self, question: str, context: str) -> List[Feature]:
        return build_features(
            self.tokenizer, question, context,
            max_query_len=self.config.max_query_len,
            max_seq_len=self.config.max_seq_len,
            doc_stride=self.config.doc_stride,
        )

    async def find_answers(self, question: str, context: str, id: Optional[str] = None) -> List[Answer]:
        """
        Given the question and context, find the best answers.

        Args:
            question: The question to find answers for
            context: Passage the answers are looked up from
            id: Opaque identifier copied onto every answer

        Returns:
            Up to `predict_answer_num` answers sorted by descending score

        Raises:
            InvalidInputError: question or context is None
            InputTooLongError: question is longer than `max_query_len` sub-words
        """
        if question is None or context is None:
            raise InvalidInputError(
                "The input to find_answers call is None, please pass a string as input."
            )

        features = self.process(question, context)
        if not features:
            return []

        input_ids = np.asarray([f.input_ids for f in features], dtype=np.int64)
        segment_ids = np.asarray([f.segment_ids for f in features], dtype=np.int64)
        input_mask = np.asarray([f.input_mask for f in features], dtype=np.int64)
        start_logits, end_logits = await asyncio.to_thread(
            self.model.execute, input_ids, segment_ids, input_mask
        )

        cfg = self.config
        per_feature = [
            best_answers(
                start_logits[i], end_logits[i], f.orig_tokens, f.token_to_orig_map,
                context, id=id,
                n_best=cfg.predict_answer_num,
                max_answer_len=cfg.max_answer_len,
                max_seq_len=cfg.max_seq_len,
                no_answer_threshold=cfg.no_answer_threshold,
            )
            for i, f in enumerate(features)
        ]
        return merge_answers(per_feature, cfg.predict_answer_num)


def load(model_config: Optional[ModelConfig] = None,
         qa_config: Optional[QAConfig] = None) -> QuestionAndAnswer:
    """Load tokenizer and model, warm the model up and return a ready QuestionAndAnswer."""
    model_config = model_config or ModelConfig()
    qa_config = qa_config or QAConfig()

    print(f"[model] loading {model_config.model_url} (from_hub={model_config.from_hub})")
    tokenizer = WordPieceTokenizer.from_pretrained(
        model_config.model_url, local_files_only=model_config.local_files_only
    )
    encoder = HFQAEncoder.from_pretrained(
        model_config.model_url, local_files_only=model_config.local_files_only
    )
    model = QAModel(encoder, max_seq_len=qa_config.max_seq_len)
    print(f"[env] device={model.device}")
    model.warm_up()
    return QuestionAndAnswer(tokenizer, model, qa_config)


def read_squad_dev(path: str) -> List[Dict[str, Any]]:
    """
    Read SQuAD-format JSON and extract question-context pairs.
    
    Args:
        path: Path to SQuAD JSON file
        
    Returns:
        List of dicts with keys: 'id', 'question', 'context'
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)["data"]
    
    examples = []
    for article in data:
        for para in article["paragraphs"]:
            context = para["context"]
            for qa in para["qas"]:
                examples.append({
                    "id": qa["id"], 
                    "question": qa["question"], 
                    "context": context
                })
    return examples


def log_answers(logger: CSVLogger, answers: List[Answer]):
    for rank, a in enumerate(answers, start=1):
        logger.log({
            "id": a.id,
            "rank": rank,
            "text": a.text,
            "start_index": a.start_index,
            "end_index": a.end_index,
            "score": a.score,
        })


async def predict_examples(
    qa: QuestionAndAnswer,
    examples: List[Dict[str, Any]],
    answers_logger: Optional[CSVLogger] = None,
) -> Dict[str, str]:
    """Answer every example; returns {id: best answer text} ('' when nothing survives)."""
    preds: Dict[str, str] = {}
    for ex in tqdm(examples, desc="Predict"):
        answers = await qa.find_answers(ex["question"], ex["context"], id=ex["id"])
        if answers_logger is not None:
            log_answers(answers_logger, answers)
        preds[ex["id"]] = answers[0].text if answers else ""
    return preds


def main(argv: Optional[List[str]] = None):
    ap = argparse.ArgumentParser(description="Extractive question answering with a BERT-family model")
    ap.add_argument("--config", type=str, default=None,
                    help="YAML config (e.g. config/mobilebert_squad.yaml)")
    ap.add_argument("--model", type=str, default=None,
                    help="Hub id or local directory; overrides model_url from the config")
    ap.add_argument("--local", action="store_true",
                    help="Treat the model location as a local directory (no downloads)")
    ap.add_argument("--question", type=str, default=None)
    ap.add_argument("--context", type=str, default=None)
    ap.add_argument("--dev_json", type=str, default=None,
                    help="SQuAD-format file; every question in it is answered")
    ap.add_argument("--output", type=str, default="predictions.json")
    ap.add_argument("--answers_csv", type=str, default=None,
                    help="Optional CSV receiving every ranked answer of a --dev_json run")
    args = ap.parse_args(argv)

    if args.dev_json is None and (args.question is None or args.context is None):
        ap.error("pass --dev_json, or both --question and --context")

    if args.config:
        model_config, qa_config = load_config(args.config)
    else:
        model_config, qa_config = ModelConfig(), QAConfig()
    if args.model:
        model_config.model_url = args.model
    if args.local:
        model_config.from_hub = False

    qa = load(model_config, qa_config)

    if args.dev_json is None:
        answers = asyncio.run(qa.find_answers(args.question, args.context))
        if not answers:
            print("[predict] no answer found")
        for rank, a in enumerate(answers, start=1):
            print(f"[predict] {rank}. {a.text!r} chars {a.start_index}-{a.end_index} score {a.score:.4f}")
        return

    examples = read_squad_dev(args.dev_json)
    print(f"[predict] {len(examples)} questions from {args.dev_json}")
    answers_logger = CSVLogger(args.answers_csv) if args.answers_csv else None
    try:
        preds = asyncio.run(predict_examples(qa, examples, answers_logger))
    finally:
        if answers_logger is not None:
            answers_logger.close()

    ensure_dir(os.path.dirname(args.output))
    with open(args.output, "w", encoding="utf-8") as f:
        json.dump(preds, f, ensure_ascii=False)
    print(f"Wrote predictions to {args.output}")


if __name__ == "__main__":
    main()
