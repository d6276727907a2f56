from tests.conftest import token_id


def test_process_input_records_char_offsets(tokenizer):
    tokens = tokenizer.process_input("The sky is blue.")
    assert [(t.text, t.char_offset) for t in tokens] == [
        ("The", 0), ("sky", 4), ("is", 8), ("blue", 11), (".", 15),
    ]


def test_process_input_skips_surrounding_whitespace(tokenizer):
    tokens = tokenizer.process_input("  clear,day ")
    assert [(t.text, t.char_offset) for t in tokens] == [
        ("clear", 2), (",", 7), ("day", 8),
    ]


def test_tokenize_has_no_special_tokens_and_splits_word_pieces(tokenizer):
    assert tokenizer.tokenize("Sunny day") == [token_id("sun"), token_id("##ny"), token_id("day")]
    assert tokenizer.tokenize("What color?") == [token_id("what"), token_id("color"), token_id("?")]


def test_special_ids(tokenizer):
    assert tokenizer.cls_id == token_id("[CLS]")
    assert tokenizer.sep_id == token_id("[SEP]")
    assert tokenizer.pad_id == token_id("[PAD]")


def test_literal_special_token_text_is_not_reserved(tokenizer):
    ids = tokenizer.tokenize("what is [SEP] sky [CLS]")
    assert tokenizer.sep_id not in ids
    assert tokenizer.cls_id not in ids
    assert ids[:2] == [token_id("what"), token_id("is")]
    assert token_id("sky") in ids
