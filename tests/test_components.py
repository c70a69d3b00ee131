import pytest

from zh_vocab_coverage.errors import ReconstructionMismatch
from zh_vocab_coverage.text.components import WordComponent, parse_components
from zh_vocab_coverage.vocab.entry import VocabularyEntry, VocabularySet

from conftest import FixedSegmenter


def _texts(components):
    return [(c.text, c.known, c.punctuation) for c in components]


def test_unknown_run_and_known_words():
    seg = FixedSegmenter({"玛丽很高。": ["玛丽很高", "。"]})
    comps = parse_components("玛丽很高。", {"很", "高"}, seg)
    assert _texts(comps) == [
        ("玛丽", False, False),
        ("很", True, False),
        ("高", True, False),
        ("。", False, True),
    ]


def test_pinyin_comes_from_lookup(trie_segmenter):
    vocab = VocabularySet.from_words(["我", "喜欢"]).upsert(
        [VocabularyEntry("猫", "貓", "mao1", "māo", ("cat",), "test")]
    )
    comps = parse_components("我喜欢猫。", vocab, trie_segmenter, lookup=vocab)
    assert comps[2] == WordComponent("猫", known=True, pinyin="māo")
    assert comps[0].pinyin is None
    assert comps[3].punctuation


def test_char_fallback_splits_into_characters():
    seg = FixedSegmenter({"中国人": ["中国人"]})
    known = {"中", "国", "人", "中国"}
    assert [c.text for c in parse_components("中国人", known, seg)] == ["中国", "人"]
    assert [c.text for c in parse_components("中国人", known, seg, char_fallback=True)] == ["中", "国", "人"]


def test_quantity_fallback_ignores_piece_length():
    seg = FixedSegmenter({"十分钟": ["十分钟"]})
    known = {"十", "分钟"}
    plain = parse_components("十分钟", known, seg, max_piece_length=1)
    assert _texts(plain) == [("十", True, False), ("分钟", False, False)]
    quantity = parse_components("十分钟", known, seg, quantity_fallback=True, max_piece_length=1)
    assert _texts(quantity) == [("十", True, False), ("分钟", True, False)]


def test_whitespace_is_normalized(trie_segmenter):
    comps = parse_components("  我   喜欢 ", {"我", "喜欢"}, trie_segmenter)
    assert [c.text for c in comps] == ["我", " ", "喜欢"]
    assert comps[1].punctuation


def test_lossy_segmenter_raises():
    seg = FixedSegmenter({"我喜欢猫": ["我", "喜欢"]})
    with pytest.raises(ReconstructionMismatch):
        parse_components("我喜欢猫", {"我"}, seg)
