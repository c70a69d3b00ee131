import json
import sqlite3

import pytest

from zh_vocab_coverage.errors import SourceUnavailable
from zh_vocab_coverage.vocab.entry import VocabularyEntry, VocabularySet, word_set
from zh_vocab_coverage.vocab.sources import (
    hsk_entry_from_json,
    load_entry_json,
    load_hsk_json,
    load_sqlite_vocabulary,
    load_vocabulary,
)


def _entry(word, **kw):
    base = dict(
        simplified=word,
        traditional=word,
        pinyin_numeric="",
        pinyin_display="",
        definitions=(),
        origin_tag="test",
    )
    base.update(kw)
    return VocabularyEntry(**base)


def test_upsert_is_copy_on_write():
    a = VocabularySet.from_words(["我", "你"])
    b = a.upsert([_entry("猫")])
    assert "猫" in b and "猫" not in a
    assert len(a) == 2 and len(b) == 3
    assert b.get("猫").origin_tag == "test"
    assert a.get("我") is None


def test_upsert_replaces_whole_entry():
    s = VocabularySet.from_entries([_entry("猫", definitions=("cat",))])
    s2 = s.upsert([_entry("猫", definitions=("kitty",), origin_tag="new")])
    assert s2.get("猫").definitions == ("kitty",)
    assert s.get("猫").definitions == ("cat",)
    assert len(s2) == 1


def test_union_bare_word_never_overwrites_entry():
    rich = VocabularySet.from_entries([_entry("猫", definitions=("cat",))])
    bare = VocabularySet.from_words(["猫", "狗"])
    u = VocabularySet.union(rich, bare)
    assert u.get("猫").definitions == ("cat",)
    assert u.words == frozenset({"猫", "狗"})


def test_word_set_accepts_many_shapes():
    assert word_set({"a"}) == {"a"}
    assert word_set(["a", "b"]) == frozenset({"a", "b"})
    assert word_set(VocabularySet.from_words(["c"])) == frozenset({"c"})


def test_record_round_trip_keeps_optional_fields():
    e = _entry("咖啡", pinyin_numeric="ka1 fei1", pinyin_display="kā fēi", definitions=("coffee",),
               frequency=12, hsk_level="4")
    rec = e.to_record()
    assert rec["frequency_in_corpus"] == 12
    assert rec["hsk_approx"] == "4"
    assert VocabularyEntry.from_record(rec) == e


def test_from_record_accepts_english_key():
    e = VocabularyEntry.from_record({"simplified_zh": "猫", "english": ["cat"]}, origin_tag="custom")
    assert e.definitions == ("cat",)
    assert e.origin_tag == "custom"
    with pytest.raises(ValueError):
        VocabularyEntry.from_record({"english": ["cat"]})


def test_hsk_entry_from_json_short_keys():
    e = hsk_entry_from_json(
        {"s": "爱", "l": ["n1"], "f": [{"t": "愛", "i": {"y": "ài", "n": "ai4"}, "m": ["love"]}]}
    )
    assert e.simplified == "爱"
    assert e.traditional == "愛"
    assert e.pinyin_numeric == "ai4"
    assert e.pinyin_display == "ài"
    assert e.definitions == ("love",)
    assert e.hsk_level == "n1"
    assert hsk_entry_from_json({"f": []}) is None


def test_load_hsk_json(tmp_path):
    p = tmp_path / "complete.min.json"
    p.write_text(
        json.dumps(
            [
                {"s": "爱", "f": [{"t": "愛", "i": {"y": "ài", "n": "ai4"}, "m": ["love"]}]},
                {"simplified": "八", "forms": [{"traditional": "八", "transcriptions": {"numeric": "ba1"}}]},
                "junk",
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    vocab = load_hsk_json(p)
    assert vocab.words == frozenset({"爱", "八"})
    assert vocab.get("八").pinyin_display == "bā"


def test_load_entry_json_skips_missing_and_bad_rows(tmp_path):
    p = tmp_path / "words_additional.json"
    p.write_text(
        json.dumps(
            [
                {"simplified_zh": "咖啡", "traditional_zh": "咖啡", "pinyin_numeric": "ka1 fei1", "english": ["coffee"]},
                {"nope": 1},
                7,
            ]
        ),
        encoding="utf-8",
    )
    vocab = load_entry_json([p, tmp_path / "missing.json"])
    assert vocab.words == frozenset({"咖啡"})
    assert vocab.get("咖啡").pinyin_display == "kā fēi"
    assert vocab.get("咖啡").origin_tag == "words_additional"


def test_load_entry_json_missing_is_fatal_when_required(tmp_path):
    with pytest.raises(SourceUnavailable):
        load_entry_json([tmp_path / "missing.json"], skip_missing=False)


def test_load_entry_json_bad_json(tmp_path):
    p = tmp_path / "broken.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(SourceUnavailable):
        load_entry_json([p])


def test_load_sqlite_vocabulary_missing_table():
    conn = sqlite3.connect(":memory:")
    with pytest.raises(SourceUnavailable):
        load_sqlite_vocabulary(conn, ["words_hsk"])


def test_load_vocabulary_requires_a_source():
    with pytest.raises(SourceUnavailable):
        load_vocabulary()
