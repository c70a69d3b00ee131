from zh_vocab_coverage.coverage.aggregate import UnknownChunkRecord
from zh_vocab_coverage.coverage.resolve import (
    CORPUS_ORIGIN,
    UnresolvedChunk,
    enrich_word_list,
    resolve_unknowns,
)


def _rec(chunk, n):
    return UnknownChunkRecord(chunk, tuple(range(n)))


def test_coffee_resolves_with_tone_marks(sample_dictionary):
    res = resolve_unknowns([_rec("咖啡", 12)], sample_dictionary)
    assert len(res.resolved) == 1
    e = res.resolved[0]
    assert e.simplified == "咖啡"
    assert e.traditional == "咖啡"
    assert e.pinyin_numeric == "ka1 fei1"
    assert e.pinyin_display == "kā fēi"
    assert e.definitions == ("coffee",)
    assert e.frequency == 12
    assert e.origin_tag == CORPUS_ORIGIN
    assert res.unresolved == []


def test_partitions_and_orders_by_frequency(sample_dictionary):
    chunks = [_rec("玛丽", 9), _rec("猫", 2), _rec("图书馆", 5), _rec("咖啡", 2)]
    res = resolve_unknowns(chunks, sample_dictionary)
    assert [e.simplified for e in res.resolved] == ["图书馆", "猫", "咖啡"]
    assert res.resolved[1].traditional == "貓"
    assert res.unresolved == [UnresolvedChunk("玛丽", 9)]
    assert res.unresolved[0].to_record() == {"word": "玛丽", "frequency": 9}


def test_already_known_chunks_are_skipped(sample_dictionary):
    res = resolve_unknowns([_rec("猫", 3), _rec("狗", 1)], sample_dictionary, already_known={"猫"})
    assert [e.simplified for e in res.resolved] == ["狗"]
    assert res.skipped_known == 1


def test_enrich_word_list_with_levels(sample_dictionary):
    res = enrich_word_list(
        {"咖啡": "4", "猫": "1-3", "玛丽": "5"},
        sample_dictionary,
        already_known={"猫"},
        origin_tag="hacking-chinese-missing",
    )
    assert [(e.simplified, e.hsk_level, e.origin_tag) for e in res.resolved] == [
        ("咖啡", "4", "hacking-chinese-missing")
    ]
    assert res.unresolved == [UnresolvedChunk("玛丽", 0)]
    assert res.skipped_known == 1


def test_enrich_plain_word_iterable(sample_dictionary):
    res = enrich_word_list(["狗", "喝"], sample_dictionary)
    assert [e.pinyin_display for e in res.resolved] == ["gǒu", "hē"]
    assert all(e.hsk_level is None for e in res.resolved)
