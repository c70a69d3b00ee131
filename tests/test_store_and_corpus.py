import pytest

from zh_vocab_coverage.corpus.sources import (
    CorpusRow,
    SqliteCorpus,
    TsvCorpus,
    parse_tsv_row,
    simplify_rows,
)
from zh_vocab_coverage.errors import MalformedRecord, SourceUnavailable
from zh_vocab_coverage.store.db import (
    connect,
    create_bank,
    init_db,
    insert_sentences,
    load_known_words,
    load_user_vocabulary,
    record_run,
    source_counts,
    upsert_words,
    word_counts,
)
from zh_vocab_coverage.utils.io import write_tsv
from zh_vocab_coverage.vocab.entry import VocabularyEntry
from zh_vocab_coverage.vocab.sources import load_sqlite_vocabulary


def _entry(word, origin="corpus-cedict", freq=None):
    return VocabularyEntry(word, word, "", "", ("x",), origin, freq)


@pytest.fixture
def db(tmp_path):
    conn = connect(tmp_path / "vocab.db")
    init_db(conn)
    yield conn
    conn.close()


def test_upsert_words_is_idempotent(db):
    upsert_words(db, [_entry("咖啡", freq=3)])
    upsert_words(db, [_entry("咖啡", freq=12), _entry("猫")])
    rows = db.execute("SELECT simplified_zh, frequency_in_corpus FROM words_additional ORDER BY id").fetchall()
    assert [(r[0], r[1]) for r in rows] == [("咖啡", 12), ("猫", None)]


def test_upsert_rejects_unknown_table(db):
    with pytest.raises(ValueError):
        upsert_words(db, [_entry("猫")], table="sentences")


def test_known_words_span_both_tables(db):
    upsert_words(db, [_entry("我", origin="hsk")], table="words_hsk")
    upsert_words(db, [_entry("咖啡")])
    assert load_known_words(db) == {"我", "咖啡"}
    vocab = load_sqlite_vocabulary(db)
    assert vocab.get("我").origin_tag == "hsk"
    assert vocab.get("咖啡").definitions == ("x",)
    assert source_counts(db) == {"corpus-cedict": 1}


def test_user_vocabulary_unions_banks(db):
    create_bank(db, 1, "hsk1", ["我", "你"])
    create_bank(db, 1, "extra", ["你", "猫"])
    create_bank(db, 2, "other", ["狗"])
    assert load_user_vocabulary(db, 1).words == frozenset({"我", "你", "猫"})
    assert len(load_user_vocabulary(db, 3)) == 0


def test_sentences_and_counts(db):
    n = insert_sentences(db, [CorpusRow(10, "我喜欢猫。", "I like cats."), CorpusRow("x1", "你好", "")])
    assert n == 2
    counts = word_counts(db)
    assert counts["sentences"] == 2
    assert counts["words_hsk"] == 0
    run_id = record_run(db, "convergence", config_hash="abc", status="converged")
    assert run_id >= 1


def test_parse_tsv_row():
    assert parse_tsv_row(["7", "我喜欢猫", "I like cats"]) == CorpusRow(7, "我喜欢猫", "I like cats")
    assert parse_tsv_row(["a7", "你好"]) == CorpusRow("a7", "你好", "")
    assert parse_tsv_row(["8", "  "]) is None
    with pytest.raises(MalformedRecord):
        parse_tsv_row(["only-one"], line_no=3)


def test_tsv_corpus_is_reiterable_and_counts_malformed(tmp_path):
    p = tmp_path / "sentences.tsv"
    p.write_text("id\tzh\ten\n1\t我喜欢猫。\tI like cats.\nbroken\n2\t他喝咖啡。\tHe drinks coffee.\n", encoding="utf-8")
    corpus = TsvCorpus([p])
    first = list(corpus)
    second = list(corpus)
    assert [r.id for r in first] == [1, 2]
    assert first == second
    assert corpus.skipped_malformed == 1


def test_tsv_corpus_reads_what_write_tsv_writes(tmp_path):
    rows = [{"id": 1, "zh": "他说：“好”。", "en": "He said \"OK\" \\ back"}]
    p = write_tsv(tmp_path / "sentences.tsv", rows, ("id", "zh", "en"))
    assert list(TsvCorpus([p])) == [CorpusRow(1, "他说：“好”。", "He said \"OK\" \\ back")]


def test_tsv_corpus_missing_file(tmp_path):
    with pytest.raises(SourceUnavailable):
        TsvCorpus([tmp_path / "nope.tsv"]).validate()
    with pytest.raises(SourceUnavailable):
        TsvCorpus([]).validate()


def test_sqlite_corpus(tmp_path, db):
    insert_sentences(db, [CorpusRow(1, "我喜欢猫。", "I like cats.")])
    rows = list(SqliteCorpus(tmp_path / "vocab.db"))
    assert rows == [CorpusRow(1, "我喜欢猫。", "I like cats.")]


def test_sqlite_corpus_missing_table(tmp_path, db):
    with pytest.raises(SourceUnavailable):
        SqliteCorpus(tmp_path / "vocab.db", table="nope").validate()
    with pytest.raises(SourceUnavailable):
        SqliteCorpus(tmp_path / "missing.db").validate()


def test_simplify_rows():
    rows = list(simplify_rows([CorpusRow(1, "我喜歡貓", ""), CorpusRow(2, "我喜欢猫", "")]))
    assert [r.zh for r in rows] == ["我喜欢猫", "我喜欢猫"]
