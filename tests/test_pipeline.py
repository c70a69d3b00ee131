import json

import pytest

from zh_vocab_coverage.config import PipelineConfig
from zh_vocab_coverage.coverage.converge import ConvergenceStatus
from zh_vocab_coverage.dictionary.cedict import CedictDictionary
from zh_vocab_coverage.errors import SourceUnavailable
from zh_vocab_coverage.pipeline.pipeline import (
    coverage_stats,
    enrich_chunk_report,
    enrich_word_file,
    run_pipeline,
)
from zh_vocab_coverage.store.db import connect
from zh_vocab_coverage.utils.io import read_tsv, write_tsv

CEDICT = """\
# test dictionary
咖啡 咖啡 [ka1 fei1] /coffee/
貓 猫 [mao1] /cat/
喝 喝 [he1] /to drink/
圖書館 图书馆 [tu2 shu1 guan3] /library/
"""

CORPUS = (
    "id\tzh\ten\n"
    "1\t我喜欢咖啡。\tI like coffee.\n"
    "2\t他喝咖啡。\tHe drinks coffee.\n"
    "3\t我喜欢猫。\tI like cats.\n"
    "4\t她去图书馆。\tShe goes to the library.\n"
    "5\t玛丽很高。\tMary is tall.\n"
)

KNOWN = ["我", "喜欢", "他", "她", "去", "很", "高"]


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "cedict.u8").write_text(CEDICT, encoding="utf-8")
    (tmp_path / "sentences.tsv").write_text(CORPUS, encoding="utf-8")
    (tmp_path / "known.json").write_text(
        json.dumps([{"simplified_zh": w, "traditional_zh": w} for w in KNOWN], ensure_ascii=False),
        encoding="utf-8",
    )
    return tmp_path


def _config(ws, **kw):
    base = dict(
        cedict_path=str(ws / "cedict.u8"),
        corpus_tsv=(str(ws / "sentences.tsv"),),
        entry_json=(str(ws / "known.json"),),
        out_dir=str(ws / "out"),
    )
    base.update(kw)
    return PipelineConfig(**base)


def test_end_to_end_writes_artifacts(workspace, trie_segmenter):
    state = run_pipeline(_config(workspace), segmenter=trie_segmenter)
    assert state.status is ConvergenceStatus.CONVERGED

    out = workspace / "out"
    chunks = read_tsv(out / "unknown_chunks.tsv")
    assert chunks == [{"chunk": "玛丽", "count": "1", "example_ids": "5"}]

    enriched = json.loads((out / "words_corpus_cedict.json").read_text(encoding="utf-8"))
    assert sorted(r["simplified_zh"] for r in enriched) == ["咖啡", "喝", "图书馆", "猫"]
    coffee = next(r for r in enriched if r["simplified_zh"] == "咖啡")
    assert coffee["pinyin"] == "kā fēi"
    assert coffee["frequency_in_corpus"] == 2
    assert coffee["source"] == "corpus-cedict"

    notfound = json.loads((out / "words_corpus_notfound.json").read_text(encoding="utf-8"))
    assert notfound == [{"word": "玛丽", "frequency": 1}]


def test_db_upsert_and_run_record(workspace, trie_segmenter):
    cfg = _config(workspace, db_path=str(workspace / "vocab.db"), write_db=True, notes="test run")
    run_pipeline(cfg, segmenter=trie_segmenter)
    run_pipeline(cfg, segmenter=trie_segmenter)

    conn = connect(workspace / "vocab.db")
    try:
        stats = coverage_stats(conn)
        runs = conn.execute("SELECT kind, status, config_hash, notes FROM runs ORDER BY id").fetchall()
        meta = dict(conn.execute("SELECT key, value FROM meta").fetchall())
    finally:
        conn.close()

    assert stats["words_additional"] == 4
    assert stats["additional_by_source"] == {"corpus-cedict": 4}
    assert [tuple(r) for r in runs] == [
        ("convergence", "converged", cfg.config_hash(), "test run"),
        # second run starts from the merged db vocabulary
        ("convergence", "converged", cfg.config_hash(), "test run"),
    ]
    assert meta["last_convergence_status"] == "converged"
    assert meta["config_hash"] == cfg.config_hash()


def test_missing_sources_fail_before_any_output(workspace, trie_segmenter):
    with pytest.raises(SourceUnavailable):
        run_pipeline(_config(workspace, cedict_path=str(workspace / "missing.u8")), segmenter=trie_segmenter)
    with pytest.raises(SourceUnavailable):
        run_pipeline(_config(workspace, corpus_tsv=(str(workspace / "missing.tsv"),)), segmenter=trie_segmenter)
    with pytest.raises(SourceUnavailable):
        run_pipeline(_config(workspace, corpus_tsv=()), segmenter=trie_segmenter)
    assert not (workspace / "out").exists()


def test_enrich_word_file_by_band(workspace):
    csv_path = workspace / "missing_hsk.csv"
    csv_path.write_text("1-3,4,5,6\n猫,咖啡,,\n我,,玛丽,\n", encoding="utf-8")
    dictionary = CedictDictionary.load(workspace / "cedict.u8")

    res = enrich_word_file(
        csv_path, dictionary, {"我"}, workspace / "interim", origin_tag="hacking-chinese-missing"
    )
    assert {(e.simplified, e.hsk_level) for e in res.resolved} == {("猫", "1-3"), ("咖啡", "4")}
    assert res.skipped_known == 1

    notfound = json.loads((workspace / "interim" / "words_additional.notfound.json").read_text(encoding="utf-8"))
    assert notfound == [{"word": "玛丽", "hsk_approx": "5"}]
    written = json.loads((workspace / "interim" / "words_additional.json").read_text(encoding="utf-8"))
    assert {r["source"] for r in written} == {"hacking-chinese-missing"}


def test_enrich_word_file_single_column(workspace):
    csv_path = workspace / "custom.csv"
    csv_path.write_text("word\n喝\n狗\n", encoding="utf-8")
    dictionary = CedictDictionary.load(workspace / "cedict.u8")
    res = enrich_word_file(
        csv_path, dictionary, set(), workspace / "interim", origin_tag="custom", column="word", stem="custom"
    )
    assert [e.simplified for e in res.resolved] == ["喝"]
    assert (workspace / "interim" / "custom.notfound.json").exists()


def test_enrich_chunk_report(workspace):
    report = write_tsv(
        workspace / "unknown_chunks.tsv",
        [
            {"chunk": "咖啡", "count": 2, "example_ids": "1,2"},
            {"chunk": "玛丽", "count": 1, "example_ids": "5"},
            {"chunk": "猫", "count": 1, "example_ids": "3"},
        ],
        ("chunk", "count", "example_ids"),
    )
    dictionary = CedictDictionary.load(workspace / "cedict.u8")
    res = enrich_chunk_report(report, dictionary, {"猫"}, workspace / "interim")
    assert [(e.simplified, e.frequency) for e in res.resolved] == [("咖啡", 2)]
    assert [u.chunk for u in res.unresolved] == ["玛丽"]
    assert res.skipped_known == 1


def test_config_hash_tracks_knobs():
    a = PipelineConfig()
    b = PipelineConfig(max_iterations=3)
    assert a.to_json() == PipelineConfig().to_json()
    assert a.config_hash() != b.config_hash()
    assert PipelineConfig(notes="x").config_hash() == a.config_hash()
    with pytest.raises(ValueError):
        PipelineConfig(min_coverage=0.9, max_coverage=0.5)
    with pytest.raises(ValueError):
        PipelineConfig(max_iterations=0)


def test_budget_cut_on_first_pass_stores_empty_unknown_count(workspace, trie_segmenter):
    cfg = _config(workspace, db_path=str(workspace / "vocab.db"), row_budget=2)
    state = run_pipeline(cfg, segmenter=trie_segmenter)
    assert state.status is ConvergenceStatus.EXHAUSTED

    conn = connect(workspace / "vocab.db")
    try:
        meta = dict(conn.execute("SELECT key, value FROM meta").fetchall())
        notes = conn.execute("SELECT notes FROM runs").fetchone()[0]
    finally:
        conn.close()
    assert meta["last_convergence_status"] == "exhausted"
    assert meta["last_convergence_unknown"] == ""
    assert notes == "budget"
