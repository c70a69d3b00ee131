import pytest

from zh_vocab_coverage.dictionary.cedict import CedictDictionary, CedictEntry, parse_cedict_line
from zh_vocab_coverage.dictionary.pinyin import numeric_to_tone_marks, syllable_to_tone_mark
from zh_vocab_coverage.errors import MalformedRecord, SourceUnavailable

CEDICT_SAMPLE = """\
# CC-CEDICT
# Community maintained free Chinese-English dictionary.
咖啡 咖啡 [ka1 fei1] /coffee (loanword)/CL:杯[bei1]/
貓 猫 [mao1] /cat/CL:隻|只[zhi1]/
this line is broken
貓 猫 [mao2] /used in 貓腰|猫腰[mao2 yao1]/

圖書館 图书馆 [tu2 shu1 guan3] /library/CL:家[jia1],個|个[ge4]/
"""


@pytest.mark.parametrize(
    "numeric,marked",
    [
        ("ka1 fei1", "kā fēi"),
        ("hao3", "hǎo"),
        ("dou4", "dòu"),
        ("liu2", "liú"),
        ("gui4", "guì"),
        ("lu:4", "lǜ"),
        ("lv3", "lǚ"),
        ("nu:e4", "nüè"),
        ("xian1", "xiān"),
        ("ma5", "ma"),
        ("tu2 shu1 guan3", "tú shū guǎn"),
    ],
)
def test_numeric_to_tone_marks(numeric, marked):
    assert numeric_to_tone_marks(numeric) == marked


def test_syllable_without_tone_digit_is_unchanged():
    assert syllable_to_tone_mark("r") == "r"
    assert syllable_to_tone_mark("，") == "，"


def test_parse_line():
    e = parse_cedict_line("咖啡 咖啡 [ka1 fei1] /coffee (loanword)/CL:杯[bei1]/")
    assert e == CedictEntry("咖啡", "咖啡", "ka1 fei1", ("coffee (loanword)", "CL:杯[bei1]"))


def test_parse_comment_and_blank():
    assert parse_cedict_line("# comment") is None
    assert parse_cedict_line("   ") is None


def test_parse_malformed_raises():
    with pytest.raises(MalformedRecord) as exc:
        parse_cedict_line("not an entry", line_no=12)
    assert exc.value.line_no == 12


def test_from_lines_first_entry_wins_and_counts_skips():
    d = CedictDictionary.from_lines(CEDICT_SAMPLE.splitlines())
    assert len(d) == 3
    assert d.get("猫").pinyin == "mao1"
    assert "图书馆" in d
    assert d.get("狗") is None
    assert d.skipped_lines == 1


def test_load_from_file(tmp_path):
    path = tmp_path / "cedict_ts.u8"
    path.write_text(CEDICT_SAMPLE, encoding="utf-8")
    d = CedictDictionary.load(path)
    assert d.get("咖啡").definitions[0] == "coffee (loanword)"
    assert sorted(d) == sorted(["咖啡", "猫", "图书馆"])


def test_load_missing_file(tmp_path):
    with pytest.raises(SourceUnavailable) as exc:
        CedictDictionary.load(tmp_path / "nope.u8")
    assert exc.value.source == "dictionary"


def test_from_entries_first_wins():
    d = CedictDictionary.from_entries(
        [CedictEntry("貓", "猫", "mao1", ("cat",)), CedictEntry("貓", "猫", "mao2", ("x",))]
    )
    assert d.get("猫").pinyin == "mao1"
