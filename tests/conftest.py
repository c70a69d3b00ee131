import pytest

from zh_vocab_coverage.corpus.sources import CorpusRow
from zh_vocab_coverage.dictionary.cedict import CedictDictionary, CedictEntry
from zh_vocab_coverage.text.segment import TrieSegmenter


class FixedSegmenter:
    """Returns canned segmentations; unknown sentences fall back to one segment per char."""

    def __init__(self, table):
        self.table = dict(table)

    def segment(self, text):
        if text in self.table:
            return list(self.table[text])
        return list(text)


# Segmenter lexicon for the sample corpus. Words here are what a statistical
# segmenter would emit; the known vocabulary is chosen separately per test.
LEXICON = [
    "我", "你", "他", "她", "喜欢", "知道", "咖啡", "喝", "猫", "狗", "很", "高",
    "玛丽", "今天", "天气", "好", "不", "是", "学生", "老师", "图书馆", "去",
]


@pytest.fixture
def trie_segmenter():
    return TrieSegmenter(LEXICON)


@pytest.fixture
def sample_dictionary():
    return CedictDictionary.from_entries(
        [
            CedictEntry("咖啡", "咖啡", "ka1 fei1", ("coffee",)),
            CedictEntry("貓", "猫", "mao1", ("cat",)),
            CedictEntry("狗", "狗", "gou3", ("dog",)),
            CedictEntry("圖書館", "图书馆", "tu2 shu1 guan3", ("library",)),
            CedictEntry("喝", "喝", "he1", ("to drink",)),
        ]
    )


@pytest.fixture
def sample_corpus():
    return [
        CorpusRow(1, "我喜欢咖啡。", "I like coffee."),
        CorpusRow(2, "他喝咖啡。", "He drinks coffee."),
        CorpusRow(3, "我喜欢猫。", "I like cats."),
        CorpusRow(4, "她去图书馆。", "She goes to the library."),
        CorpusRow(5, "玛丽很高。", "Mary is tall."),
    ]
