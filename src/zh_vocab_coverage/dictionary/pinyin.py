"""
dictionary/pinyin.py

Numbered pinyin (CC-CEDICT style, "bu4 hui4") -> tone-marked pinyin ("bù huì").

Rule per syllable:
- no trailing digit: unchanged
- strip the digit, lowercase, normalize "u:" / "v" to "ü"
- tone 5 (neutral) or any digit outside 1-4: no mark
- otherwise mark the first vowel group found in precedence order
  a, e, ou, o, iu, ui, i, u, ü  ("ou" marks the o; "iu"/"ui" mark the second vowel)
"""

from __future__ import annotations

import re

TONE_MARKS = {
    "a": "āáǎàa",
    "e": "ēéěèe",
    "i": "īíǐìi",
    "o": "ōóǒòo",
    "u": "ūúǔùu",
    "ü": "ǖǘǚǜü",
}

VOWEL_PRECEDENCE = ("a", "e", "ou", "o", "iu", "ui", "i", "u", "ü")

# which letter of a two-letter group carries the mark
_MARK_TARGET = {"ou": "o", "iu": "u", "ui": "i"}

_SYLLABLE_RE = re.compile(r"^(.*?)(\d)$")


def syllable_to_tone_mark(syllable: str) -> str:
    m = _SYLLABLE_RE.match(syllable)
    if not m:
        return syllable

    base = m.group(1).lower().replace("u:", "ü").replace("v", "ü")
    tone = int(m.group(2))
    if not 1 <= tone <= 4:
        return base

    for group in VOWEL_PRECEDENCE:
        idx = base.find(group)
        if idx < 0:
            continue
        target = _MARK_TARGET.get(group, group)
        pos = idx + group.index(target)
        base = base[:pos] + TONE_MARKS[target][tone - 1] + base[pos + 1 :]
        break
    return base


def numeric_to_tone_marks(pinyin: str) -> str:
    return " ".join(syllable_to_tone_mark(s) for s in (pinyin or "").split(" "))
