"""Plausibility scorer: how much does a candidate look like English plaintext?"""

import re
from typing import List

COMMON_WORDS = {
    "the","and","of","to","a","in","is","it","you","that","he","was","for","on","are","as","with",
    "his","they","at","be","this","have","from","or","one","had","by","word","but","not","what",
    "all","were","we","when","your","can","said","there","each","which","she","do","how","their",
    "if","will","up","other","about","out","many","then","them","these","so","some","her","would",
    "make","like","into","him","has","two","more","very","know","just","first","get","over","think",
    "also","its","our","work","life","only","new","years","way","may","say","come","could","now",
    "than","my","well","people","hello","world","test","message","secret","password","admin","user",
    "data","information","text","content","example","sample","name","time","person","year",
    "government","day","man","hand","part","child","eye","woman","place","week","case","point",
    "company","right","group","problem","fact","money","lot","story","month","book","job","business",
    "issue","side","kind","head","house","service","friend","father","power","hour","game","line",
    "end","member","law","car","city","community","president","team","minute","idea","kid","body",
    "back","parent","face","others","level","office","door","health","art","war","history",
    "attack","dawn","meet","me","noon","here","flag","key",
}

_NORMAL_CHARS = re.compile(r"^[a-zA-Z0-9\s.,!?;:'\"()\-]+$")
_NAME_PATTERNS = [
    re.compile(r"^[aeiou][a-z]*[aeiou]$"),
    re.compile(r"^[bcdfghjklmnpqrstvwxyz][aeiou][a-z]*$"),
    re.compile(r"[aeiou][bcdfghjklmnpqrstvwxyz][aeiou]"),
]

W_COMMON = 0.4
W_WORD_LEN = 0.2
B_NORMAL_CHARS = 0.15
B_VOWELS = 0.1
B_WORD_SIZES = 0.1
B_SENTENCE = 0.05
B_NAME = 0.1
MAX_PENALTY = 0.5


def looks_like_name(word: str) -> bool:
    vowels = len(re.findall(r"[aeiou]", word))
    ratio = vowels / len(word)
    return 0.2 <= ratio <= 0.6 and any(p.search(word) for p in _NAME_PATTERNS)


def gibberish_penalty(words: List[str]) -> float:
    penalty = 0.0
    for w in words:
        if len(w) > 2 and not re.search(r"[aeiou]", w): penalty += 0.1
        if re.search(r"(.)\1{2,}", w): penalty += 0.15
        if len(w) > 3 and re.fullmatch(r"[bcdfghjklmnpqrstvwxyz]{3,}", w): penalty += 0.1
        if len(w) == 1 and not re.search(r"[aeiou]", w): penalty += 0.05
    return min(MAX_PENALTY, penalty)


def score(text: str) -> float:
    """
    Weighted blend in [0, 1]. Common-word ratio dominates, so adding
    dictionary words to a text never lowers its score on that term.
    """
    if not text:
        return 0.0
    clean = text.lower().strip()
    words = clean.split()
    if not words:
        return 0.0

    s = W_COMMON * sum(1 for w in words if w.strip(".,!?;:'\"()") in COMMON_WORDS) / len(words)
    avg_len = sum(len(w) for w in words) / len(words)
    s += W_WORD_LEN * max(0.0, 1 - abs(avg_len - 4.5) / 10)
    if _NORMAL_CHARS.match(text): s += B_NORMAL_CHARS

    vowels = len(re.findall(r"[aeiou]", clean))
    consonants = len(re.findall(r"[bcdfghjklmnpqrstvwxyz]", clean))
    if 0.2 <= vowels / (vowels + consonants or 1) <= 0.5: s += B_VOWELS
    if all(len(w) <= 20 for w in words): s += B_WORD_SIZES
    if re.search(r"[.!?]", text) or " " in text: s += B_SENTENCE
    if any(len(w) >= 3 and re.fullmatch(r"[a-z]+", w) and looks_like_name(w) for w in words):
        s += B_NAME

    s -= gibberish_penalty(words)
    return min(1.0, max(0.0, s))
