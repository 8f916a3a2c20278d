# dictionary.py - Token dictionary substitution
# ============================================================================
# FILE: repo_archive/core/dictionary.py
# Replaces frequent code tokens and repeated substrings with short markers
# ============================================================================

import re
import logging
from collections import Counter
from typing import Dict, List, Tuple

from ..exceptions import CorruptPayload

logger = logging.getLogger(__name__)

# Private use codepoint; literal occurrences in input are escaped by doubling.
DELIMITER = "\ue000"

CANDIDATE_TOKENS: List[str] = [
    "function", "const", "let", "var", "return", "if", "else", "for", "while",
    "import", "export", "default", "class", "extends", "implements",
    "interface", "type", "string", "number", "boolean", "object", "array",
    "console.log", "console.error", "console.warn",
    "document.", "window.", "localStorage.", "sessionStorage.",
    ".length", ".push(", ".pop()", ".shift()", ".unshift(",
    ".map(", ".filter(", ".reduce(", ".forEach(", ".find(",
    "async ", "await ", "Promise", "then(", "catch(",
    "===", "!==", "&&", "||", "++", "--",
    "true", "false", "null", "undefined",
]

_WORD_RUN = re.compile(r"[A-Za-z0-9_\-.]+")
_TOKEN = re.compile(re.escape(DELIMITER) + r"([0-9a-z]*)" + re.escape(DELIMITER))

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def make_token(token_id: int) -> str:
    return f"{DELIMITER}{_to_base36(token_id)}{DELIMITER}"


class DictionaryCodec:
    """
    Reversible substitution of frequent substrings.

    Patterns are picked by counting the input, then replaced in a single
    left-to-right pass (longest pattern first) so inserted tokens are never
    rescanned. The returned dictionary maps token -> original substring.
    """

    def __init__(
        self,
        candidates: List[str] = None,
        keyword_threshold: int = 3,
        repeat_threshold: int = 2,
        min_length: int = 4,
        max_length: int = 50,
        max_repeated: int = 100,
    ):
        self.candidates = list(candidates) if candidates is not None else list(CANDIDATE_TOKENS)
        self.keyword_threshold = keyword_threshold
        self.repeat_threshold = repeat_threshold
        self.min_length = min_length
        self.max_length = max_length
        self.max_repeated = max_repeated

    def compress(self, text: str) -> Tuple[str, Dict[str, str]]:
        patterns: Dict[str, str] = {}  # pattern -> token
        token_id = 0

        for pattern in self.candidates:
            if pattern in patterns:
                continue
            if text.count(pattern) > self.keyword_threshold:
                patterns[pattern] = make_token(token_id)
                token_id += 1

        for substring, count in self.find_repeated_strings(text):
            if count > self.repeat_threshold and substring not in patterns:
                patterns[substring] = make_token(token_id)
                token_id += 1

        escaped = text.replace(DELIMITER, DELIMITER * 2)
        if not patterns:
            return escaped, {}

        ordered = sorted(patterns, key=len, reverse=True)
        matcher = re.compile("|".join(re.escape(p) for p in ordered))
        used: Dict[str, str] = {}

        def _substitute(match: "re.Match") -> str:
            token = patterns[match.group(0)]
            used[token] = match.group(0)
            return token

        substituted = matcher.sub(_substitute, escaped)
        logger.debug(
            f"Dictionary substitution: {len(used)}/{len(patterns)} patterns used, "
            f"{len(text)} -> {len(substituted)} chars"
        )
        return substituted, used

    def decompress(self, text: str, dictionary: Dict[str, str]) -> str:
        def _expand(match: "re.Match") -> str:
            if not match.group(1):
                return DELIMITER
            token = match.group(0)
            try:
                return dictionary[token]
            except KeyError:
                raise CorruptPayload(f"unknown dictionary token {match.group(1)!r}") from None

        return _TOKEN.sub(_expand, text)

    def find_repeated_strings(self, text: str) -> List[Tuple[str, int]]:
        """
        Count every substring of length min_length..max_length made of
        [A-Za-z0-9_.-] and return the most frequent ones seen more than once.

        Cost is O(n * max_length); callers only run this on large payloads
        that already passed the size gate.
        """
        counts: Counter = Counter()
        min_len = self.min_length
        for run in _WORD_RUN.finditer(text):
            word = run.group(0)
            size = len(word)
            for start in range(size - min_len + 1):
                stop = min(start + self.max_length, size)
                for end in range(start + min_len, stop + 1):
                    counts[word[start:end]] += 1

        return [(s, c) for s, c in counts.most_common(self.max_repeated) if c > 1]
