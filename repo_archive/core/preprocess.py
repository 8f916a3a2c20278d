# preprocess.py - Text normalization before compression
# ============================================================================
# FILE: repo_archive/core/preprocess.py
# Whitespace / comment / quote normalization (one-way)
# ============================================================================

import re

_HORIZONTAL_WS = re.compile(r"[ \t]+")
_BLANK_LINES = re.compile(r"\n\s*\n")
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_LINE_COMMENT = re.compile(r"//.*$", re.MULTILINE)
_CURLY_DOUBLE = re.compile("[\u201c\u201d]")
_CURLY_SINGLE = re.compile("[\u2018\u2019]")


class TextPreprocessor:
    """
    Shrinks source text before dictionary substitution.

    NOTE: this is a lossy transform and postprocess() cannot undo it.
    Comment stripping is a plain regex pass and is not language aware,
    so `//` or `/* */` inside string literals (URLs included) is removed too.
    """

    def preprocess(self, text: str) -> str:
        text = _HORIZONTAL_WS.sub(" ", text)
        text = _BLANK_LINES.sub("\n", text)
        text = _BLOCK_COMMENT.sub("", text)
        text = _LINE_COMMENT.sub("", text)
        text = _CURLY_DOUBLE.sub('"', text)
        text = _CURLY_SINGLE.sub("'", text)
        return text.strip()

    def postprocess(self, text: str) -> str:
        # Identity: formatting removed by preprocess() is not restored.
        return text
