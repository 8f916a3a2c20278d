# tests/test_core/test_dictionary.py

import pytest

from repo_archive.core.dictionary import DELIMITER, DictionaryCodec, make_token
from repo_archive.exceptions import CorruptPayload, ErrorKind


SOURCE = "\n".join(
    f"const value{i} = await fetchRecord(id); console.log(value{i}.length);"
    for i in range(20)
)


def test_round_trip_code():
    codec = DictionaryCodec()
    substituted, dictionary = codec.compress(SOURCE)

    assert dictionary, "frequent tokens should be substituted"
    assert len(substituted) < len(SOURCE)
    assert codec.decompress(substituted, dictionary) == SOURCE


def test_tokens_are_unique_and_wrapped():
    codec = DictionaryCodec()
    _, dictionary = codec.compress(SOURCE)

    assert len(set(dictionary)) == len(dictionary)
    for token in dictionary:
        assert token.startswith(DELIMITER) and token.endswith(DELIMITER)


def test_infrequent_keywords_are_left_alone():
    codec = DictionaryCodec()
    substituted, dictionary = codec.compress("return x; return y;")
    assert "return" not in dictionary.values()
    assert substituted == "return x; return y;"


@pytest.mark.parametrize(
    "text",
    [
        "",
        DELIMITER,
        DELIMITER * 7,
        f"{DELIMITER}0{DELIMITER}",
        f"{DELIMITER}1{DELIMITER} const const const const const",
        (f"console.log{DELIMITER}console.log{DELIMITER}{DELIMITER}" * 10),
        ("functionfunction" + DELIMITER) * 12,
    ],
)
def test_round_trip_with_delimiter_in_input(text):
    """Literal delimiters never collide with generated tokens"""
    codec = DictionaryCodec()
    substituted, dictionary = codec.compress(text)
    assert codec.decompress(substituted, dictionary) == text


def test_find_repeated_strings_limits():
    codec = DictionaryCodec(max_repeated=5)
    repeated = codec.find_repeated_strings("alpha_beta alpha_beta alpha_beta gamma")

    assert len(repeated) <= 5
    assert all(count > 1 for _, count in repeated)
    assert all(4 <= len(s) <= 50 for s, _ in repeated)
    counts = [c for _, c in repeated]
    assert counts == sorted(counts, reverse=True)


def test_repeated_substrings_are_substituted():
    codec = DictionaryCodec(candidates=[])
    text = "repository_service " * 5
    substituted, dictionary = codec.compress(text)

    assert dictionary
    assert len(substituted) < len(text)
    assert codec.decompress(substituted, dictionary) == text


def test_unknown_token_is_corrupt():
    codec = DictionaryCodec()
    with pytest.raises(CorruptPayload) as exc:
        codec.decompress(f"x{make_token(42)}y", {})
    assert exc.value.kind is ErrorKind.CORRUPT_PAYLOAD
