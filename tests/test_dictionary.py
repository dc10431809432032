"""Tests for dictionary loading and search."""
import json
from pathlib import Path

import pytest

from eigo_master.services.dictionary import SearchMode, load_dictionaries, search_words

BUNDLED_DIR = Path(__file__).resolve().parent.parent / "dictionaries"


def _write(directory: Path, filename: str, data) -> None:
    text = data if isinstance(data, str) else json.dumps(data, ensure_ascii=False)
    (directory / filename).write_text(text, encoding="utf-8")


class TestLoadDictionaries:
    def test_bundled_dictionaries(self):
        dictionaries = load_dictionaries(str(BUNDLED_DIR))

        assert {"Level 1", "Level 2"} <= set(dictionaries)
        assert all(d.words for d in dictionaries.values())

    def test_loads_in_file_name_order(self, tmp_path):
        _write(tmp_path, "b.json", {"name": "Second", "words": [{"english": "dog", "japanese": "犬"}]})
        _write(tmp_path, "a.json", {"name": "First", "words": [{"english": "cat", "japanese": "猫"}]})

        dictionaries = load_dictionaries(str(tmp_path))

        assert list(dictionaries) == ["First", "Second"]
        assert dictionaries["Second"].words[0].japanese == "犬"

    def test_invalid_files_skipped(self, tmp_path):
        """Broken JSON and wrong shape: skipped, the rest still load."""
        _write(tmp_path, "broken.json", "{not json")
        _write(tmp_path, "shape.json", {"name": "No words", "words": [{"english": ""}]})
        _write(tmp_path, "good.json", {"name": "Good", "words": []})
        _write(tmp_path, "notes.txt", "ignored")

        dictionaries = load_dictionaries(str(tmp_path))

        assert list(dictionaries) == ["Good"]

    def test_spellings_are_stripped(self, tmp_path):
        _write(tmp_path, "a.json", {"name": "Padded", "words": [{"english": " apple ", "japanese": "りんご "}]})

        [word] = load_dictionaries(str(tmp_path))["Padded"].words

        assert (word.english, word.japanese) == ("apple", "りんご")

    def test_blank_spelling_skips_file(self, tmp_path):
        _write(tmp_path, "blank.json", {"name": "Blank", "words": [{"english": "   ", "japanese": "空白"}]})
        _write(tmp_path, "good.json", {"name": "Good", "words": []})

        assert list(load_dictionaries(str(tmp_path))) == ["Good"]

    def test_duplicate_name_last_wins(self, tmp_path):
        _write(tmp_path, "a.json", {"name": "Same", "words": []})
        _write(tmp_path, "b.json", {"name": "Same", "words": [{"english": "dog", "japanese": "犬"}]})

        dictionaries = load_dictionaries(str(tmp_path))

        assert len(dictionaries["Same"].words) == 1

    def test_missing_directory(self, tmp_path):
        assert load_dictionaries(str(tmp_path / "nope")) == {}


class TestSearchWords:
    def test_english_substring_ignores_case(self, dictionary):
        result = search_words(dictionary, "AT", SearchMode.ENGLISH)
        assert [w.english for w in result] == ["cat", "water"]

    def test_japanese_substring(self, dictionary):
        result = search_words(dictionary, "犬", SearchMode.JAPANESE)
        assert [w.english for w in result] == ["dog"]

    def test_english_term_does_not_match_japanese(self, dictionary):
        assert search_words(dictionary, "りんご", SearchMode.ENGLISH) == []

    @pytest.mark.parametrize("mode", list(SearchMode))
    def test_empty_term_matches_all(self, dictionary, mode):
        assert search_words(dictionary, "", mode) == dictionary.words
