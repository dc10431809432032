"""Dictionary loading and search."""
import logging
from enum import Enum
from pathlib import Path

from pydantic import ValidationError

from eigo_master.db.models import Dictionary, Word

logger = logging.getLogger(__name__)


class SearchMode(str, Enum):
    ENGLISH = "en"   # English -> Japanese
    JAPANESE = "ja"  # Japanese -> English


def load_dictionaries(directory: str) -> dict[str, Dictionary]:
    """
    Load every *.json dictionary in a directory, keyed by dictionary name.

    Files are read in name order. A file that cannot be read or parsed is
    logged and skipped.
    """
    path = Path(directory)
    if not path.is_dir():
        logger.warning("Dictionary directory %s not found", directory)
        return {}

    dictionaries: dict[str, Dictionary] = {}
    for file_path in sorted(path.glob("*.json")):
        try:
            dictionary = Dictionary.model_validate_json(file_path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error("Failed to load dictionary %s: %s", file_path, e)
            continue

        if dictionary.name in dictionaries:
            logger.warning("Dictionary %r in %s replaces an earlier one", dictionary.name, file_path.name)
        dictionaries[dictionary.name] = dictionary
        logger.info("Loaded %d words from %s", len(dictionary.words), file_path.name)

    if not dictionaries:
        logger.warning("No dictionaries found in %s", directory)
    return dictionaries


def search_words(dictionary: Dictionary, term: str, mode: SearchMode = SearchMode.ENGLISH) -> list[Word]:
    """Filter words by substring. An empty term matches everything."""
    if not term:
        return list(dictionary.words)

    if mode is SearchMode.ENGLISH:
        term = term.casefold()
        return [w for w in dictionary.words if term in w.english.casefold()]
    return [w for w in dictionary.words if term in w.japanese]
