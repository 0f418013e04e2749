import glob
import logging
import os

import pandas as pd

from .errors import ConflictError
from .grading import parse_synonyms
from .library import LibraryService
from .models import VocabularyCreate

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"word", "meaning"}
OPTIONAL_COLUMNS = ("part_of_speech", "example_source", "example_target", "image_url")


class VocabularyManager:
    """Imports vocabulary CSV files from a directory into the library."""

    def __init__(self, directory: str, library: LibraryService):
        self.directory = directory
        self.library = library

    def load_all(self) -> int:
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")
            return 0

        imported = 0
        csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
        for file_path in csv_files:
            file_name = os.path.basename(file_path)
            try:
                df = pd.read_csv(file_path, encoding="utf-8", dtype=str, keep_default_na=False)
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            missing = REQUIRED_COLUMNS - set(df.columns)
            if missing:
                logger.error(f"Skipping {file_name}: Missing columns {sorted(missing)}.")
                continue
            count = self.load_frame(df)
            logger.info(f"Imported {count} of {len(df)} words from {file_name}")
            imported += count
        return imported

    def load_frame(self, df: pd.DataFrame) -> int:
        """Insert every row whose word is not in the library yet."""
        imported = 0
        for record in df.to_dict("records"):
            word = str(record.get("word", "")).strip()
            meaning = str(record.get("meaning", "")).strip()
            if not word or not meaning:
                continue
            payload = VocabularyCreate(
                word=word,
                meaning=meaning,
                synonyms=parse_synonyms(record.get("synonyms", "")),
                **{name: record.get(name) or None for name in OPTIONAL_COLUMNS},
            )
            try:
                self.library.create(payload)
            except ConflictError:
                logger.debug(f"Skipping existing word '{word}'")
                continue
            imported += 1
        return imported
