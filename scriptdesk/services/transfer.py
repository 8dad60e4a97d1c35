import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

from scriptdesk.errors import StorageFailure, ValidationFailure
from scriptdesk.schemas import ExportOutcome, ExportRequest, ImportOutcome
from scriptdesk.services.repository import ScriptRepository

logger = logging.getLogger(__name__)

ENGLISH = "English"
JAPANESE = "Japanese"


class FileChooser(Protocol):
    """Asks the user for a file; ``None`` means the user declined."""

    def choose_export_path(self, suggested_name: str) -> Optional[Path]: ...

    def choose_import_path(self, language: str) -> Optional[Path]: ...


class PresetFileChooser:
    """Replays paths the caller already picked (e.g. sent with an HTTP request)."""

    def __init__(self, export_path=None, english_path=None, japanese_path=None):
        self.export_path = export_path
        self.import_paths = {ENGLISH: english_path, JAPANESE: japanese_path}

    def choose_export_path(self, suggested_name: str) -> Optional[Path]:
        return Path(self.export_path) if self.export_path else None

    def choose_import_path(self, language: str) -> Optional[Path]:
        path = self.import_paths.get(language)
        return Path(path) if path else None


def render_document(title: Optional[str], english_text: str, japanese_text: str) -> str:
    sections = [f"[{ENGLISH}]\n{english_text}", f"[{JAPANESE}]\n{japanese_text}"]
    if title:
        sections.insert(0, f"--- {title} ---")
    return "\n\n".join(sections)


def suggested_file_name(title: Optional[str]) -> str:
    return f"{title}.txt" if title else "script.txt"


class ScriptTransfer:
    """
    Plain-text export of one script and paired-file import into the repository.

    Both operations return an outcome instead of raising: success, cancelled
    (the user declined a file choice) or failure with a message naming the
    step that failed.
    """

    def __init__(self, repository: ScriptRepository, encoding: str = "utf-8"):
        self.repository = repository
        self.encoding = encoding

    async def export_script(self, script: ExportRequest, chooser: FileChooser) -> ExportOutcome:
        path = chooser.choose_export_path(suggested_file_name(script.title))
        if path is None:
            logger.info("Export cancelled: no destination chosen")
            return ExportOutcome.declined()

        content = render_document(script.title, script.english_text or "", script.japanese_text or "")
        try:
            await asyncio.to_thread(path.write_text, content, encoding=self.encoding)
        except (OSError, UnicodeError) as e:
            logger.error(f"Export to {path} failed: {e}")
            return ExportOutcome.failure(f"could not write {path}: {e}")

        logger.info(f"Exported script to {path}")
        return ExportOutcome.ok(str(path))

    async def import_script(self, chooser: FileChooser) -> ImportOutcome:
        # 1. Both files must be chosen before anything is read or stored
        english_path = chooser.choose_import_path(ENGLISH)
        if english_path is None:
            logger.info("Import cancelled at English file")
            return ImportOutcome.declined()
        japanese_path = chooser.choose_import_path(JAPANESE)
        if japanese_path is None:
            logger.info("Import cancelled at Japanese file")
            return ImportOutcome.declined()

        # 2. Read both
        texts = {}
        for language, path in ((ENGLISH, english_path), (JAPANESE, japanese_path)):
            try:
                texts[language] = await asyncio.to_thread(path.read_text, encoding=self.encoding)
            except (OSError, UnicodeError) as e:
                logger.error(f"Import failed reading {language} file {path}: {e}")
                return ImportOutcome.failure(f"could not read {language} file {path}: {e}; nothing was saved")

        # 3. Store as one record
        try:
            script_id = await self.repository.create(
                {"english_text": texts[ENGLISH], "japanese_text": texts[JAPANESE]}
            )
        except (StorageFailure, ValidationFailure) as e:
            logger.error(f"Import failed saving script: {e}")
            return ImportOutcome.failure(f"files were read but saving failed: {e}")

        logger.info(f"Imported script {script_id} from {english_path} and {japanese_path}")
        return ImportOutcome.ok(script_id, texts[ENGLISH], texts[JAPANESE])
