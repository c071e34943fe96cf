"""
Durable per-run storage of pipeline errors.

Errors are appended to {websites_dir}/{website_id}/failed-components/{type}.error.json,
one JSON array per section type, so they outlive the in-memory queue.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from ...core.config import Config
from ..models import SectionType
from .errors import PAGE_SCOPE, PipelineError

logger = logging.getLogger(__name__)

FAILED_COMPONENTS_DIRNAME = "failed-components"
ERROR_FILE_SUFFIX = ".error.json"


class FailedComponentStore:
    """
    Reads and writes failed-component error files.

    Writers to the same type file are not locked against each other;
    callers serialize concurrent writes.
    """

    def __init__(self, websites_dir: Optional[str] = None):
        self.websites_dir = Path(websites_dir or Config.WEBSITES_DIR)

    def directory(self, website_id: str) -> Path:
        return self.websites_dir / website_id / FAILED_COMPONENTS_DIRNAME

    def path_for(self, website_id: str, component_type: Optional[SectionType]) -> Path:
        scope = SectionType(component_type).value if component_type else PAGE_SCOPE
        return self.directory(website_id) / f"{scope}{ERROR_FILE_SUFFIX}"

    def _read_file(self, path: Path) -> List[dict]:
        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable error file {path}: {e}")
            return []
        return parsed if isinstance(parsed, list) else [parsed]

    def save(self, error: PipelineError) -> Path:
        """
        Append an error to its type file.

        Raises:
            ValueError: If the error has no website_id
        """
        if not error.website_id:
            raise ValueError("Cannot save failed component without website_id")

        path = self.path_for(error.website_id, error.component_type)
        path.parent.mkdir(parents=True, exist_ok=True)

        records = self._read_file(path) if path.exists() else []
        records.append(error.model_dump(mode="json"))
        path.write_text(json.dumps(records, indent=2), encoding="utf-8")

        logger.info(f"Saved {error.code.value} for {error.scope} to {path}")
        return path

    def load(self, website_id: str) -> List[PipelineError]:
        """All persisted errors for a run, merged across type files."""
        directory = self.directory(website_id)
        if not directory.exists():
            return []

        errors: List[PipelineError] = []
        for path in sorted(directory.glob(f"*{ERROR_FILE_SUFFIX}")):
            for record in self._read_file(path):
                try:
                    errors.append(PipelineError.model_validate(record))
                except ValidationError as e:
                    logger.warning(f"Skipping malformed error record in {path}: {e}")
        return errors

    def clear_type(self, website_id: str, component_type: Optional[SectionType]) -> bool:
        path = self.path_for(website_id, component_type)
        if path.exists():
            path.unlink()
            return True
        return False

    def clear_all(self, website_id: str) -> int:
        directory = self.directory(website_id)
        if not directory.exists():
            return 0
        files = list(directory.glob(f"*{ERROR_FILE_SUFFIX}"))
        for path in files:
            path.unlink()
        logger.info(f"Cleared {len(files)} failed-component files for {website_id}")
        return len(files)
