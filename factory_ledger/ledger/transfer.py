"""
Import, Export and Backup

Moves the whole ledger in and out of a single JSON file:

    {
        "expenses": [...],
        "settings": {...},
        "factories": [...],
        "exportDate": "2024-03-31T10:00:00",     (or "backupDate")
        "version": "1.0.0",
        "appName": "SS Mudyf Accounting System"  (exports only)
    }

The host application owns the file dialogs. This module only receives
the path the user picked, through the FileDialog protocol.

CRITICAL: An import is parsed and schema-checked in full before the
ledger is touched. A bad file leaves the ledger exactly as it was.
"""

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field

from factory_ledger.config import get_settings
from factory_ledger.exceptions import InvalidImportFormatError
from factory_ledger.ledger.ledger import ExpenseLedger
from factory_ledger.logs import get_logger
from factory_ledger.models.expense import FACTORIES
from factory_ledger.services.storage import StorageError


EXPORT_FILENAME = "ss-mudyf-accounting-data.json"


class DialogResult(BaseModel):
    """What the host file dialog returned."""

    canceled: bool
    file_path: Optional[Path] = None
    file_paths: list[Path] = Field(default_factory=list)

    @property
    def selected(self) -> Optional[Path]:
        if self.canceled:
            return None
        if self.file_path is not None:
            return self.file_path
        return self.file_paths[0] if self.file_paths else None


class FileDialog(Protocol):
    """Host collaborator that asks the user for a file location."""

    def ask_save_path(self, default_name: str) -> DialogResult:
        ...

    def ask_open_path(self) -> DialogResult:
        ...


class ImportSummary(BaseModel):
    """Outcome of a successful import."""

    previous_count: int = Field(ge=0)
    imported_count: int = Field(ge=0)
    settings_restored: bool

    @property
    def message(self) -> str:
        return (
            f"Data imported successfully! Loaded {self.imported_count} expenses "
            f"(previously {self.previous_count})"
        )


class DataTransferService:
    """Export, backup and import for one ledger."""

    def __init__(self, ledger: ExpenseLedger):
        self._ledger = ledger
        self._settings = get_settings().app
        self._logger = get_logger(__name__)

    def build_payload(self, kind: str = "export", now: Optional[datetime] = None) -> dict[str, Any]:
        """
        Assemble the export or backup document.

        Args:
            kind: "export" (stamped exportDate and appName) or "backup"
                  (stamped backupDate)
            now: Timestamp to stamp, defaults to the current time
        """
        if kind not in ("export", "backup"):
            raise ValueError(f"Unknown payload kind: {kind}")

        now = now or datetime.now()
        state = self._ledger.snapshot()
        payload: dict[str, Any] = {
            "expenses": state["expenses"],
            "settings": state["settings"],
            "factories": [f.model_dump() for f in FACTORIES.values()],
        }
        if kind == "export":
            payload["exportDate"] = now.isoformat()
        else:
            payload["backupDate"] = now.isoformat()
        payload["version"] = self._settings.export_version
        if kind == "export":
            payload["appName"] = self._settings.app_name
        return payload

    def _write(self, path: Path, payload: dict[str, Any]) -> None:
        try:
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}")

    def export_to(self, dialog: FileDialog, now: Optional[datetime] = None) -> Optional[Path]:
        """
        Ask for a location and write an export there.

        Returns:
            The written path, or None if the user cancelled
        """
        target = dialog.ask_save_path(EXPORT_FILENAME).selected
        if target is None:
            return None

        self._write(target, self.build_payload("export", now))
        self._logger.info("data_exported", path=str(target), expense_count=len(self._ledger))
        return target

    def backup(self, directory: Path, today: Optional[date] = None) -> Path:
        """Write a dated backup file into a directory and return its path."""
        today = today or date.today()
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / f"ss-mudyf-backup-{today.isoformat()}.json"

        self._write(target, self.build_payload("backup"))
        self._logger.info("backup_created", path=str(target), expense_count=len(self._ledger))
        return target

    def parse_payload(self, text: str) -> dict[str, Any]:
        """
        Decode an import file and check its outer structure.

        Raises:
            InvalidImportFormatError: If the text is not JSON, not an
                                      object, or lacks an `expenses` array
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidImportFormatError(f"not valid JSON: {e.msg}")

        if not isinstance(data, dict):
            raise InvalidImportFormatError("top level must be an object")
        if "expenses" not in data:
            raise InvalidImportFormatError("missing expenses")
        if not isinstance(data["expenses"], list):
            raise InvalidImportFormatError("expenses must be an array")
        if data.get("settings") is not None and not isinstance(data["settings"], dict):
            raise InvalidImportFormatError("settings must be an object")
        return data

    def import_text(self, text: str) -> ImportSummary:
        """
        Replace the ledger with the contents of an export or backup.

        Raises:
            InvalidImportFormatError: On any schema problem (ledger unchanged)
            PersistenceSyncError: If the import was applied but not saved
        """
        data = self.parse_payload(text)
        previous = len(self._ledger)
        settings = data.get("settings")

        imported = self._ledger.replace_all(data["expenses"], settings=settings)
        summary = ImportSummary(
            previous_count=previous,
            imported_count=imported,
            settings_restored=settings is not None,
        )
        self._logger.info(
            "data_imported",
            previous_count=previous,
            imported_count=imported,
            settings_restored=summary.settings_restored,
        )
        return summary

    def import_from(self, dialog: FileDialog) -> Optional[ImportSummary]:
        """
        Ask for a file and import it.

        Returns:
            ImportSummary, or None if the user cancelled
        """
        source = dialog.ask_open_path().selected
        if source is None:
            return None

        try:
            text = Path(source).read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise InvalidImportFormatError("not valid UTF-8 text")
        except OSError as e:
            raise StorageError(f"Failed to read {source}: {e}")
        return self.import_text(text)
