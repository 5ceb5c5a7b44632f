"""Local file storage for generated export workbooks."""

from __future__ import annotations

import logging
from pathlib import Path

from agro_admin.core.config import get_settings
from agro_admin.services.export_service import ExportFile, safe_filename

logger = logging.getLogger(__name__)


def exports_dir(directory: str | Path | None = None) -> Path:
    """Resolve (and create) the directory exports are written to."""
    target = Path(directory) if directory is not None else Path(get_settings().exports_dir)
    target = target.expanduser().resolve()
    target.mkdir(parents=True, exist_ok=True)
    return target


def save_export(file: ExportFile, directory: str | Path | None = None) -> Path:
    """Write an export blob to disk, replacing a file with the same name.

    Args:
        file: Generated workbook
        directory: Target directory (defaults to ``settings.exports_dir``)

    Returns:
        Path to the saved file
    """
    name = Path(file.filename).name
    stem, suffix = Path(name).stem, Path(name).suffix or ".xlsx"
    target_path = exports_dir(directory) / f"{safe_filename(stem, 'export')}{suffix}"

    target_path.write_bytes(file.content)
    logger.info(f"Saved export to {target_path} ({file.row_count} rows)")
    return target_path


def save_exports(files: list[ExportFile], directory: str | Path | None = None) -> list[Path]:
    return [save_export(file, directory) for file in files]
