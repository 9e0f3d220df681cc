import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union
import logging

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"

def timestamped_filename(prefix: str, suffix: str = ".json") -> str:
    """Build '<prefix>_<yyyy-mm-dd_HH-MM-SS><suffix>'"""
    return f"{prefix}_{datetime.now().strftime(TIMESTAMP_FORMAT)}{suffix}"

def save_json(data: Dict[str, Any], file_path: Union[str, Path]) -> Path:
    """
    Save dictionary data to a JSON file.

    Paths, datetimes and enums are written as strings.

    Args:
        data: Dictionary to save as JSON
        file_path: Path to the output JSON file

    Returns:
        Path of the written file
    """
    try:
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Saved JSON to {file_path}")
        return file_path

    except (OSError, TypeError) as e:
        logger.error(f"Error saving JSON to {file_path}: {e}")
        raise

def load_json(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load JSON data from a file.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file contains invalid JSON
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"JSON file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Error loading JSON from {file_path}: {e}")
        raise

def list_json_files(directory: Union[str, Path], pattern: str = "*.json") -> List[Path]:
    """JSON files in directory, newest first"""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(directory.glob(pattern), key=lambda p: p.stat().st_mtime, reverse=True)
