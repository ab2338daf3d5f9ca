"""Loading of the YAML rule tables that drive the parsers."""

import logging
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml

logger = logging.getLogger(__name__)

RULES_DIR = Path(__file__).parent / "rules"


class RulesError(ValueError):
    """Raised when a rule table is missing or malformed."""


def resolve_rules_path(filename: str, rules_dir: Optional[Union[str, Path]] = None) -> Path:
    """Prefer the file in rules_dir, falling back to the packaged table."""
    if rules_dir is not None:
        candidate = Path(rules_dir) / filename
        if candidate.exists():
            return candidate
        logger.debug(f"{filename} not found in {rules_dir}, using packaged rules")
    return RULES_DIR / filename


def load_rules(filename: str, rules_dir: Optional[Union[str, Path]] = None) -> Any:
    """
    Load one rule table.

    Args:
        filename: Table file name, e.g. "category_aliases.yml"
        rules_dir: Optional directory overriding the packaged tables

    Returns:
        Parsed YAML document

    Raises:
        RulesError: if the file cannot be read or is not valid YAML
    """
    return _read_yaml(resolve_rules_path(filename, rules_dir))


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load rules from {path}: {e}")
        raise RulesError(f"Failed to load rules from {path}: {e}") from e

    if not isinstance(data, dict):
        logger.error(f"Rules file {path} does not contain a mapping")
        raise RulesError(f"Rules file {path} does not contain a mapping")

    logger.debug(f"Loaded rules from {path}")
    return data


def require(data: dict, key: str, filename: str) -> Any:
    """Fetch a mandatory key from a rule table."""
    if key not in data:
        raise RulesError(f"{filename}: missing '{key}' section")
    return data[key]


def load_categories(path: Optional[Union[str, Path]] = None) -> List[str]:
    """
    Load a category taxonomy.

    YAML files must hold a ``categories`` list; any other file is read as one
    category name per line. Without a path the packaged default taxonomy is used.
    """
    if path is None:
        data = load_rules("categories.yml")
        return [str(name) for name in require(data, 'categories', "categories.yml")]

    path = Path(path)
    if path.suffix.lower() in ('.yml', '.yaml'):
        data = _read_yaml(path)
        return [str(name) for name in require(data, 'categories', path.name)]

    try:
        lines = path.read_text(encoding='utf-8').splitlines()
    except OSError as e:
        logger.error(f"Failed to read categories from {path}: {e}")
        raise RulesError(f"Failed to read categories from {path}: {e}") from e
    return [line.strip() for line in lines if line.strip()]
