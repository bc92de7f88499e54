from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import cache
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..exceptions import ConfigurationError, CycleError
from ..models.book import StatementBook
from ..models.row import Hierarchy, Rollup, Row
from ..models.sheet import Sheet
from ..models.validation import DEFAULT_TOLERANCE, ExprRef, RowRef, ValidationRule
from ..services.formatting import DEFAULT_CURRENCY
from ..services.resolver import resolve

"""YAML loaders for statement definitions and the report run configuration.

Both documents are validated against the JSON Schemas bundled under
``statement_engine/config/schemas`` before anything is built from them.
Every problem surfaces as ConfigurationError.

Definitions are also dry-resolved once with no raw values: a definition
with a circular formula is refused at load time instead of producing a
CycleError on every report.
"""

__all__ = [
    "SCHEMA_DIR",
    "DEFAULT_DEFINITIONS",
    "DEFAULT_CONFIG_PATH",
    "ReportConfig",
    "load_definitions",
    "load_report_config",
]

logger = logging.getLogger(__name__)

_package_root = Path(__file__).parent.parent
SCHEMA_DIR = Path(__file__).parent / "schemas"
DEFAULT_DEFINITIONS = _package_root / "definitions" / "msp2.yml"
DEFAULT_CONFIG_PATH = Path("config/report.yml")


@dataclass(frozen=True)
class ReportConfig:
    source_directory: str
    definitions: Path | None = None  # None -> bundled MSP2 definitions
    currency: str = DEFAULT_CURRENCY
    tolerance: float = DEFAULT_TOLERANCE
    error_log_dir: str = "logs"


@cache
def _load_schema(name: str) -> dict[str, Any]:
    path = SCHEMA_DIR / name
    if not path.exists():
        raise ConfigurationError(f"schema not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid schema file {name}: {e}") from e


def _validate(data: Any, schema_name: str, what: str) -> None:
    """Validate ``data`` against a bundled schema.

    Raises:
        ConfigurationError: with the failing path and message of the first error
    """
    schema = _load_schema(schema_name)
    try:
        jsonschema.validate(data, schema)
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path)
        suffix = f" (at {where})" if where else ""
        raise ConfigurationError(f"{what} validation failed: {e.message}{suffix}") from e


def _read_yaml(path: Path, what: str) -> Any:
    if not path.exists():
        raise ConfigurationError(f"{what} file not found: {path}")
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid yaml in {path}: {e}") from e


def _build_row(raw: dict[str, Any]) -> Row:
    rollup = raw.get("rollup")
    parent = raw.get("parent")
    return Row(
        id=raw["id"],
        label=raw.get("label", ""),
        kind=raw["kind"],
        formula=raw.get("formula"),
        rollup=Rollup(**rollup) if rollup else None,
        category=raw.get("category"),
        hierarchy=Hierarchy(parent_id=parent) if parent else None,
    )


def _build_ref(raw: dict[str, Any]) -> RowRef | ExprRef:
    if "row" in raw:
        return RowRef(sheet=raw["sheet"], row_id=raw["row"], label=raw.get("label"))
    return ExprRef(sheet=raw["sheet"], formula=raw["expr"], label=raw.get("label"))


def _check_acyclic(sheet: Sheet) -> None:
    resolution = resolve(sheet)
    for err in resolution.errors.values():
        if isinstance(err, CycleError):
            raise ConfigurationError(
                f"sheet '{sheet.name}': {err.message}",
                {"sheet": sheet.name, "cycle": err.cycle},
            )


def load_definitions(path: Path | None = None, *, tolerance: float | None = None) -> StatementBook:
    """Load statement definitions and cross-statement rules from YAML.

    Args:
        path: definitions file; the bundled MSP2 definitions when None
        tolerance: tolerance for rules that do not declare their own

    Returns:
        StatementBook with sheets, aliases and rules in file order
    """
    path = path or DEFAULT_DEFINITIONS
    data = _read_yaml(path, "definitions")
    _validate(data, "definitions.schema.json", "definitions")

    default_tolerance = DEFAULT_TOLERANCE if tolerance is None else tolerance
    sheets: dict[str, Sheet] = {}
    aliases: dict[str, str] = {}
    for name, raw_sheet in data["sheets"].items():
        rows = [_build_row(r) for r in raw_sheet["rows"]]
        sheet = Sheet(name=name, rows=tuple(rows), title=raw_sheet.get("title", ""))
        _check_acyclic(sheet)
        sheets[name] = sheet
        for alias in raw_sheet.get("aliases", []):
            if alias in aliases:
                raise ConfigurationError(f"alias '{alias}' declared twice")
            aliases[alias] = name

    rules: list[ValidationRule] = []
    for raw_rule in data.get("rules", []):
        actual = _build_ref(raw_rule["actual"])
        expected = _build_ref(raw_rule["expected"])
        for ref in (actual, expected):
            if ref.sheet not in sheets and ref.sheet not in aliases:
                raise ConfigurationError(
                    f"rule '{raw_rule['id']}' references unknown sheet '{ref.sheet}'",
                    {"rule": raw_rule["id"], "sheet": ref.sheet},
                )
        rules.append(
            ValidationRule(
                id=raw_rule["id"],
                description=raw_rule["description"],
                actual=actual,
                expected=expected,
                tolerance=raw_rule.get("tolerance", default_tolerance),
                unit=raw_rule.get("unit", "amount"),
            )
        )

    book = StatementBook(sheets=sheets, rules=tuple(rules), aliases=aliases)
    logger.debug(
        f"definitions loaded path={path} sheets={len(sheets)} "
        f"aliases={len(aliases)} rules={len(rules)}"
    )
    return book


def load_report_config(path: Path = DEFAULT_CONFIG_PATH) -> ReportConfig:
    data = _read_yaml(path, "config")
    _validate(data, "report.schema.json", "config")

    definitions = data.get("definitions")
    return ReportConfig(
        source_directory=data["source_directory"],
        definitions=Path(definitions) if definitions else None,
        currency=data.get("currency", DEFAULT_CURRENCY),
        tolerance=float(data.get("tolerance", DEFAULT_TOLERANCE)),
        error_log_dir=data.get("error_log_dir", "logs"),
    )
