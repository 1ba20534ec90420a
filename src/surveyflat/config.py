"""
Export options and logging setup.

Options are read from YAML, e.g.:

    question_option_separator: "-"
    short_keys: true
    export_format: wide
    extra_context_columns: [device]
    include_meta:
      init_times: false
      displayed_times: true
      responded_times: true
      position: false
    log_level: INFO

Unknown keys are rejected.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from surveyflat import constants as c
from surveyflat.errors import ConfigError
from surveyflat.exporter import ExportFormat
from surveyflat.model import IncludeMeta


@dataclass
class ExportOptions:
    question_option_separator: str = c.DEFAULT_QUESTION_OPTION_SEPARATOR
    short_keys: bool = False
    include_meta: Optional[IncludeMeta] = None
    export_format: str = "wide"
    extra_context_columns: List[str] = field(default_factory=list)
    log_level: str = "INFO"


def _check_keys(d: Dict[str, Any], allowed, where: str) -> None:
    unknown = set(d) - set(allowed)
    if unknown:
        raise ConfigError(f"unknown {where} option(s): {', '.join(sorted(unknown))}")


def options_from_dict(d: Optional[Dict[str, Any]]) -> ExportOptions:
    """
    Build ExportOptions from a plain dict.

    Raises:
        ConfigError: On unknown keys, an unknown export format or an empty separator
    """
    d = dict(d or {})
    _check_keys(d, [f.name for f in fields(ExportOptions)], "export")

    include_meta = None
    meta = d.pop("include_meta", None)
    if meta is not None:
        if not isinstance(meta, dict):
            raise ConfigError("include_meta must be a mapping")
        _check_keys(meta, [f.name for f in fields(IncludeMeta)], "include_meta")
        include_meta = IncludeMeta(**{k: bool(v) for k, v in meta.items()})

    options = ExportOptions(include_meta=include_meta, **d)

    if not options.question_option_separator:
        raise ConfigError("question_option_separator must not be empty")
    try:
        ExportFormat.parse(options.export_format)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    if logging.getLevelName(str(options.log_level).upper()) not in (
        logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL,
    ):
        raise ConfigError(f"unknown log level: {options.log_level}")
    options.extra_context_columns = list(options.extra_context_columns or [])
    return options


def options_from_yaml(text: str) -> ExportOptions:
    try:
        d = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid options YAML: {e}") from e
    if d is not None and not isinstance(d, dict):
        raise ConfigError("options YAML must be a mapping")
    return options_from_dict(d)


def load_options(path: str) -> ExportOptions:
    """Read ExportOptions from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        return options_from_yaml(f.read())


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


__all__ = ["ExportOptions", "options_from_dict", "options_from_yaml", "load_options", "setup_logging"]
