"""
Command-line export.

    python -m surveyflat.cli responses SURVEY_KEY VERSIONS RESPONSES [-o OUT] [-c OPTIONS]
    python -m surveyflat.cli codebook SURVEY_KEY VERSIONS [-o OUT] [--short-keys]

VERSIONS is a JSON or YAML list of version previews. RESPONSES is a JSON
or YAML list of responses, or JSON lines (*.jsonl) read lazily.
"""

import argparse
import logging
import sys
from contextlib import contextmanager
from typing import Iterator, List, Optional

from surveyflat.config import ExportOptions, load_options, setup_logging
from surveyflat.exporter import ResponseExporter, export_responses
from surveyflat.model import SurveyVersionPreview
from surveyflat.parser import ResponseParser
from surveyflat.serialization import (
    iter_responses_jsonl,
    responses_from_json,
    responses_from_yaml,
    versions_from_json,
    versions_from_yaml,
)
from surveyflat.survey_info import SurveyInfoExporter

logger = logging.getLogger(__name__)


def _is_yaml(path: str) -> bool:
    return path.endswith((".yaml", ".yml"))


def read_versions(path: str) -> List[SurveyVersionPreview]:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    return versions_from_yaml(text) if _is_yaml(path) else versions_from_json(text)


@contextmanager
def open_sink(path: Optional[str]) -> Iterator:
    if path is None or path == "-":
        yield sys.stdout
        return
    with open(path, "w", encoding="utf-8", newline="") as f:
        yield f


def run_response_export(args, options: ExportOptions) -> int:
    versions = read_versions(args.versions)
    parser = ResponseParser(
        args.survey_key,
        versions,
        short_keys=options.short_keys,
        include_meta=options.include_meta,
        question_option_sep=options.question_option_separator,
        extra_context_columns=options.extra_context_columns,
    )

    with open(args.responses, "r", encoding="utf-8") as src, open_sink(args.output) as sink:
        if args.responses.endswith(".jsonl"):
            responses = iter_responses_jsonl(src)
        elif _is_yaml(args.responses):
            responses = responses_from_yaml(src.read())
        else:
            responses = responses_from_json(src.read())

        exporter = ResponseExporter(parser, sink, options.export_format)
        summary = export_responses(exporter, responses)

    return 1 if summary.skipped and not summary.written else 0


def run_codebook_export(args, options: ExportOptions) -> int:
    versions = read_versions(args.versions)
    info = SurveyInfoExporter(versions, args.survey_key, short_keys=options.short_keys)
    with open_sink(args.output) as sink:
        info.write_csv(sink)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Export survey responses and codebooks as flat tables")
    sub = parser.add_subparsers(dest="command", required=True)

    responses = sub.add_parser("responses", help="Export survey responses")
    responses.add_argument("survey_key", help="Key of the exported survey")
    responses.add_argument("versions", help="Version previews (JSON or YAML)")
    responses.add_argument("responses", help="Responses (JSON, YAML or JSON lines)")
    responses.add_argument(
        "--format", dest="export_format", choices=["wide", "csv", "long", "json"],
        help="Output format (overrides the config)",
    )
    responses.set_defaults(run=run_response_export)

    codebook = sub.add_parser("codebook", help="Export the survey info codebook")
    codebook.add_argument("survey_key", help="Key of the survey")
    codebook.add_argument("versions", help="Version previews (JSON or YAML)")
    codebook.set_defaults(run=run_codebook_export)

    for p in (responses, codebook):
        p.add_argument("-o", "--output", help="Output file (default: stdout)")
        p.add_argument("-c", "--config", help="Export options YAML")
        p.add_argument("--short-keys", action="store_true", help="Strip the survey key from question keys")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    options = load_options(args.config) if args.config else ExportOptions()
    if args.short_keys:
        options.short_keys = True
    if getattr(args, "export_format", None):
        options.export_format = args.export_format

    setup_logging(options.log_level)
    logger.debug("export options: %s", options)
    return args.run(args, options)


if __name__ == "__main__":
    sys.exit(main())
