from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import SmartScriptConfig, load_config
from .errors import SmartScriptUserError
from .report import build_check_report, documents_match, failed_check_report
from .template import DocumentNode, parse, render
from .version import tool_version

_LOG = logging.getLogger("smartscript")

DEBUG_ENV = "SMARTSCRIPT_DEBUG"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="smartscript",
        description="SmartScript template parser and reconstructor",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "--config",
        type=Path,
        metavar="PATH",
        help="configuration file (default: ./smartscript.yaml if present)",
    )
    p.add_argument(
        "--verbose",
        action="store_true",
        help=f"debug logging to stderr (same as setting {DEBUG_ENV})",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="print the document reconstructed from its tree")
    sp_render.add_argument("file", type=Path, help="template document")

    sp_show = sub.add_parser("show", help="print original and reconstructed text and compare trees")
    sp_show.add_argument("file", type=Path, help="template document")

    sp_check = sub.add_parser("check", help="JSON report: parse result and round-trip check")
    sp_check.add_argument("file", type=Path, help="template document")

    return p


def _setup_logging(cfg: SmartScriptConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get(DEBUG_ENV) else cfg.logging_level
    _LOG.setLevel(level)
    if not _LOG.handlers:
        h = logging.StreamHandler(sys.stderr)
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        _LOG.addHandler(h)


def _read_document(path: Path, cfg: SmartScriptConfig) -> str:
    try:
        return path.read_text(encoding=cfg.encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise SmartScriptUserError(f"Failed to read document {path}: {e}") from e


def _show(body: str, document: DocumentNode, cfg: SmartScriptConfig) -> str:
    out = []
    if cfg.show_original:
        out.append("ORIGINAL:\n\n" + body + "\n\n----------------------\n")
    out.append("RECREATED:\n\n" + render(document) + "\n\n----------------------\n")
    out.append(f"Documents match: {str(documents_match(document)).lower()}\n")
    return "".join(out)


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    try:
        cfg = load_config(ns.config)
        _setup_logging(cfg, ns.verbose)
        body = _read_document(ns.file, cfg)
        _LOG.debug("Read %d characters from %s", len(body), ns.file)

        if ns.cmd == "check":
            try:
                report = build_check_report(str(ns.file), parse(body))
            except SmartScriptUserError as e:
                report = failed_check_report(str(ns.file), e)
            sys.stdout.write(report.model_dump_json(by_alias=True))
            return 0 if report.ok else 1

        document = parse(body)

        if ns.cmd == "render":
            sys.stdout.write(render(document))
            return 0

        if ns.cmd == "show":
            sys.stdout.write(_show(body, document, cfg))
            return 0

    except SmartScriptUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
