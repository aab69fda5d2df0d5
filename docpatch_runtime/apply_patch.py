#!/usr/bin/env python3
"""Apply an RFC 6902 patch file to a JSON document."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from docpatch_runtime import io_utils, json_patch
from docpatch_runtime.json_types import document_depth
from docpatch_runtime.settings import PatchSettings, load_settings

EXIT_OK = 0
EXIT_PATCH_FAILED = 1
EXIT_USAGE = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply an RFC 6902 patch to a JSON document.")
    parser.add_argument("--input", required=True, help="Path to the JSON document to patch ('-' for stdin).")
    parser.add_argument("--patch", required=True, help="Path to the RFC 6902 patch file.")
    parser.add_argument("--output", help="Optional output path (default: stdout).")
    parser.add_argument(
        "--in-place",
        action="store_true",
        help="Overwrite the input file in-place (ignored when --output is provided).",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Apply the patch without writing the result; exit status reports success.",
    )
    parser.add_argument("--apply-log", default=None, help="Append a JSONL run record to this path.")
    parser.add_argument("--config", default=None, help="Path to a docpatch.json settings file.")
    return parser.parse_args(argv)


def _error(message: str) -> None:
    print(f"[docpatch] ERROR: {message}", file=sys.stderr)


def check_limits(document: Any, patch_ops: list[Any], settings: PatchSettings) -> str | None:
    if settings.max_operations and len(patch_ops) > settings.max_operations:
        return f"patch has {len(patch_ops)} operations; limit is {settings.max_operations}"
    if settings.max_depth:
        depth = document_depth(document)
        if depth > settings.max_depth:
            return f"document depth {depth} exceeds limit {settings.max_depth}"
    return None


def _log_run(
    log_path: Path | None,
    args: argparse.Namespace,
    *,
    status: str,
    operations: int,
    failure: dict[str, object] | None = None,
    message: str = "",
) -> None:
    if log_path is None:
        return
    record: dict[str, object] = {
        "timestamp": io_utils.utc_timestamp(),
        "input": str(args.input),
        "patch": str(args.patch),
        "status": status,
        "operations": operations,
    }
    if failure is not None:
        record["failure"] = failure
    if message:
        record["message"] = message
    io_utils.append_jsonl(log_path, record)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings(Path(args.config) if args.config else None)
    log_path = Path(args.apply_log) if args.apply_log else settings.apply_log

    if args.in_place and not args.output and str(args.input) == io_utils.STDIN_MARKER:
        _error("--in-place cannot be used with stdin input")
        return EXIT_USAGE

    try:
        document = io_utils.load_document(args.input)
        patch_ops = io_utils.load_document(args.patch)
    except io_utils.DocumentLoadError as exc:
        _error(str(exc))
        _log_run(log_path, args, status="error", operations=0, message=str(exc))
        return EXIT_USAGE
    if not isinstance(patch_ops, list):
        message = "patch must be a JSON array of operations"
        _error(message)
        _log_run(log_path, args, status="error", operations=0, message=message)
        return EXIT_USAGE

    limit_error = check_limits(document, patch_ops, settings)
    if limit_error:
        _error(limit_error)
        _log_run(log_path, args, status="rejected", operations=len(patch_ops), message=limit_error)
        return EXIT_USAGE

    result = json_patch.apply(document, patch_ops)
    if result.failure is not None:
        failure = result.failure
        _error(f"{failure} (pointer: {failure.pointer!r})")
        _log_run(log_path, args, status="failed", operations=len(patch_ops), failure=failure.to_dict())
        return EXIT_PATCH_FAILED

    _log_run(log_path, args, status="applied", operations=len(patch_ops))
    if args.check:
        print(f"patch OK ({len(patch_ops)} operations).")
        return EXIT_OK

    rendered = io_utils.dump_document(
        result.document,
        indent=settings.indent,
        ensure_ascii=settings.ensure_ascii,
    )
    if args.output:
        io_utils.write_text_atomic(Path(args.output), rendered)
        return EXIT_OK
    if args.in_place:
        io_utils.write_text_atomic(Path(args.input), rendered)
        return EXIT_OK

    sys.stdout.write(rendered)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
