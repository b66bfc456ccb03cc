"""
main.py

bpmnplus - command-line batch converter

Converts non-standard BPMN 2.0 files into Camunda Cloud executable BPMN,
writing ``<name>_camunda.bpmn`` next to each input (or into --output-dir).

Usage:
    python main.py diagram.bpmn                 # Single file
    python main.py diagrams/                    # Every .bpmn in a folder
    python main.py diagrams/ -r --workers 4     # Recursive, 4 workers
    python main.py --show-settings              # Print effective settings
    python main.py --suffix _c8 --write-config  # Save settings for later runs

Files whose name already contains the output suffix are skipped when
scanning directories.
"""

from __future__ import annotations

import argparse
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import debug_trace
from bpmnplus.converter import convert_document
from settings import AppSettings, SettingsManager, get_settings, set_settings
from utils import is_converted_name, output_path_for


@dataclass
class FileOutcome:
    """Result of converting one file on disk."""
    source: Path
    output: Optional[Path] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.output is not None


def collect_inputs(paths: Iterable[str], settings: AppSettings, recursive: bool = False) -> List[Path]:
    """Expand files and directories into the list of documents to convert.

    Explicit files are always included; directories contribute files with
    the input extension that have not been converted already.
    """
    suffix = settings.conversion.output_suffix
    pattern = f"*{settings.conversion.input_extension}"
    inputs: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            found = path.rglob(pattern) if recursive else path.glob(pattern)
            inputs.extend(
                p for p in sorted(found)
                if p.is_file() and not is_converted_name(p, suffix)
            )
        else:
            inputs.append(path)
    return inputs


def convert_file(source: Path, settings: AppSettings, output_dir: Optional[Path] = None) -> FileOutcome:
    """Read, convert and write a single file."""
    try:
        content = source.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return FileOutcome(source, message=f"cannot read: {e}")

    result = convert_document(content, source.name, settings=settings)
    if not result.success:
        return FileOutcome(source, message=result.message)

    target = output_path_for(source, settings.conversion.output_suffix, output_dir)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(result.content, encoding="utf-8")
    except OSError as e:
        return FileOutcome(source, message=f"cannot write {target}: {e}")
    return FileOutcome(source, output=target)


def run(inputs: Sequence[Path], settings: AppSettings,
        output_dir: Optional[Path] = None, workers: int = 1) -> List[FileOutcome]:
    """Convert *inputs*, optionally on a thread pool; results keep input order."""
    if workers > 1 and len(inputs) > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda p: convert_file(p, settings, output_dir), inputs))
    return [convert_file(p, settings, output_dir) for p in inputs]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bpmnplus",
        description="Convert non-standard BPMN files into Camunda Cloud executable BPMN.",
    )
    parser.add_argument("paths", nargs="*", help="BPMN files or directories")
    parser.add_argument("-o", "--output-dir", type=Path, help="write outputs here instead of next to inputs")
    parser.add_argument("-r", "--recursive", action="store_true", help="descend into sub-directories")
    parser.add_argument("-j", "--workers", type=int, default=1, help="number of concurrent conversions")
    parser.add_argument("--suffix", help="output name suffix (default from settings: _camunda)")
    parser.add_argument("--config", type=Path, help="settings TOML file to use")
    parser.add_argument("--show-settings", action="store_true", help="print effective settings and exit")
    parser.add_argument("--write-config", action="store_true",
                        help="save effective settings to the settings file and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="trace conversion stages to stderr")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.config is not None:
        set_settings(SettingsManager(settings_file=args.config))
    manager = get_settings()
    settings = manager.settings
    if args.suffix is not None:
        settings.conversion.output_suffix = args.suffix

    if args.show_settings:
        print(f"# {manager.get_settings_path()}")
        print(manager.to_toml(), end="")
        return 0

    if args.write_config:
        try:
            manager.save()
        except OSError as e:
            print(f"cannot write settings: {e}", file=sys.stderr)
            return 1
        print(f"Wrote settings to {manager.get_settings_path()}")
        return 0

    if not args.paths:
        build_parser().print_usage(sys.stderr)
        return 2

    debug_trace.configure(settings.trace, verbose=args.verbose)
    try:
        inputs = collect_inputs(args.paths, settings, args.recursive)
        outcomes = run(inputs, settings, args.output_dir, max(1, args.workers))
    finally:
        debug_trace.close_log()

    for outcome in outcomes:
        if outcome.ok:
            print(f"[OK] {outcome.source} -> {outcome.output}")
        else:
            print(f"[FAIL] {outcome.source}: {outcome.message}", file=sys.stderr)

    failed = sum(1 for o in outcomes if not o.ok)
    print(f"Converted {len(outcomes) - failed} of {len(outcomes)} file(s).")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
