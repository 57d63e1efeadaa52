#!/usr/bin/env python3
"""
BGI Script Tool

Command-line interface for exporting and re-inserting script text.

Usage:
    bgi_script_tool -e <file|folder>     Export text
    bgi_script_tool -a <file|folder>     Export all text
    bgi_script_tool -b <file|folder>     Rebuild script
    bgi_script_tool -i <file|folder>     Show section info
    bgi_script_tool -h | --help
    bgi_script_tool --version

A folder is processed file by file; scripts are the files whose extension
matches the configured script extension (none by default). Exported text
goes next to the script with a .txt extension, rebuilt scripts go into a
"rebuild" folder beside the original.
"""

import sys
import argparse
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional

from . import __version__
from .config import Config
from .script import Script, FormatError, StateError


def iter_script_files(folder: Path, config: Config) -> List[Path]:
    """
    List the script files directly inside a folder.

    Args:
        folder: Folder to scan (not recursive)
        config: Configuration holding the script extension

    Returns:
        Sorted list of script paths
    """
    return sorted(
        p for p in folder.iterdir()
        if p.is_file() and p.suffix == config.script_extension
    )


def text_path_for(script_path: Path, config: Config) -> Path:
    """Translation file path that belongs to a script."""
    return script_path.with_suffix(config.text_extension)


def rebuild_path_for(script_path: Path, config: Config) -> Path:
    """Output path of a rebuilt script."""
    return script_path.parent / config.rebuild_folder / script_path.name


def export_file(path: Path, config: Config, export_all: bool = False) -> int:
    """
    Export the strings of one script.

    Returns:
        Number of strings written
    """
    print(f"Exporting text from {path.name}")
    script = Script(config)
    script.load(path)
    return script.export_strings(text_path_for(path, config), export_all)


def rebuild_file(path: Path, config: Config) -> Path:
    """
    Rebuild one script from its translation file.

    Returns:
        Path of the rebuilt script
    """
    print(f"Rebuilding script {path.name}")
    output_path = rebuild_path_for(path, config)
    script = Script(config)
    script.load(path)
    script.import_strings(text_path_for(path, config))
    output_path.parent.mkdir(parents=True, exist_ok=True)
    script.save(output_path)
    return output_path


def info_file(path: Path, config: Config) -> None:
    """Print section sizes and string counts of one script."""
    script = Script(config)
    script.load(path)
    summary = script.summary()
    print(f"{path.name}:")
    print(f"  Version: {summary.version}")
    print(f"  Import section: {summary.import_size:,} bytes")
    print(f"  Code section: {summary.code_size:,} bytes")
    print(f"  String section: {summary.string_size:,} bytes")
    print(f"  String references: {summary.reference_count} ({summary.distinct_strings} distinct)")


def process(paths: List[Path], action: Callable[[Path], object], jobs: int = 1) -> int:
    """
    Run ``action`` on every path, reporting failures and carrying on.

    Args:
        paths: Script files to process
        action: Per-file operation
        jobs: Number of worker threads

    Returns:
        Number of files that failed
    """
    def run_one(path: Path) -> bool:
        try:
            action(path)
            return True
        except (FormatError, StateError, OSError) as e:
            print(f"ERROR: {path.name}: {e}")
            return False

    if jobs > 1 and len(paths) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            results = list(executor.map(run_one, paths))
    else:
        results = [run_one(path) for path in paths]

    return results.count(False)


def collect_paths(path: Path, config: Config) -> List[Path]:
    """Expand a file or folder argument into the scripts to process."""
    if path.is_dir():
        return iter_script_files(path, config)
    return [path]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BGI Script Tool - export and rebuild compiled BGI script text",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('-e', dest='export', metavar='PATH', help='Export text from a file or folder')
    mode.add_argument('-a', dest='export_all', metavar='PATH', help='Export all text from a file or folder')
    mode.add_argument('-b', dest='rebuild', metavar='PATH', help='Rebuild scripts in a file or folder')
    mode.add_argument('-i', dest='info', metavar='PATH', help='Show section info of a file or folder')
    parser.add_argument('--config', type=str, help='Path to config.json')
    parser.add_argument('--jobs', type=int, default=1, help='Number of files processed in parallel')
    parser.add_argument('--version', action='version', version=f'bgi_script_tool {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Load config
    config_path = Path(args.config) if args.config else None
    config = Config.load(config_path)

    if args.export is not None:
        target = args.export
        action = lambda p: export_file(p, config, export_all=False)
    elif args.export_all is not None:
        target = args.export_all
        action = lambda p: export_file(p, config, export_all=True)
    elif args.rebuild is not None:
        target = args.rebuild
        action = lambda p: rebuild_file(p, config)
    else:
        target = args.info
        action = lambda p: info_file(p, config)

    path = Path(target)
    if not path.exists():
        print(f"ERROR: {path} not found")
        return 1

    paths = collect_paths(path, config)
    if not paths:
        print(f"No script files found in {path}")
        return 0

    failed = process(paths, action, max(1, args.jobs))
    if failed:
        print(f"{failed} of {len(paths)} file(s) failed")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
