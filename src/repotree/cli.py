"""Command-line interface for repotree."""
import json
import logging
import os
import sys
from typing import Dict, List, Tuple

import click

from . import __version__
from .adapters import create_adapter
from .core.analyzer import RepositoryAnalyzer
from .core.exceptions import AnalysisError, EmptyInputError
from .core.inclusion import excluded_paths, included_totals, initial_inclusion, set_inclusion
from .core.models import AnalysisResult, Config, ProgressUpdate
from .core.renderer import (format_token_count, render_full_export, render_summary, render_tree_details,
                            render_tree_section)
from .core.tokenizer import STRATEGY_CHARS, STRATEGY_TIKTOKEN, STRATEGY_WORDS
from .utils.console import THEMES, ConsoleManager
from .utils.path_utils import PathUtils
from .utils.tree_builder import FileTreeBuilder

logger = logging.getLogger(__name__)


def setup_logging(debug: bool) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.WARNING
    format_string = '[%(levelname)s] %(message)s'

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def resolve_excludes(result: AnalysisResult, excludes: Tuple[str, ...]) -> Tuple[Dict[str, bool], List[str]]:
    """
    Build the inclusion map for the --exclude paths.

    A path may be given with or without the repository's root folder.

    Returns:
        Tuple of (inclusion_map, unmatched_paths)
    """
    inclusion = initial_inclusion(result)
    unmatched = []
    for raw in excludes:
        path = PathUtils.join_path_components(PathUtils.split_segments(raw))
        candidates = [path, f"{result.repo_name}/{path}"]
        match = next((c for c in candidates if FileTreeBuilder.find(result.directory_structure, c)), None)
        if match is None:
            unmatched.append(raw)
            continue
        inclusion = set_inclusion(inclusion, match, False, result.directory_structure)
    return inclusion, unmatched


def write_json(result: AnalysisResult, inclusion: Dict[str, bool], output_dir: str) -> str:
    """Dump the tree and per-file token data as JSON."""
    os.makedirs(output_dir, exist_ok=True)
    files, tokens = included_totals(result, inclusion)
    json_data = {
        'repo_name': result.repo_name,
        'total_tokens': result.total_tokens,
        'total_files': result.total_files,
        'total_directories': result.total_directories,
        'included_files': files,
        'included_tokens': tokens,
        'excluded': excluded_paths(inclusion),
        'tree': [node.to_dict() for node in result.directory_structure],
    }
    json_path = os.path.join(output_dir, f"{result.repo_name}_tree.json")
    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump(json_data, f, indent=2)
    return json_path


@click.command()
@click.argument('repo', type=click.Path(exists=True, file_okay=False), required=True)
@click.option('--mode', type=click.Choice(['entries', 'files', 'flat']), default='entries',
              help='How the folder is enumerated: recursive entries, relative-path file list, or bare file list')
@click.option('--strategy', type=click.Choice([STRATEGY_CHARS, STRATEGY_WORDS, STRATEGY_TIKTOKEN]),
              default=None, help='Token estimation strategy (default: chars, or REPOTREE_TOKEN_STRATEGY)')
@click.option('--exclude', '-x', multiple=True, help='Path to exclude together with everything below it (repeatable)')
@click.option('--output-dir', '-o', default='output', help='Output directory for results')
@click.option('--print', 'print_mode', type=click.Choice(['full', 'tree', 'summary', 'details']),
              help='Write the export to stdout instead of a file; details annotates the tree with tokens and sizes')
@click.option('--max-file-size', '-m', type=int, help='Maximum file size in bytes (default: 10 MiB)')
@click.option('--concurrency', type=click.IntRange(min=1), help='Maximum concurrent file reads')
@click.option('--no-default-excludes', is_flag=True, help='Also scan .git, node_modules and other ignored folders')
@click.option('--json', 'export_json', is_flag=True, help='Also export the tree as JSON')
@click.option('--theme', '-t', type=click.Choice(sorted(THEMES)), default='manhattan', help='Terminal color theme')
@click.option('--debug', is_flag=True, help='Enable debug logging and tracebacks')
@click.version_option(__version__)
def main(repo: str, mode: str, strategy: str, exclude: Tuple[str, ...], output_dir: str,
         print_mode: str, max_file_size: int, concurrency: int, no_default_excludes: bool,
         export_json: bool, theme: str, debug: bool) -> None:
    """
    Analyze a local directory: tree, token estimates and a text export.

    Examples:

        repotree .

        repotree ~/src/project --exclude tests --exclude docs

        repotree . --print tree

        repotree . --print details

        repotree . --strategy words --json
    """
    # Status output goes to stderr when the export itself is printed
    console = ConsoleManager(theme=theme, file=sys.stderr if print_mode else sys.stdout)

    setup_logging(debug)

    try:
        config = Config(apply_default_excludes=not no_default_excludes)
        if strategy:
            config.token_strategy = strategy
        if max_file_size:
            config.max_file_size = max_file_size
        if concurrency:
            config.max_concurrent_reads = concurrency

        adapter = create_adapter(repo, config)
        logger.debug(f"Mode: {mode}, strategy: {config.token_strategy}, concurrency: {config.max_concurrent_reads}")
        console.print(f"[highlight]> ANALYZING:[/highlight] [path]{adapter.get_name()}[/path]")

        with console.create_progress() as progress:
            task = progress.add_task("Starting analysis...", total=100)

            def on_progress(update: ProgressUpdate) -> None:
                progress.update(task, completed=update.percentage, description=update.status)

            analyzer = RepositoryAnalyzer(config, on_progress=on_progress)
            if mode == 'entries':
                result = analyzer.run_entries(adapter.directory_entries())
            elif mode == 'files':
                result = analyzer.run_files(adapter.file_list())
            else:
                result = analyzer.run_files(adapter.flat_file_list())

        inclusion, unmatched = resolve_excludes(result, exclude)
        for raw in unmatched:
            console.print_warning(f"Exclude path not found: {raw}")

        if print_mode == 'full':
            click.echo(render_full_export(result, inclusion), nl=False)
        elif print_mode == 'tree':
            click.echo(render_tree_section(result.directory_structure, inclusion), nl=False)
        elif print_mode == 'summary':
            click.echo(render_summary(result, inclusion))
        elif print_mode == 'details':
            click.echo(render_tree_details(result.directory_structure, inclusion), nl=False)

        output_files = {}
        if not print_mode:
            output_files['export'] = analyzer.save_results(result, inclusion, output_dir)
        if export_json:
            output_files['json'] = write_json(result, inclusion, output_dir)

        files, tokens = included_totals(result, inclusion)
        console.print_separator()
        console.print_success("ANALYSIS COMPLETE")
        console.print(f"[info]REPOSITORY:[/info] [path]{result.repo_name}[/path]")
        console.print(f"[info]FILES ANALYZED:[/info] [number]{files}[/number] of {result.total_files}")
        console.print(f"[info]DIRECTORIES:[/info] [number]{result.total_directories}[/number]")
        console.print(f"[info]ESTIMATED TOKENS:[/info] [number]{format_token_count(tokens)}[/number] ({config.token_strategy})")

        if output_files:
            console.print("\n[info]OUTPUT FILES:[/info]")
            for file_type, file_path in output_files.items():
                console.print(f"  [dim]>[/dim] {file_type.upper()}: [path]{os.path.relpath(file_path)}[/path]")

        errors = adapter.errors + result.errors
        if errors:
            console.print_warning(f"{len(errors)} entries could not be read")
            if debug:
                for error in errors[:5]:
                    console.print(f"  [dim]>[/dim] {error}")
                if len(errors) > 5:
                    console.print(f"  [dim]... +{len(errors) - 5} more[/dim]")

    except KeyboardInterrupt:
        console.print_error("Process terminated by user")
        sys.exit(1)

    except EmptyInputError as e:
        console.print_warning(f"Nothing to process: {e}")
        sys.exit(1)

    except (AnalysisError, ValueError, OSError) as e:
        console.print_error(f"Critical error: {e}")
        if debug:
            console.print_exception()
        sys.exit(1)


if __name__ == '__main__':
    main()
