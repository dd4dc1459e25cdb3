import io
import logging
import os
from pathlib import Path

import click
from dotenv import load_dotenv

from . import __version__
from .benchstat import DELTA_TESTS, ORDERS, Collection
from .config import BenchdiffConfig, env_bool, settings
from .errors import BenchdiffError
from .formatters import FORMATS, get_formatter
from .runner import Benchdiff, BenchdiffResult, BenchOptions, compare_files

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_BY = "pkg,goos,goarch"


def _load_env() -> None:
    dotenv_path = os.getenv("BENCHDIFF_DOTENV_PATH", "").strip()
    if dotenv_path:
        path = Path(dotenv_path).expanduser()
        if path.exists():
            load_dotenv(path)
        else:
            click.echo(f"Warning: BENCHDIFF_DOTENV_PATH does not exist: {dotenv_path}", err=True)
            load_dotenv()
    else:
        load_dotenv()
    # module-level settings were read before the .env file was loaded
    settings.BENCHDIFF_LOGGING = env_bool("BENCHDIFF_LOGGING", default=settings.BENCHDIFF_LOGGING)


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.getenv("BENCHDIFF_LOG_LEVEL", settings.LOG_LEVEL)
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )


def _read_optional(path: str | None) -> str | None:
    if path is None:
        return None
    return Path(path).read_text(encoding="utf-8")


def _build_collection(
    alpha: float, delta_test: str, geomean: bool, split_by: str, sort: str | None
) -> Collection:
    collection = Collection(
        alpha=alpha,
        delta_test=DELTA_TESTS[delta_test],
        add_geomean=geomean,
        split_by=[part.strip() for part in split_by.split(",") if part.strip()],
    )
    if sort:
        collection.reverse_order = sort.startswith("-")
        collection.order = ORDERS[sort.lstrip("-")]
    return collection


@click.command()
@click.version_option(__version__, prog_name="benchdiff")
@click.option(
    "--base-ref",
    default="HEAD",
    show_default=True,
    help="Git ref to compare the worktree against",
)
@click.option("--bench", default=".", show_default=True, help="Benchmark pattern for -bench")
@click.option(
    "--packages",
    default="./...",
    show_default=True,
    help="Packages to benchmark (space separated)",
)
@click.option("--count", default=10, show_default=True, type=int, help="Runs per benchmark")
@click.option("--benchmem", is_flag=True, help="Report memory allocations (-benchmem)")
@click.option("--benchtime", default=None, help="Value for -benchtime")
@click.option("--cpu", default=None, help="Value for -cpu")
@click.option("--tags", default=None, help="Build tags for go test")
@click.option(
    "--warmup-count",
    default=0,
    show_default=True,
    type=int,
    help="Run benchmarks this many times before measuring (output discarded)",
)
@click.option("--warmup-time", default=None, help="-benchtime for the warmup run")
@click.option("--git-cmd", default=None, help="git executable (default: BENCHDIFF_GIT_CMD or git)")
@click.option("--go-cmd", default=None, help="go executable (default: BENCHDIFF_GO_CMD or go)")
@click.option(
    "--workdir",
    default=None,
    type=click.Path(exists=True, file_okay=False),
    help="Repository working directory (default: BENCHDIFF_WORKDIR or .)",
)
@click.option(
    "--compare",
    "compare_paths",
    nargs=2,
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    metavar="OLD NEW",
    help="Compare two existing benchmark output files instead of running benchmarks",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default="text",
    show_default=True,
    help="Output format",
)
@click.option("--norange", is_flag=True, help="Omit ± range columns from csv/markdown output")
@click.option(
    "--html-header",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="File whose contents replace the default HTML header",
)
@click.option(
    "--html-footer",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="File whose contents replace the default HTML footer",
)
@click.option(
    "--alpha",
    default=0.05,
    show_default=True,
    type=float,
    help="p-value below which a change is significant",
)
@click.option(
    "--delta-test",
    type=click.Choice(sorted(DELTA_TESTS)),
    default="utest",
    show_default=True,
    help="Significance test",
)
@click.option("--geomean", is_flag=True, help="Add a geometric mean row to each table")
@click.option(
    "--split-by",
    default=DEFAULT_SPLIT_BY,
    show_default=True,
    help="Comma separated labels to group results by",
)
@click.option(
    "--sort",
    type=click.Choice(["name", "delta", "-name", "-delta"]),
    default=None,
    help="Row order (default: order of appearance; '-' reverses)",
)
@click.option(
    "--on-degrade",
    default=0,
    show_default=True,
    type=int,
    help="Exit code when a significant regression is found",
)
@click.option("--output", "-o", default=None, help="Output file (default: stdout)")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(
    base_ref: str,
    bench: str,
    packages: str,
    count: int,
    benchmem: bool,
    benchtime: str | None,
    cpu: str | None,
    tags: str | None,
    warmup_count: int,
    warmup_time: str | None,
    git_cmd: str | None,
    go_cmd: str | None,
    workdir: str | None,
    compare_paths: tuple[str, str] | None,
    output_format: str,
    norange: bool,
    html_header: str | None,
    html_footer: str | None,
    alpha: float,
    delta_test: str,
    geomean: bool,
    split_by: str,
    sort: str | None,
    on_degrade: int,
    output: str | None,
    verbose: bool,
) -> None:
    """Compare Go benchmark results between BASE-REF and the current worktree.

    Uncommitted edits are stashed while BASE-REF is checked out and restored
    afterwards. Untracked files are left untouched.

    Examples:

      # Compare the worktree against HEAD
      benchdiff --bench 'Parse' --packages ./parser

      # Markdown report against main, failing CI on regressions
      benchdiff --base-ref main --format markdown --on-degrade 1

      # Format two existing result files
      benchdiff --compare old.txt new.txt --format html
    """
    _load_env()
    _configure_logging(verbose)

    try:
        config = BenchdiffConfig.from_env()
    except RuntimeError as e:
        raise click.ClickException(f"Error loading config: {e}") from e

    collection = _build_collection(alpha, delta_test, geomean, split_by, sort)

    try:
        formatter = get_formatter(
            output_format,
            no_range=norange,
            html_header=_read_optional(html_header),
            html_footer=_read_optional(html_footer),
        )
        if compare_paths:
            result = BenchdiffResult(
                base_ref=compare_paths[0],
                tables=compare_files(compare_paths[0], compare_paths[1], collection),
            )
        else:
            runner = Benchdiff(
                base_ref=base_ref,
                workdir=workdir or config.workdir or ".",
                git_cmd=git_cmd or config.git_cmd,
                options=BenchOptions(
                    bench=bench,
                    packages=packages,
                    count=count,
                    benchmem=benchmem,
                    benchtime=benchtime,
                    cpu=cpu,
                    tags=tags,
                    warmup_count=warmup_count,
                    warmup_time=warmup_time,
                    go_cmd=go_cmd or config.go_cmd,
                ),
                collection=collection,
            )
            result = runner.run()

        buf = io.StringIO()
        formatter(buf, result.tables)
    except BenchdiffError as e:
        raise click.ClickException(str(e)) from e
    except OSError as e:
        raise click.ClickException(f"Error reading benchmark results: {e}") from e

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(buf.getvalue(), encoding="utf-8")
        click.echo(f"Results saved to {output_path}", err=True)
    else:
        click.echo(buf.getvalue(), nl=False)

    if on_degrade and result.has_degradation():
        logger.warning("Significant regression detected; exiting with %d", on_degrade)
        raise SystemExit(on_degrade)


if __name__ == "__main__":
    main()
