"""LiteWire CLI - Main Entry Point.

The `lw` command builds minimal wiring for isolated tests.

Commands:
    scan     - Scan a root type and emit its wiring descriptor
    reduce   - Reduce package names to their common roots
    match    - Match resource paths against location patterns

Exit codes:
    0    success
    1    scan failure, invalid configuration or unreadable input
    130  cancelled (Ctrl-C)
"""

import logging
import sys
from typing import Optional, Tuple

import click

from . import __version__, __cli_name__
from .utils.colors import (
    success, error, warning, info, dim, bold,
    banner, section, kv, bullet, table,
    file_written, file_skipped,
    _CHECK,
)
from ..faults import CancelledByHost, Fault


# ═══════════════════════════════════════════════════════════════════════════
# Custom Click help formatter
# ═══════════════════════════════════════════════════════════════════════════


class LiteWireGroup(click.Group):
    """Click group subclass with branded help output."""

    def format_help(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        if ctx.parent is None:
            banner("LiteWire", subtitle=f"v{__version__}  {_CHECK}  minimal wiring for isolated tests")
            click.echo()

        super().format_help(ctx, formatter)

    def format_commands(
        self, ctx: click.Context, formatter: click.HelpFormatter
    ) -> None:
        """Format command listing with aligned columns."""
        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.get_command(ctx, subcommand)
            if cmd is None or cmd.hidden:
                continue
            commands.append((subcommand, cmd.get_short_help_str(limit=48)))

        if commands:
            with formatter.section(
                click.style("Commands", fg="cyan", bold=True)
            ):
                max_len = max(len(c[0]) for c in commands) + 2
                for name, help_text in commands:
                    styled_name = click.style(name.ljust(max_len), fg="green")
                    formatter.write(f"  {styled_name} {help_text}\n")


@click.group(cls=LiteWireGroup)
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool):
    """Minimal dependency wiring for isolated Spring tests.

    \b
    Quick start:
      lw scan com.acme.OrderService --symbols symbols.yaml
      lw scan com.acme.OrderService --symbols symbols.yaml \\
         --resources src/main/resources --out .
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet

    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Commands
# ============================================================================

@cli.command('scan')
@click.argument('root')
@click.option('--symbols', '-s', required=True, type=click.Path(dir_okay=False),
              help='Symbol dump (YAML or JSON)')
@click.option('--resources', '-r', multiple=True, type=click.Path(file_okay=False),
              help='Resource root to index (repeatable)')
@click.option('--method', '-m', type=str, help='Root method the test stub targets')
@click.option('--strategy', type=click.Choice(['sequential', 'concurrent']),
              help='Traversal strategy')
@click.option('--workers', type=int, help='Worker count for the concurrent strategy')
@click.option('--timeout', type=float, help='Timeout in seconds for the concurrent strategy')
@click.option('--config', '-c', 'config_paths', multiple=True, type=click.Path(),
              help='Config file (repeatable; litewire.yaml auto-detected)')
@click.option('--out', '-o', type=click.Path(file_okay=False),
              help='Write descriptor, stub and class lists under this directory')
@click.option('--format', 'output_format', default='xml',
              type=click.Choice(['xml', 'classes', 'packages']),
              help='What to print when --out is not given')
@click.pass_context
def scan_cmd(
    ctx,
    root: str,
    symbols: str,
    resources: Tuple[str, ...],
    method: Optional[str],
    strategy: Optional[str],
    workers: Optional[int],
    timeout: Optional[float],
    config_paths: Tuple[str, ...],
    out: Optional[str],
    output_format: str,
):
    """
    Scan a root type and emit its wiring descriptor.

    Examples:
      lw scan com.acme.OrderService -s symbols.yaml
      lw scan com.acme.OrderService -s symbols.yaml -r src/main/resources --format classes
      lw scan com.acme.OrderService -s symbols.yaml -m placeOrder --out .
    """
    from .commands.scan import build_overrides, run_scan
    from ..wiring import ScaffoldWriter

    quiet = ctx.obj['quiet']
    try:
        result = run_scan(
            root,
            symbols,
            resources=resources,
            method=method,
            config_paths=config_paths or None,
            overrides=build_overrides(strategy, workers, timeout),
        )

        if out is None:
            if output_format == 'classes':
                lines = result.class_names
            elif output_format == 'packages':
                lines = sorted(result.package_roots)
            else:
                lines = [result.descriptor.render().rstrip("\n")]
            for line in lines:
                click.echo(line)
            if not quiet:
                for record in result.diagnostics.records:
                    warning(f"  ! {record}", err=True)
            return

        paths = ScaffoldWriter(out).write(result)
        if quiet:
            return

        click.echo()
        section(f"Scan {result.root.qualified_name}")
        summary = result.summary()
        kv("Strategy", summary["strategy"])
        kv("Visited", str(summary["visited"]))
        kv("Beans", str(summary["beans"]))
        kv("Fragments", str(summary["fragments"]))
        kv("Duration", f"{summary['duration']}s")
        click.echo()

        if ctx.obj['verbose']:
            table(
                ["Id", "Kind", "Class"],
                [[r.id, r.kind.value, r.class_name] for r in result.registry.records()],
            )
            click.echo()

        if result.diagnostics.records:
            section("Faults")
            for record in result.diagnostics.records:
                bullet(str(record), fg="yellow")
            click.echo()

        file_written("Wiring descriptor", path=str(paths.descriptor))
        if paths.stub_created:
            file_written("Test stub", path=str(paths.test_stub))
        else:
            file_skipped(str(paths.test_stub))
        file_written("Class list", path=str(paths.classes))
        file_written("Package roots", path=str(paths.packages))
        click.echo()
        success(f"  {_CHECK} Wiring ready for {bold(result.root.simple_name)}")

    except CancelledByHost as e:
        error(f"  Cancelled: {e.message}")
        sys.exit(130)
    except KeyboardInterrupt:
        error("  Cancelled")
        sys.exit(130)
    except Fault as e:
        error(f"  {e}")
        sys.exit(1)


@cli.command('reduce')
@click.argument('packages', nargs=-1, required=True)
def reduce_cmd(packages: Tuple[str, ...]):
    """
    Reduce package names to their common roots.

    Examples:
      lw reduce com.acme.order com.acme.order.mapper com.acme.user
    """
    from ..resources import reduce

    for root in sorted(reduce(packages)):
        click.echo(root)


@cli.command('match')
@click.option('--pattern', '-p', 'patterns', multiple=True, required=True,
              help='Location pattern, e.g. classpath*:mapper/**/*.xml (repeatable)')
@click.argument('paths', nargs=-1, required=True)
@click.pass_context
def match_cmd(ctx, patterns: Tuple[str, ...], paths: Tuple[str, ...]):
    """
    Print the resource paths matched by any location pattern.

    Examples:
      lw match -p 'classpath*:mapper/**/*.xml' mapper/OrderMapper.xml app.yml
    """
    from ..resources import match

    matched = match(paths, list(patterns))
    for path in matched:
        click.echo(path)
    if not matched and not ctx.obj['quiet']:
        dim("  no paths matched", err=True)


@cli.command('version')
def version_cmd():
    """Show version information."""
    info(f"{__cli_name__} {__version__}")
    dim(f"  Python {sys.version.split()[0]}")


def main():
    """Entry point for `lw` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
