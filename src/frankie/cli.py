"""Frankie command-line interface powered by Typer."""

import importlib
import sys
from pathlib import Path
from typing import Annotated

import typer

from frankie.app import Frankie

app = typer.Typer(name="frankie", add_completion=False, no_args_is_help=True)

TargetArg = Annotated[str, typer.Argument(help="Python file or module:var target.")]
HostOpt = Annotated[str, typer.Option(help="Bind address.")]
PortOpt = Annotated[int, typer.Option(help="Bind port.")]


# ------------------------------------------------------------------
# Target resolution
# ------------------------------------------------------------------


def load_app(path: str) -> tuple[str, Frankie]:
    """Import the app a CLI *path* points at.

    Accepts ``module:var`` or a ``file.py`` that holds a :class:`Frankie`
    instance. Returns the ``module:var`` target and the instance.
    """
    if ":" in path:
        module_name, _, var_name = path.partition(":")
        module = _import(module_name, Path.cwd())
    else:
        file = Path(path)
        if not file.exists():
            typer.echo(f"Error: file {path!r} not found.", err=True)
            raise typer.Exit(1)
        module_name = file.stem
        module = _import(module_name, file.resolve().parent)
        found = find_app_var(module)
        if found is None:
            typer.echo(
                f"Error: no Frankie instance found in {path!r}. Provide an explicit target, e.g. main:app",
                err=True,
            )
            raise typer.Exit(1)
        var_name = found

    instance = getattr(module, var_name, None)
    if not isinstance(instance, Frankie):
        typer.echo(f"Error: {module_name}:{var_name} is not a Frankie instance.", err=True)
        raise typer.Exit(1)
    return f"{module_name}:{var_name}", instance


def find_app_var(module: object) -> str | None:
    """Return the name of a module attribute holding a :class:`Frankie`.

    ``app`` and ``application`` are preferred over any other attribute.
    """
    for name in ("app", "application"):
        if isinstance(getattr(module, name, None), Frankie):
            return name
    for name in dir(module):
        if not name.startswith("_") and isinstance(getattr(module, name, None), Frankie):
            return name
    return None


def _import(module_name: str, directory: Path) -> object:
    parent = str(directory)
    if parent not in sys.path:
        sys.path.insert(0, parent)
    try:
        return importlib.import_module(module_name)
    except Exception as exc:
        typer.echo(f"Error importing {module_name!r}: {exc}", err=True)
        raise typer.Exit(1) from exc


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------


@app.command()
def dev(
    path: TargetArg = "main.py",
    host: HostOpt = "127.0.0.1",
    port: PortOpt = 8000,
    reload: Annotated[bool | None, typer.Option("--reload/--no-reload", help="Auto-reload on code changes.")] = None,
) -> None:
    """Start a development server with auto-reload and debug logging."""
    from frankie._server import serve

    target, _ = load_app(path)
    serve(target, host=host, port=port, dev=True, reload=reload)


@app.command()
def run(
    path: TargetArg = "main.py",
    host: HostOpt = "127.0.0.1",
    port: PortOpt = 8000,
    workers: Annotated[int, typer.Option(help="Number of worker processes.")] = 1,
) -> None:
    """Start a production server."""
    from frankie._server import serve

    target, _ = load_app(path)
    serve(target, host=host, port=port, workers=workers)


@app.command()
def routes(path: TargetArg = "main.py") -> None:
    """List registered routes in match order."""
    _, instance = load_app(path)
    table = instance.router.routes
    if not table:
        typer.echo("No routes registered.")
        return

    rows = [(r.method, r.pattern, getattr(r.handler, "__name__", repr(r.handler))) for r in table]
    width_method = max(6, *(len(r[0]) for r in rows))
    width_pattern = max(7, *(len(r[1]) for r in rows))
    fmt = f"{{:<{width_method}}}  {{:<{width_pattern}}}  {{}}"
    typer.echo(fmt.format("METHOD", "PATTERN", "HANDLER"))
    typer.echo("-" * min(width_method + width_pattern + 4 + max(len(r[2]) for r in rows), 80))
    for row in rows:
        typer.echo(fmt.format(*row))


def main() -> None:
    app()
