import importlib
import logging
import os
import sys

import typer
from watchfiles import run_process

app = typer.Typer()

def load_app(app_import: str):
    """
    Import 'module:attribute' and return the App it names.
    A factory function is called to obtain the App.
    """
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    try:
        module_name, obj_name = app_import.split(":")
    except ValueError:
        raise typer.BadParameter(f"Invalid app string '{app_import}'. Format must be 'module:attribute'")

    module = importlib.import_module(module_name)
    app_obj = getattr(module, obj_name)

    if callable(app_obj) and not hasattr(app_obj, "serve"):
        print(f"INFO: Calling factory function '{obj_name}'...")
        app_obj = app_obj()

    if not hasattr(app_obj, "serve"):
        raise typer.BadParameter(f"'{obj_name}' is not a valid Gatehouse App instance.")
    return app_obj

def run_server(app_import: str, host: str, port: int):
    """
    Actually imports and runs the app.
    This function is run by watchfiles in a subprocess.
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        app_instance = load_app(app_import)
    except (ImportError, AttributeError) as e:
        print(f"Error loading app: {e}")
        return

    app_instance.host = host
    app_instance.port = port
    print(f"INFO: Starting server on http://{host}:{port}")
    app_instance.serve()

@app.command()
def run(
    app_import: str = typer.Argument(..., help="Application import string, e.g. 'main:app'"),
    host: str = typer.Option("127.0.0.1", envvar="GATEHOUSE_HOST", help="Bind host"),
    port: int = typer.Option(8000, envvar="GATEHOUSE_PORT", help="Bind port"),
    reload: bool = typer.Option(True, help="Enable auto-reload on file changes"),
):
    """
    Run the Gatehouse development server.
    """
    if reload:
        print(f"INFO:  Will watch for changes in {os.getcwd()}")
        run_process(
            os.getcwd(),
            target=run_server,
            args=(app_import, host, port)
        )
    else:
        run_server(app_import, host, port)

@app.command()
def routes(
    app_import: str = typer.Argument(..., help="Application import string, e.g. 'main:app'"),
):
    """
    Print the route table with the guards bound to each route.
    """
    table = load_app(app_import).build()
    for route in table:
        guard_names = ", ".join(type(g).__name__ for g in route.guards) or "-"
        print(f"{route.method:<7} {route.path:<30} {guard_names}")

if __name__ == "__main__":
    app()
