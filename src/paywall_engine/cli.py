"""Typer CLI for Paywall-Engine."""

import typer
from rich.console import Console

app = typer.Typer(name="paywall", help="Paywall-Engine: one-time access codes backed by Stripe")
console = Console()


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind host"),
    port: int = typer.Option(8080, help="Bind port"),
):
    """Start the Paywall-Engine API server."""
    import uvicorn
    from paywall_engine.app import create_app

    console.print(f"[bold green]Starting Paywall-Engine on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command("generate-code")
def generate_code(
    count: int = typer.Option(1, min=1, help="Number of codes to print"),
):
    """Generate access codes (offline, nothing is stored)."""
    from paywall_engine.entitlements.codes import generate_access_code

    for _ in range(count):
        console.print(f"[bold]{generate_access_code()}[/bold]")


@app.command()
def health(
    url: str = typer.Option("http://localhost:8080", help="Server URL"),
):
    """Check Paywall-Engine server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        console.print(f"[bold green]{data['status']}[/bold green] — v{data['version']}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
