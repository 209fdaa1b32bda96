"""CLI entry point and argument parsing"""

import sys
import argparse
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
import settings


console = Console()


def print_banner(bind_address: str, port: int):
    """Show the local URLs of the running relay"""
    host = "localhost" if bind_address in ("0.0.0.0", "::") else bind_address
    base_url = f"http://{host}:{port}"

    table = Table.grid(padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("Server", base_url)
    table.add_row("Auth", f"{base_url}/auth/login")
    table.add_row("Status", f"{base_url}/auth/status")
    table.add_row("Upstream", str(settings.CHAT_API_URL))

    console.print(Panel(table, title="DevAssist Relay", expand=False))


def main():
    """Entry point for the CLI"""
    parser = argparse.ArgumentParser(description="DevAssist chat relay server")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--bind", "-b", default=None, help="Override bind address (default: from config)")
    parser.add_argument("--port", "-p", type=int, default=None, help="Override port (default: from config)")

    args = parser.parse_args()

    missing = settings.missing_required_settings()
    if missing:
        console.print("[red]ERROR:[/red] Missing required environment variables:")
        for name in missing:
            console.print(f"   - {name}")
        console.print("\nCopy .env.example to .env and fill in your values.")
        sys.exit(1)

    # Imported here so a configuration error is reported before the app is built
    from proxy import RelayServer

    server = RelayServer(debug=args.debug, bind_address=args.bind, port=args.port)
    print_banner(server.bind_address, server.port)

    try:
        server.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        console.print("Goodbye!")


if __name__ == "__main__":
    main()
