"""Entry point for cdnscli: the TUI, or a single sub-command."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

LOG_FILE = Path.home() / ".cache" / "cdnscli" / "cdnscli.log"


def setup_logging(debug: bool, log_file: Optional[Path] = None) -> None:
    """Send log records to a file; the terminal belongs to the TUI."""
    log_file = log_file or LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file)
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.WARNING)


def parse_args(argv=None) -> argparse.Namespace:
    from cdnscli import __version__
    from cdnscli.commands import add_subcommands
    from cdnscli.config import OUTPUT_FORMATS

    parser = argparse.ArgumentParser(
        prog="cdnscli", description="Browse and edit DNS zones and records."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="path to the YAML config file")
    parser.add_argument("--provider", default="", help="provider name from the config")
    parser.add_argument("-T", "--timeout", type=float, help="per-request timeout in seconds")
    parser.add_argument("-o", "--output-format", choices=OUTPUT_FORMATS,
                        help="output format of the sub-commands")
    parser.add_argument("-d", "--debug", action="store_true", help="write debug logs")
    add_subcommands(parser)

    args = parser.parse_args(argv)
    if args.command == "search" and not (args.name or args.content):
        parser.error("search: specify --name or --content")
    return args


def main(argv=None):
    """Main entry point."""
    from rich.console import Console

    from cdnscli.config import Config, ConfigError
    from cdnscli.providers import ProviderError, default_registry, display_name

    args = parse_args(argv)
    console = Console(stderr=True)

    try:
        config = Config.load(args.config)
        if args.timeout is not None:
            config.client_timeout = args.timeout
        if args.output_format:
            config.output_format = args.output_format
        config.debug = config.debug or args.debug
        config.validate()
    except ConfigError as e:
        console.print(f"\n[bold red]Configuration Error:[/bold red] {e}")
        console.print(
            "\n[yellow]Create a config file at one of:[/yellow]"
            + "".join(f"\n  [bold]{p}[/bold]" for p in Config.CONFIG_PATHS)
            + "\n\nor export [bold]CLOUDFLARE_API_TOKEN[/bold]."
        )
        sys.exit(1)

    setup_logging(config.debug)

    try:
        provider_cfg = config.get_provider(args.provider)
        provider = default_registry().create(args.provider, config)
    except ProviderError as e:
        console.print(f"\n[bold red]Provider Error:[/bold red] {e}")
        sys.exit(1)

    if args.command:
        from cdnscli.printers import new_printer

        printer = new_printer(config.output_format)
        try:
            args.func(provider, args, printer, config.client_timeout)
        except ProviderError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            sys.exit(1)
        return

    # Launch the TUI app
    from cdnscli.app import CdnsApp
    from cdnscli.ui.model import Styles

    name = display_name(provider_cfg.type, str(provider_cfg.options.get("display_name", "")))
    app = CdnsApp(
        provider,
        client_timeout=config.client_timeout,
        styles=Styles(title=f"{name} DNS CLI"),
    )
    app.run()


if __name__ == "__main__":
    main()
