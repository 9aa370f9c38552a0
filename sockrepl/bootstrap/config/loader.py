import argparse
import os
from functools import lru_cache
from pathlib import Path

DEFAULT_CONFIG_NAME = "sockrepl.yaml"


@lru_cache
def get_cli_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="sockrepl",
        description=(
            "Start a sockrepl server.\n\n"
            "sockrepl listens on a local AF_UNIX socket and executes the Python\n"
            "code sent by connected clients inside this process, answering each\n"
            "request with the resulting value or the raised error.\n\n"
            "Anyone able to connect to the socket can run arbitrary code with\n"
            "the privileges of this process: the socket's permissions are the\n"
            "only access control."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a sockrepl configuration file"
    )

    parser.add_argument(
        "-s", "--socket",
        type=str,
        help="Path of the listening socket (overrides server.socket_path)"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity for the server.\n"
            "Choose among: DEBUG, INFO, WARNING, ERROR, CRITICAL.\n\n"
            "DEBUG    → connection open/close and rejected requests.\n"
            "INFO     → startup and shutdown (default).\n"
            "WARNING  → oversized frames and other protocol violations.\n"
            "ERROR    → unexpected transport failures.\n"
            "CRITICAL → only critical failures.\n\n"
            "Example:\n"
            "  --log-level DEBUG"
        ),
    )

    return parser.parse_args()


@lru_cache
def get_configfile() -> Path | None:
    args = get_cli_args()

    # Priority: CLI > ENV > default file in current working directory
    raw = args.config or os.getenv("SOCKREPLCONFIG")

    if raw is None:
        file = Path.cwd() / DEFAULT_CONFIG_NAME
        # The default file is optional, built-in defaults apply without it.
        return file if file.is_file() else None

    file = Path(raw).expanduser()
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the SOCKREPLCONFIG environment variable\n"
            f"  - Or place a '{DEFAULT_CONFIG_NAME}' file in the current working directory."
        )

    return file
