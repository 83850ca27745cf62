"""Command line interface for tokenline."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rich.logging import RichHandler
from rich.prompt import Prompt

from . import __version__
from .cli_progress import RichPresenter, render_configuration_summary, render_result
from .errors import ApiError, ConfigurationError, UserCancelled
from .models import ClientConfig, ErrorPolicy, HttpMethod
from .orchestrator import ApiClient

logger = logging.getLogger(__name__)


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


class StaticLoginCodeProvider:
    """Login code from the command line or environment, prompting when missing."""

    def __init__(self, code: Optional[str] = None):
        self._code = code

    async def get_login_code(self) -> str:
        if self._code:
            return self._code
        return await asyncio.to_thread(Prompt.ask, "Login code")


class PathFilePicker:
    """File picker over paths given on the command line."""

    def __init__(self, paths: Sequence[Path]):
        self._paths = [Path(path) for path in paths]

    async def choose_files(self) -> List[str]:
        if not self._paths:
            raise UserCancelled("No files given")
        return [str(path) for path in self._paths]


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug or --log-level is provided.
    Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    if silent or (not debug and not log_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    """Split one ``KEY=value`` line; blank lines and comments give None."""
    line = line.strip()
    if line.startswith("export "):
        line = line[len("export ") :]
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key or key.startswith("#"):
        return None
    value = value.strip()
    if value[:1] in ("'", '"') and value[-1:] == value[:1] and len(value) > 1:
        value = value[1:-1]
    return key, value


def _load_env_file(path: Path, override: bool = False) -> List[str]:
    """
    Apply a ``.env`` file to ``os.environ``.

    Variables already set in the environment win unless ``override`` is set.
    Returns the keys that were actually applied, in file order.
    """
    if not path.is_file():
        raise CLIError(f"env file not found: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise CLIError(f"could not read env file {path}: {exc}") from exc

    applied: List[str] = []
    for entry in filter(None, map(_parse_env_line, lines)):
        key, value = entry
        if override or key not in os.environ:
            os.environ[key] = value
            applied.append(key)
    return applied


def _env_file_for(explicit: Optional[Path]) -> Optional[Path]:
    """The file named by --env-file, else ``./.env`` when present."""
    if explicit is not None:
        return Path(explicit)
    default_env = Path(".env")
    return default_env if default_env.is_file() else None


def _parse_query(pairs: Optional[Sequence[str]]) -> Dict[str, str]:
    query: Dict[str, str] = {}
    for pair in pairs or []:
        if "=" not in pair:
            raise CLIError(f"query parameter must be key=value: {pair}")
        key, value = pair.split("=", 1)
        if not key:
            raise CLIError(f"query parameter has an empty key: {pair}")
        query[key] = value
    return query


def _parse_body(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    if raw.startswith("@"):
        try:
            raw = Path(raw[1:]).read_text(encoding="utf-8")
        except OSError as exc:
            raise CLIError(f"could not read body file {raw[1:]}: {exc}") from exc
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise CLIError(f"body is not valid JSON: {exc}") from exc


async def _run_request(client: ApiClient, args: argparse.Namespace) -> int:
    data = await client.request(
        args.path,
        query=_parse_query(args.query),
        body=_parse_body(args.data),
        method=HttpMethod(args.method.upper()),
        spinner_instant=True,
        error_policy=ErrorPolicy.SHOW_AND_RAISE,
    )
    render_result(data)
    return 0


async def _run_upload(client: ApiClient, args: argparse.Namespace) -> int:
    responses = await client.upload_image(args.endpoint)
    render_result(responses)
    return 0


async def _run(config: ClientConfig, args: argparse.Namespace) -> int:
    presenter = RichPresenter()
    file_picker = PathFilePicker(getattr(args, "files", None) or [])
    logger.debug("Running %s against %s", args.command, config.remote_root)
    async with ApiClient(
        config,
        login_code_provider=StaticLoginCodeProvider(args.login_code),
        presenter=presenter,
        file_picker=file_picker,
    ) as client:
        if args.command == "request":
            return await _run_request(client, args)
        if args.command == "upload":
            return await _run_upload(client, args)
        raise CLIError(f"unknown command: {args.command}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokenline",
        description="Call an authenticated API or upload files through it.",
    )
    parser.add_argument(
        "--remote-root",
        default=None,
        help="API root URL (default from TOKENLINE_REMOTE_ROOT)",
    )
    parser.add_argument(
        "--login-code",
        default=None,
        help="Login code to exchange for a token (default from TOKENLINE_LOGIN_CODE, else prompt)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"tokenline {__version__}",
    )

    commands = parser.add_subparsers(dest="command")

    request = commands.add_parser("request", help="Send one API request")
    request.add_argument("path", help="API path, e.g. /items")
    request.add_argument(
        "-X",
        "--method",
        default="GET",
        choices=[method.value for method in HttpMethod] + [method.value.lower() for method in HttpMethod],
        help="HTTP method (default GET)",
    )
    request.add_argument(
        "-q",
        "--query",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Query parameter, repeatable; order is preserved",
    )
    request.add_argument(
        "-d",
        "--data",
        default=None,
        help="JSON body, or @file to read it from a file",
    )

    upload = commands.add_parser("upload", help="Upload files one by one")
    upload.add_argument("endpoint", help="Upload endpoint, e.g. /upload")
    upload.add_argument("files", nargs="+", type=Path, help="Files to upload")

    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = _env_file_for(args.env_file)
    env_keys: List[str] = []
    if used_env_file is not None:
        try:
            env_keys = _load_env_file(used_env_file)
        except CLIError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "upload":
        missing = [str(path) for path in args.files if not Path(path).is_file()]
        if missing:
            print(f"ERROR: file does not exist: {', '.join(missing)}", file=sys.stderr)
            return 1

    args.login_code = args.login_code or os.getenv("TOKENLINE_LOGIN_CODE")
    try:
        config = ClientConfig.from_env(remote_root=args.remote_root)
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if not args.silent:
        render_configuration_summary(
            {
                "Command": args.command,
                "Remote Root": config.remote_root,
                "Login Code": "given" if args.login_code else "prompt",
                "Env File": f"{used_env_file} ({len(env_keys)} set)" if used_env_file else "-",
                "Logging": effective_log_mode,
            }
        )

    try:
        return asyncio.run(_run(config, args))
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except UserCancelled as exc:
        print(f"Cancelled: {exc}", file=sys.stderr)
        return 1
    except ApiError as exc:
        # Request errors were already shown by the presenter
        if args.command != "request":
            print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
