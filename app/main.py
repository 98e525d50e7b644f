"""Main CLI application for PIM media files."""
import argparse
import json
import logging
import shutil
import sys
from pathlib import Path

from adapters.hal_page_factory import HalPageFactory
from adapters.http_resource_client import HttpResourceClient
from adapters.oauth_session import create_authenticated_session
from adapters.resource_cursor_factory import ResourceCursorFactory
from app.config import Config, ConfigError, get_config
from domain.media_file_api import ProductMediaFileApi
from ports.adapter_error import AdapterError
from ports.media_file_api import FileUnreadableError

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging.

    Args:
        verbose: Enable debug logging if True.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    # Reduce noise from HTTP and OAuth libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests_oauthlib").setLevel(logging.WARNING)
    logging.getLogger("oauthlib").setLevel(logging.WARNING)


def create_media_file_api(config: Config) -> ProductMediaFileApi:
    """
    Create and wire up ProductMediaFileApi with its collaborators.

    Args:
        config: Application configuration.

    Returns:
        Configured ProductMediaFileApi instance.

    Raises:
        TransportError: If authentication fails.
    """
    session = create_authenticated_session(config)
    resource_client = HttpResourceClient(config.base_uri, session=session, timeout=config.timeout)
    logger.debug(f"Resource client initialized: base_uri={config.base_uri}")

    return ProductMediaFileApi(
        resource_client=resource_client,
        page_factory=HalPageFactory(resource_client),
        cursor_factory=ResourceCursorFactory(),
    )


def _json_argument(value: str):
    try:
        return json.loads(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid JSON: {e}") from e


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: List of command-line arguments (defaults to sys.argv)

    Returns:
        Parsed arguments object
    """
    parser = argparse.ArgumentParser(
        description="PIM Media Files - fetch, list, upload and download product media files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  PIM_BASE_URI      Root URI of the PIM (required)
  PIM_CLIENT_ID     API connection client id (required)
  PIM_SECRET        API connection secret (required)
  PIM_USERNAME      API user name (required)
  PIM_PASSWORD      API user password (required)
  PIM_TIMEOUT       Request timeout in seconds (default: 30)
  PIM_PAGE_SIZE     Default page size (default: 10)

Examples:
  python -m app.main get 8/a/b/c/8abc_shoe.jpg
  python -m app.main list --limit 20 --with-count
  python -m app.main all --page-size 100
  python -m app.main upload shoe.jpg --product '{"identifier": "sku-1", "attribute": "picture", "scope": null, "locale": null}'
  python -m app.main download 8/a/b/c/8abc_shoe.jpg -o shoe.jpg
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Print one media file as JSON")
    get_parser.add_argument("code", help="Media file code")

    list_parser = subparsers.add_parser("list", help="Print one page of media files")
    list_parser.add_argument("--limit", type=_positive_int, default=None, help="Page size")
    list_parser.add_argument("--with-count", action="store_true", help="Include the total count")
    list_parser.add_argument("--search", type=_json_argument, default=None, help="Search filter (JSON)")

    all_parser = subparsers.add_parser("all", help="Print every media file, one JSON per line")
    all_parser.add_argument("--page-size", type=_positive_int, default=None, help="Page size")
    all_parser.add_argument("--search", type=_json_argument, default=None, help="Search filter (JSON)")

    upload_parser = subparsers.add_parser("upload", help="Upload a media file for a product")
    upload_parser.add_argument("file", help="Path to the file to upload")
    upload_parser.add_argument(
        "--product",
        type=_json_argument,
        required=True,
        help="Product association (JSON: identifier, attribute, scope, locale)",
    )

    download_parser = subparsers.add_parser("download", help="Download a media file")
    download_parser.add_argument("code", help="Media file code")
    download_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (default: last segment of the code)",
    )

    return parser.parse_args(argv)


def _query(args: argparse.Namespace) -> dict:
    return {"search": args.search} if args.search is not None else {}


def check_readable(path: str) -> None:
    """Fail before authenticating when an upload source cannot be opened."""
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise FileUnreadableError(path, reason=e.strerror or str(e)) from e


def run_command(api: ProductMediaFileApi, args: argparse.Namespace, config: Config) -> None:
    """Execute the selected command against the media-file API."""
    if args.command == "get":
        print(json.dumps(api.get(args.code), indent=2))

    elif args.command == "list":
        page = api.list_per_page(args.limit or config.page_size, args.with_count, _query(args))
        output = {"items": list(page.items), "next": page.next_link}
        if page.count is not None:
            output["items_count"] = page.count
        print(json.dumps(output, indent=2))

    elif args.command == "all":
        cursor = api.all(args.page_size or config.page_size, _query(args))
        for item in cursor.items():
            print(json.dumps(item))

    elif args.command == "upload":
        code = api.create(args.file, args.product)
        print(code)

    elif args.command == "download":
        output = Path(args.output or args.code.rsplit("/", 1)[-1])
        stream = api.download(args.code)
        try:
            with open(output, "wb") as f:
                shutil.copyfileobj(stream, f)
        finally:
            stream.close()
        logger.info(f"Downloaded {args.code} to {output}")
        print(output)


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose)

    try:
        config = get_config()
        if args.command == "upload":
            check_readable(args.file)
        api = create_media_file_api(config)
        run_command(api, args, config)

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    except AdapterError as e:
        logger.error(f"Command {args.command} failed: {e}")
        sys.exit(1)

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)


if __name__ == "__main__":
    main()
