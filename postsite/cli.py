from __future__ import annotations

import argparse
import sys
import traceback
from pathlib import Path
from typing import Optional

from .config import Settings, load_config
from .errors import BuildError
from .pipeline import run_build
from .server import serve
from .utils import parse_bool, parse_int

COMMANDS = ("build", "serve")


def build_parser(config: dict) -> argparse.ArgumentParser:
    defaults = Settings()

    def cfg_str(key: str, default: object) -> str:
        value = config.get(key)
        return str(default) if value is None else str(value)

    def cfg_bool(key: str, default: bool) -> bool:
        value = config.get(key)
        return parse_bool(value) if value is not None else default

    def cfg_int(key: str, default: int) -> int:
        return parse_int(config.get(key), default)

    parser = argparse.ArgumentParser(description="Static blog generator driven by a table of posts.")
    parser.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    commands = parser.add_subparsers(dest="command")

    build = commands.add_parser("build", help="Compile posts, listings and the feed into the output directory.")
    build.add_argument("--posts", default=cfg_str("posts_file", defaults.posts_file), help="Posts table file.")
    build.add_argument("--templates", default=cfg_str("templates", defaults.templates), help="Templates directory.")
    build.add_argument("--output", default=cfg_str("output", defaults.output), help="Output directory for the site.")
    build.add_argument("--static", default=cfg_str("static", defaults.static), help="Static assets directory.")
    build.add_argument(
        "--examples",
        default=cfg_str("examples", defaults.examples),
        help="Directory of example test modules available to [require:...] blocks.",
    )
    build.add_argument("--site-title", default=cfg_str("site_title", defaults.site_title), help="Site title.")
    build.add_argument(
        "--site-description",
        default=cfg_str("site_description", defaults.site_description),
        help="Site description.",
    )
    build.add_argument("--site-link", default=cfg_str("site_link", ""), help="Public site URL used by the feed.")
    build.add_argument("--site-image", default=cfg_str("site_image", ""), help="Feed image URL.")
    build.add_argument("--author", default=cfg_str("author", ""), help="Author name for feed items.")
    build.add_argument(
        "--custom-domain",
        default=cfg_str("custom_domain", ""),
        help="Custom domain to write into CNAME.",
    )
    build.add_argument(
        "--feed-full-content",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("feed_full_content", False),
        help="Embed full post HTML in feed items.",
    )
    build.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for reading/rendering (0 = auto).",
    )

    serve_cmd = commands.add_parser("serve", help="Serve the output directory over HTTP.")
    serve_cmd.add_argument("-p", "--port", type=int, default=None, help="Port to run on.")
    serve_cmd.add_argument("--output", default=cfg_str("output", defaults.output), help="Directory to serve.")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings.from_mapping(
        {
            "posts_file": args.posts,
            "templates": args.templates,
            "output": args.output,
            "static": args.static,
            "examples": args.examples,
            "site_title": args.site_title,
            "site_description": args.site_description,
            "site_link": args.site_link,
            "site_image": args.site_image,
            "author": args.author,
            "custom_domain": args.custom_domain,
            "feed_full_content": args.feed_full_content,
            "build_workers": args.build_workers,
        }
    )


def main(argv: Optional[list[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="site.toml")
    pre_args, rest = pre_parser.parse_known_args(argv)
    if not rest or rest[0] not in (*COMMANDS, "-h", "--help"):
        rest.insert(0, "build")
    try:
        config = load_config(Path(pre_args.config))
    except BuildError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)

    parser = build_parser(config)
    args = parser.parse_args(["--config", pre_args.config, *rest])
    if args.command == "serve":
        serve(Path(args.output), args.port)
        return

    try:
        report = run_build(settings_from_args(args))
    except BuildError as exc:
        traceback.print_exc(file=sys.stderr)
        print(f"Build failed: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Build completed in {report.elapsed:.2f}s.")
    print(f"Site generated in: {args.output}")
