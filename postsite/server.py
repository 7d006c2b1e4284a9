from __future__ import annotations

import os
import posixpath
import sys
from functools import partial
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

DEFAULT_PORT = 8080
PORT_ENV = "POSTSITE_PORT"
CACHE_CONTROL = "max-age=7200"


def resolve_port(port: Optional[int]) -> int:
    if port:
        return port
    env_port = os.environ.get(PORT_ENV, "").strip()
    if env_port.isdigit():
        return int(env_port)
    return DEFAULT_PORT


def resolve_path(root: Path, url_path: str) -> Optional[Path]:
    """Map a request path onto a file under ``root``.

    Trailing slashes are dropped so WordPress-style permalinks like
    ``/2013/06/06/61/`` still reach ``2013/06/06/61.html``.
    """
    path = unquote(urlsplit(url_path).path)
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    path = posixpath.normpath(path).lstrip("/")
    if path.startswith(".."):
        return None
    if path in ("", "."):
        candidates = [root / "index.html"]
    else:
        candidates = [root / path, root / f"{path}.html", root / path / "index.html"]
    root_resolved = root.resolve()
    for candidate in candidates:
        if candidate.is_file() and candidate.resolve().is_relative_to(root_resolved):
            return candidate
    return None


class SiteHandler(SimpleHTTPRequestHandler):
    def __init__(self, *args, root: Path, **kwargs):
        self.root = root
        super().__init__(*args, directory=str(root), **kwargs)

    def send_head(self):
        target = resolve_path(self.root, self.path)
        if target is None:
            body = b"Not found"
            self.send_response(404)
            self.send_header("Cache-Control", CACHE_CONTROL)
            self.send_header("Content-Type", "text/plain")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            if self.command != "HEAD":
                self.wfile.write(body)
            return None
        try:
            handle = open(target, "rb")
        except OSError:
            self.send_error(404, "Not found")
            return None
        self.send_response(200)
        self.send_header("Cache-Control", CACHE_CONTROL)
        self.send_header("Content-Type", self.guess_type(str(target)))
        self.send_header("Content-Length", str(target.stat().st_size))
        self.end_headers()
        return handle

    def log_message(self, format: str, *args) -> None:
        print(self.path, file=sys.stderr)


def serve(root: Path, port: Optional[int] = None) -> None:
    port = resolve_port(port)
    if not root.exists():
        print(f"Output directory not found: {root}. Run a build first.", file=sys.stderr)
        sys.exit(1)
    handler = partial(SiteHandler, root=root)
    with ThreadingHTTPServer(("", port), handler) as httpd:
        print(f"Server listening on port {port}")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("Server stopped.")
