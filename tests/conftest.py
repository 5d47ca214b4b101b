"""Shared fixtures: a small docs tree shaped like the Bun repository."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bundocs.service import DocsService, open_context

DOCS_JSON = {
    "navigation": {
        "tabs": [
            {
                "tab": "Runtime",
                "groups": [
                    {
                        "group": "Core",
                        "pages": [
                            "/runtime/bun-apis",
                            "/runtime/http-server",
                            "/runtime/missing-page",
                        ],
                    }
                ],
            },
            {"tab": "Reference"},
            {
                "tab": "Bundler",
                "groups": [{"group": "Basics", "pages": ["/bundler"]}],
            },
        ]
    }
}

FILES = {
    "runtime/bun-apis.md": "# Bun APIs\nUse Bun.serve() for HTTP.",
    "runtime/http-server.mdx": (
        "---\n"
        "title: HTTP\n"
        "---\n"
        "# HTTP server\n"
        "Start a server with Bun.serve and handle requests. Bun.serve supports WebSockets.\n"
    ),
    "bundler/index.md": "# Bundler\nBun's fast native bundler builds JavaScript and TypeScript.\n",
    "guides/http/simple.md": (
        "---\n"
        "name: Write a simple HTTP server\n"
        "description: Use Bun.serve to start a server\n"
        "---\n"
        "const server = Bun.serve({ port: 3000 });\n"
    ),
    "guides/read-file/text.mdx": "Read a file as text\n\nUse Bun.file(path).text() to read a file.\n",
    "ecosystem/react.md": "Bun supports JSX and React out of the box.\n",
}


def write_tree(root: Path, files: dict[str, str]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Docs tree with a docs.json navigation, guides and ecosystem pages."""
    root = tmp_path / "docs"
    write_tree(root, FILES)
    (root / "docs.json").write_text(json.dumps(DOCS_JSON), encoding="utf-8")
    (root / "guides" / "http" / "index.json").write_text(
        json.dumps({"name": "HTTP", "description": "HTTP guides"}), encoding="utf-8"
    )
    return root


@pytest.fixture
def service(docs_dir: Path, tmp_path: Path):
    context = open_context(docs_dir, tmp_path / "search.db")
    svc = DocsService(context)
    yield svc
    svc.close()
