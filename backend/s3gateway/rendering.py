"""
HTML rendering of folder listings.
"""

import html
import os
import re
from typing import Iterable, Optional
from urllib.parse import quote

from s3gateway.schemas import ListEntry

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")
INDEX_TEMPLATE = "index.html"
PLACEHOLDER = re.compile(r"\{\{(title|base|rows)\}\}")


def display_path(current_path: str) -> str:
    """Title shown for a folder: '/' for the root, the slash-terminated prefix otherwise."""
    if not current_path:
        return "/"
    return current_path if current_path.endswith("/") else current_path + "/"


def folder_url(current_path: str, root_path: str = "") -> str:
    """Absolute URL path of a folder page.

    A key starting with a slash gets it percent-encoded, so the URL never
    turns into a scheme-relative ``//host/...`` reference.
    """
    quoted = quote(current_path)
    if quoted.startswith("/"):
        quoted = "%2F" + quoted[1:]
    return root_path + "/" + quoted


def render_row(href: str, label: str, size: str = "", last_modified: str = "") -> str:
    return (
        "        <tr>"
        f'<td><a href="{html.escape(href)}">{html.escape(label)}</a></td>'
        f'<td class="size">{html.escape(size)}</td>'
        f'<td class="modified">{html.escape(last_modified)}</td>'
        "</tr>"
    )


def render_folder(current_path: str, entries: Iterable[ListEntry], base_url: Optional[str] = None) -> str:
    """Render the listing page for a folder.

    Rows keep the order of ``entries``. Non-root folders get a leading
    ``..`` row pointing at the parent. Entry links are relative to
    ``base_url``, which defaults to the folder itself.
    """
    if base_url is None:
        base_url = folder_url(current_path)

    with open(os.path.join(TEMPLATE_DIR, INDEX_TEMPLATE), 'r', encoding='utf-8') as f:
        html_content = f.read()

    rows = []
    if current_path:
        rows.append(render_row("../", ".."))

    for entry in entries:
        # The folder's own marker object
        if not entry.name:
            continue
        rows.append(render_row(
            "./" + quote(entry.name),
            entry.name,
            entry.size_human,
            entry.last_modified
        ))

    values = {
        "title": html.escape(display_path(current_path)),
        "base": html.escape(base_url),
        "rows": "\n".join(rows),
    }
    return PLACEHOLDER.sub(lambda match: values[match.group(1)], html_content)
