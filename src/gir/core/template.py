"""Redirect page template."""

import html
from dataclasses import asdict
from string import Template

from gir.core.resolver import RedirectTarget

PAGE_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
<meta http-equiv="Content-Type" content="text/html; charset=utf-8"/>
<meta name="go-import" content="${import_path} ${vcs} ${source_url}">
<meta name="go-source" content="${import_path} ${source_url}${dir_suffix}${file_suffix}">
<meta http-equiv="refresh" content="0; url=${docs_url}">
</head>
<body>
Redirecting to docs at <a href="${docs_url}">${docs_url}</a>...
</body>
</html>
""")


def render_page(target: RedirectTarget) -> str:
    """Render the redirect page for a target.

    All values are HTML-escaped.

    Args:
        target: Resolved redirect values for one request

    Returns:
        Complete HTML document

    Raises:
        KeyError: If the template refers to a field the target lacks
    """
    values = {name: html.escape(value) for name, value in asdict(target).items()}
    return PAGE_TEMPLATE.substitute(values)
