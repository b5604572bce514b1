"""gir - Go import redirector.

Serves vanity import path redirects: ``?go-get=1`` requests get an HTML page
with ``go-import`` and ``go-source`` meta tags, everything else gets 404.
"""

from gir.core.errors import ConfigurationError, GirError, RequestResolutionError
from gir.core.resolver import RedirectResolver, RedirectSettings, RedirectTarget

__all__ = [
    "ConfigurationError",
    "GirError",
    "RedirectResolver",
    "RedirectSettings",
    "RedirectTarget",
    "RequestResolutionError",
]
