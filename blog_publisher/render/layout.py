"""Page layouts rendered with Jinja2."""

from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape


def default_environment() -> Environment:
    return Environment(
        loader=PackageLoader("blog_publisher", "render/templates"),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class Layout:
    """Turns page models into HTML documents.

    The index model carries `description` and `posts`; the post model
    carries `title`, `date`, `content` (trusted HTML), `outline`,
    `prev_post` and `next_post`.
    """

    INDEX_TEMPLATE = "index.html"
    POST_TEMPLATE = "post.html"

    def __init__(self, environment: Optional[Environment] = None):
        self.environment = environment or default_environment()

    def index(self, model: Dict[str, Any]) -> str:
        return self.environment.get_template(self.INDEX_TEMPLATE).render(**model)

    def post(self, model: Dict[str, Any]) -> str:
        return self.environment.get_template(self.POST_TEMPLATE).render(**model)
