"""Astro component extraction: script front matter plus template markers."""

import logging
import re
from typing import Optional, Tuple

from ..config import DEFAULT_SOURCE_ALIAS
from .extractors import FileExtractor
from .models import FileRecord
from .outline import Outline
from .script_extractor import TypeScriptExtractor

logger = logging.getLogger(__name__)

FRONTMATTER_RE = re.compile(r"^---\s*\n(.*?)\n---", re.DOTALL)
PROPS_RE = re.compile(r"const\s*\{([^}]+)\}\s*(?::\s*[^=]+)?=\s*Astro\.props")
TEMPLATE_TAG_RE = re.compile(r"<([A-Za-z][\w.-]*)(?:\s+[^>]*)?/?>")
CLIENT_DIRECTIVE_RE = re.compile(r"client:(\w+)")
SLOT_RE = re.compile(r"""<slot(?:\s+name=["'](\w+)["'])?""")

# Standard markup tag names that never denote a component
STANDARD_MARKUP_TAGS = frozenset(
    """
    a abbr address area article aside audio b base bdi bdo blockquote body br
    button canvas caption cite code col colgroup data datalist dd del details
    dfn dialog div dl dt em embed fieldset figcaption figure footer form h1 h2
    h3 h4 h5 h6 head header hgroup hr html i iframe img input ins kbd label
    legend li link main map mark menu meta meter nav noscript object ol
    optgroup option output p param picture pre progress q rp rt ruby s samp
    script search section select slot small source span strong style sub
    summary sup table tbody td template textarea tfoot th thead time title tr
    track u ul var video wbr svg path g circle rect line polyline polygon
    ellipse defs use symbol text tspan clippath lineargradient radialgradient
    stop mask pattern image foreignobject fragment
    """.split()
)


def split_frontmatter(source: str) -> Tuple[Optional[str], str, int]:
    """Split an Astro file into front matter and template.

    Returns:
        (front matter or None, template, line number where the front matter starts)
    """
    match = FRONTMATTER_RE.match(source)
    if not match:
        return None, source, 0
    return match.group(1), source[match.end():], 1


class AstroExtractor(FileExtractor):
    """Extract Astro components by delegating the front matter to the script extractor."""

    def __init__(
        self,
        alias_token: str = DEFAULT_SOURCE_ALIAS,
        script_extractor: Optional[FileExtractor] = None,
    ):
        """Initialize Astro extractor.

        Args:
            alias_token: Import prefix that stands for the source root
            script_extractor: Script extractor (regex or tree-sitter) used for the front matter
        """
        super().__init__("astro")
        self.script_extractor = script_extractor or TypeScriptExtractor("astro", alias_token)

    def extract_source(self, source: str, record: FileRecord, outline: Outline) -> None:
        frontmatter, template, offset = split_frontmatter(source)

        if frontmatter:
            self.script_extractor.extract_script(
                frontmatter,
                record,
                outline,
                line_offset=offset,
                jsx=False,
                keep_all_constants=True,
            )
            for match in PROPS_RE.finditer(frontmatter):
                for prop in match.group(1).split(","):
                    name = prop.split("=")[0].split(":")[0].strip()
                    if name:
                        record.annotate("astro_props", name)

        self._scan_template(template, record)

    @staticmethod
    def _scan_template(template: str, record: FileRecord) -> None:
        for name in TEMPLATE_TAG_RE.findall(template):
            if name.lower() in STANDARD_MARKUP_TAGS:
                continue
            record.annotate("astro_components", name)

        for directive in CLIENT_DIRECTIVE_RE.findall(template):
            record.annotate("client_directives", directive)

        for slot in SLOT_RE.findall(template):
            record.annotate("slots", slot or "default")
