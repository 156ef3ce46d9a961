"""
Line-oriented markdown for the plan document view.

Model plans use a small subset of markdown, so this is not a general parser:

    "### x"         → h3
    "## x"          → h2
    "* x" / "- x"   → bullet
    ""              → spacer
    anything else   → paragraph

Within bullets and paragraphs, **bold** runs split the line into alternating
plain/bold fragments.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass, field
from typing import List, Literal

BlockKind = Literal["h2", "h3", "bullet", "spacer", "paragraph"]

_BOLD = re.compile(r"\*\*(.*?)\*\*")
_BULLET_MARKER = re.compile(r"^[*-]\s")


@dataclass
class Fragment:
    text: str
    bold: bool = False


@dataclass
class Block:
    kind: BlockKind
    fragments: List[Fragment] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(f.text for f in self.fragments)


def split_bold(line: str) -> List[Fragment]:
    """Split a line on **bold** runs; empty plain pieces between runs are dropped."""
    fragments: List[Fragment] = []
    last = 0
    for match in _BOLD.finditer(line):
        if match.start() > last:
            fragments.append(Fragment(line[last : match.start()]))
        fragments.append(Fragment(match.group(1), bold=True))
        last = match.end()
    if last < len(line):
        fragments.append(Fragment(line[last:]))
    return fragments


def parse_markdown(content: str) -> List[Block]:
    blocks: List[Block] = []
    for line in content.split("\n"):
        if line.startswith("### "):
            blocks.append(Block("h3", [Fragment(line[4:])]))
        elif line.startswith("## "):
            blocks.append(Block("h2", [Fragment(line[3:])]))
        elif line.strip().startswith(("* ", "- ")):
            item = _BULLET_MARKER.sub("", line.strip(), count=1)
            blocks.append(Block("bullet", split_bold(item)))
        elif line.strip() == "":
            blocks.append(Block("spacer"))
        else:
            blocks.append(Block("paragraph", split_bold(line)))
    return blocks


def _fragments_html(fragments: List[Fragment]) -> str:
    return "".join(
        f"<strong>{html.escape(f.text)}</strong>" if f.bold else html.escape(f.text)
        for f in fragments
    )


def render_html(content: str) -> str:
    """Render plan markdown to an HTML fragment (consecutive bullets share one <ul>)."""
    out: List[str] = []
    in_list = False
    for block in parse_markdown(content):
        if block.kind == "bullet":
            if not in_list:
                out.append("<ul>")
                in_list = True
            out.append(f"<li>{_fragments_html(block.fragments)}</li>")
            continue
        if in_list:
            out.append("</ul>")
            in_list = False
        if block.kind in ("h2", "h3"):
            out.append(f"<{block.kind}>{_fragments_html(block.fragments)}</{block.kind}>")
        elif block.kind == "spacer":
            out.append('<div class="spacer"></div>')
        else:
            out.append(f"<p>{_fragments_html(block.fragments)}</p>")
    if in_list:
        out.append("</ul>")
    return "\n".join(out)
