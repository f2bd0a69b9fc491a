"""Math-aware rendering of tutor feedback.

Feedback text is split into typed segments (plain text, inline math, block
math) and each segment goes through its own safe path: text is HTML-escaped,
math is typeset to MathML and the generated markup is sanitized against a
MathML allowlist. A region that cannot be typeset is shown as its raw source.
"""
import logging, re
from dataclasses import dataclass
from typing import List, Union

import bleach
from latex2mathml.converter import convert as latex_to_mathml
from markupsafe import Markup, escape

logger = logging.getLogger(__name__)

BLOCK_MATH = re.compile(r"\$\$(.*?)\$\$", re.DOTALL)
INLINE_MATH = re.compile(r"\$([^$]+)\$")

MATHML_TAGS = {
    "math", "semantics", "annotation", "mrow", "mi", "mn", "mo", "mtext", "ms", "mspace",
    "msub", "msup", "msubsup", "munder", "mover", "munderover", "mfrac", "msqrt", "mroot",
    "mstyle", "mpadded", "mphantom", "menclose", "merror", "mfenced",
    "mtable", "mtr", "mtd", "mlabeledtr", "mmultiscripts", "mprescripts", "none",
}
MATHML_ATTRS = [
    "display", "displaystyle", "scriptlevel", "mathvariant", "mathsize", "mathcolor",
    "stretchy", "fence", "separator", "separators", "lspace", "rspace", "form",
    "largeop", "movablelimits", "symmetric", "minsize", "maxsize", "accent", "accentunder",
    "linethickness", "width", "height", "depth", "notation", "open", "close",
    "columnalign", "columnspacing", "columnlines", "rowalign", "rowspacing", "rowlines",
    "frame", "framespacing", "align", "equalrows", "equalcolumns", "encoding",
]


# ---------- SEGMENTS ----------
@dataclass(frozen=True)
class Text:
    text: str

    @property
    def raw(self) -> str:
        return self.text


@dataclass(frozen=True)
class InlineMath:
    latex: str

    @property
    def raw(self) -> str:
        return f"${self.latex}$"


@dataclass(frozen=True)
class BlockMath:
    latex: str

    @property
    def raw(self) -> str:
        return f"$${self.latex}$$"


Segment = Union[Text, InlineMath, BlockMath]


def _split(text: str, pattern, kind) -> List[Segment]:
    out: List[Segment] = []
    pos = 0
    for m in pattern.finditer(text):
        if m.start() > pos:
            out.append(Text(text[pos:m.start()]))
        out.append(kind(m.group(1)))
        pos = m.end()
    if pos < len(text):
        out.append(Text(text[pos:]))
    return out


def parse_segments(text: str) -> List[Segment]:
    """Split ``text`` into segments; ``$$...$$`` is consumed before ``$...$``."""
    segments: List[Segment] = []
    for seg in _split(text or "", BLOCK_MATH, BlockMath):
        if isinstance(seg, Text):
            segments.extend(_split(seg.text, INLINE_MATH, InlineMath))
        else:
            segments.append(seg)
    return segments


# ---------- RENDER ----------
def render_text(text: str) -> Markup:
    return Markup("<br />").join(escape(line) for line in text.split("\n"))


def braces_balanced(latex: str) -> bool:
    depth = 0
    escaped = False
    for ch in latex:
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


def render_math(latex: str, display: str) -> Markup:
    # latex2mathml silently drops or typesets stray braces
    if not braces_balanced(latex):
        raise ValueError("unbalanced braces")
    mathml = latex_to_mathml(latex, display=display)
    return Markup(bleach.clean(mathml, tags=MATHML_TAGS, attributes=MATHML_ATTRS, strip=True))


def render_segment(seg: Segment) -> Markup:
    if isinstance(seg, Text):
        return render_text(seg.text)
    display = "block" if isinstance(seg, BlockMath) else "inline"
    try:
        return render_math(seg.latex, display)
    except Exception as e:
        logger.debug("Could not typeset %r: %s", seg.raw, e)
        return render_text(seg.raw)


def render_segments(segments: List[Segment]) -> Markup:
    return Markup("").join(render_segment(seg) for seg in segments)


def render_feedback(text: str) -> Markup:
    return render_segments(parse_segments(text))
