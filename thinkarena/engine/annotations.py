# thinkarena/engine/annotations.py
"""
Side-channel markup embedded in persona replies.

A reply can carry, next to the human-readable text:

- one point award, in one of two grammars:
    award:    {award_points: 5, type: "new_argument"}
    category: [REASONING +N: why] [ENGAGEMENT +N: why] [BONUS +N: why] [TOTAL: +N]
              (older replies use a single [Score: +N])
- one badge:  [badge: reason_giver]
- one table (award grammar with tables enabled):
              {table: {"headers": [...], "rows": [[...]]}}

`parse()` pulls these out and returns the reply with every recognised token
removed.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger("thinkarena")

AWARD_RE = re.compile(
    r'\{\s*award_points\s*:\s*(\d+)\s*,\s*type\s*:\s*"{1,2}([^"]+?)"{1,2}\s*\}',
    re.IGNORECASE,
)
BADGE_RE = re.compile(r"\[\s*badge\s*:\s*([a-z_]+)\s*\]", re.IGNORECASE)
CATEGORY_RE = re.compile(
    r"\[\s*(REASONING|ENGAGEMENT|BONUS)\s*\+(\d+)\s*:(?:[^\[\]\n]|\[[^\[\]\n]*\])*\]",
    re.IGNORECASE,
)
TOTAL_RE = re.compile(r"\[\s*TOTAL\s*:\s*\+(\d+)\s*\]", re.IGNORECASE)
LEGACY_SCORE_RE = re.compile(r"\[\s*Score\s*:\s*\+(\d+)\s*\]", re.IGNORECASE)
TABLE_OPEN_RE = re.compile(r"\{\s*table\s*:", re.IGNORECASE)
SPEAKER_RE = re.compile(r"(Qaylee|Plato):\s*([\s\S]*?)(?=(?:Qaylee:|Plato:|$))")

CATEGORIES = ("reasoning", "engagement", "bonus")


@dataclass(frozen=True)
class PointAward:
    amount: int
    category: str

    def as_dict(self) -> dict:
        return {"amount": self.amount, "type": self.category}


@dataclass
class Annotation:
    display_text: str
    points: Optional[PointAward] = None
    categories: Dict[str, int] = field(default_factory=dict)
    badge: Optional[str] = None
    table: Optional[dict] = None

    @property
    def score(self) -> int:
        return self.points.amount if self.points else 0


# -------------------------
# TABLE TOKEN
# -------------------------
def _find_table_span(text: str, start: int) -> Tuple[int, Optional[int]]:
    """
    Return (end, json_start) for a {table: ...} token opening at `start`.

    Braces are balanced outside JSON strings. An unclosed token runs to the end
    of its line and json_start is None.
    """
    m = TABLE_OPEN_RE.match(text, start)
    json_start = m.end()
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1, json_start
    eol = text.find("\n", start)
    return (len(text) if eol == -1 else eol), None


def _load_table(raw: str) -> Optional[dict]:
    try:
        data = json.loads(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"[Table] Failed to parse table JSON: {e}")
        return None
    if not isinstance(data, dict):
        logger.warning("[Table] Table payload is not an object")
        return None
    headers = data.get("headers")
    rows = data.get("rows")
    if not isinstance(headers, list) or not isinstance(rows, list):
        logger.warning("[Table] Table payload missing headers/rows")
        return None
    return {"headers": headers, "rows": rows}


def extract_tables(text: str) -> Tuple[Optional[dict], str]:
    """First well-formed table wins; every table token is stripped."""
    table = None
    out: List[str] = []
    pos = 0
    while True:
        m = TABLE_OPEN_RE.search(text, pos)
        if not m:
            out.append(text[pos:])
            break
        out.append(text[pos:m.start()])
        end, json_start = _find_table_span(text, m.start())
        if table is None and json_start is not None:
            # drop the wrapper's closing brace
            table = _load_table(text[json_start:end - 1])
        elif json_start is None:
            logger.warning("[Table] Unterminated table token")
        pos = end
    return table, "".join(out)


# -------------------------
# GRAMMARS
# -------------------------
class Grammar:
    name = "base"
    tables = False

    def strip_patterns(self) -> List[re.Pattern]:
        return [BADGE_RE]

    def extract_points(self, text: str) -> Tuple[Optional[PointAward], Dict[str, int]]:
        raise NotImplementedError


class AwardGrammar(Grammar):
    """Single {award_points: N, type: "label"} directive; first one wins."""

    name = "award"

    def __init__(self, tables: bool = False):
        self.tables = tables
        if tables:
            self.name = "award_table"

    def strip_patterns(self):
        return [AWARD_RE, BADGE_RE]

    def extract_points(self, text):
        m = AWARD_RE.search(text)
        if not m:
            return None, {}
        return PointAward(amount=int(m.group(1)), category=m.group(2).strip()), {}


class CategoryGrammar(Grammar):
    """
    Three category directives plus a total.

    Precedence: explicit [TOTAL: +N], then the sum of whichever categories are
    present, then a legacy [Score: +N], else nothing.
    """

    name = "category"

    def strip_patterns(self):
        return [CATEGORY_RE, TOTAL_RE, LEGACY_SCORE_RE, BADGE_RE]

    def extract_points(self, text):
        categories: Dict[str, int] = {}
        for m in CATEGORY_RE.finditer(text):
            key = m.group(1).lower()
            # first directive per category counts
            categories.setdefault(key, int(m.group(2)))

        total = TOTAL_RE.search(text)
        if total:
            return PointAward(int(total.group(1)), "total"), categories
        if categories:
            return PointAward(sum(categories.values()), "categories"), categories
        legacy = LEGACY_SCORE_RE.search(text)
        if legacy:
            return PointAward(int(legacy.group(1)), "legacy"), categories
        return None, categories


GRAMMARS: Dict[str, Grammar] = {
    "award": AwardGrammar(),
    "award_table": AwardGrammar(tables=True),
    "category": CategoryGrammar(),
}


def get_grammar(name: str) -> Grammar:
    try:
        return GRAMMARS[name]
    except KeyError:
        raise ValueError(f"Unknown annotation grammar: {name}")


# -------------------------
# EXTRACTION
# -------------------------
def _tidy(text: str) -> str:
    text = re.sub(r"[ \t]{2,}", " ", text)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def parse(text: str | None, grammar: Grammar | str = "award") -> Annotation:
    """Extract points, badge and table from a reply and clean its text."""
    if isinstance(grammar, str):
        grammar = get_grammar(grammar)
    raw = text or ""

    points, categories = grammar.extract_points(raw)

    badge = None
    bm = BADGE_RE.search(raw)
    if bm:
        badge = bm.group(1).lower()

    table = None
    cleaned = raw
    if grammar.tables:
        table, cleaned = extract_tables(cleaned)

    for pattern in grammar.strip_patterns():
        cleaned = pattern.sub(" ", cleaned)

    return Annotation(
        display_text=_tidy(cleaned),
        points=points,
        categories=categories,
        badge=badge,
        table=table,
    )


def split_speakers(text: str, table: Optional[dict] = None) -> List[dict]:
    """
    Split a two-persona reply into ordered segments.

    Only Plato segments carry the table. Text with no speaker prefix is
    treated as Qaylee speaking.
    """
    segments = []
    first = SPEAKER_RE.search(text)
    lead = text[:first.start()].strip() if first else ""
    if lead:
        segments.append({"speaker": "qaylee", "content": lead, "table": None})
    for m in SPEAKER_RE.finditer(text):
        speaker = m.group(1).lower()
        content = m.group(2).strip()
        segments.append({
            "speaker": speaker,
            "content": content,
            "table": table if speaker == "plato" else None,
        })
    if not segments and text.strip():
        segments.append({"speaker": "qaylee", "content": text.strip(), "table": None})
    return segments
