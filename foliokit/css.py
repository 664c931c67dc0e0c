"""A small CSS reader and minifier used by the checks and the build tasks.

The parser only understands as much CSS as the site's stylesheets need: rule
sets, at-rule statements (``@import ...;``), block at-rules that contain rule
sets (``@media``, ``@supports``, ``@keyframes`` ...) and declaration blocks.
Strings and ``url()`` contents are never rewritten.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

NESTED_AT_RULES = (
    "@media",
    "@supports",
    "@document",
    "@-moz-document",
    "@container",
    "@layer",
    "@scope",
    "@keyframes",
    "@-webkit-keyframes",
    "@starting-style",
)

_WS = re.compile(r"\s+")
_QUOTES = ("'", '"')


@dataclass
class Declaration:
    name: str
    value: str
    has_colon: bool = True


@dataclass
class Rule:
    """A parsed rule set, at-rule block, at-rule statement or kept comment."""

    prelude: str
    declarations: Optional[List[Declaration]] = None
    children: Optional[List["Rule"]] = None
    statement: bool = False
    comment: bool = False
    raw_body: Optional[str] = None

    @property
    def selectors(self) -> List[str]:
        return [part.strip() for part in split_top_level(self.prelude, ",") if part.strip()]

    def declaration_map(self) -> Dict[str, str]:
        return {decl.name.lower(): decl.value for decl in self.declarations or []}


@dataclass
class _Cursor:
    text: str
    pos: int = 0
    kept_comments: List[str] = field(default_factory=list)

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""


def _skip_string(text: str, pos: int) -> int:
    """Return the index just past the string literal starting at ``pos``."""
    quote = text[pos]
    pos += 1
    while pos < len(text):
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char == quote:
            return pos + 1
        if char == "\n":
            return pos
        pos += 1
    return pos


def _comment_end(text: str, pos: int) -> int:
    end = text.find("*/", pos + 2)
    return len(text) if end == -1 else end + 2


def _skip_url(text: str, pos: int) -> int:
    """Return the index just past an unquoted ``url(...)`` starting at ``pos``."""
    start = pos + 4
    probe = start
    while probe < len(text) and text[probe] in " \t\r\n":
        probe += 1
    if probe < len(text) and text[probe] in _QUOTES:
        return start
    end = text.find(")", start)
    return len(text) if end == -1 else end + 1


def _is_url_start(text: str, pos: int) -> bool:
    return text[pos : pos + 4].lower() == "url(" and (pos == 0 or not (text[pos - 1].isalnum() or text[pos - 1] in "-_"))


def split_top_level(text: str, separator: str) -> List[str]:
    """Split on ``separator`` outside strings, comments and parentheses."""
    parts: List[str] = []
    depth = 0
    start = 0
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char in _QUOTES:
            pos = _skip_string(text, pos)
            continue
        if text.startswith("/*", pos):
            pos = _comment_end(text, pos)
            continue
        if _is_url_start(text, pos):
            end = _skip_url(text, pos)
            if end > pos + 4:
                pos = end
                continue
        if char in "([":
            depth += 1
        elif char in ")]" and depth:
            depth -= 1
        elif char == separator and depth == 0:
            parts.append(text[start:pos])
            start = pos + 1
        pos += 1
    parts.append(text[start:])
    return parts


def _ident_char(char: str) -> bool:
    return char.isalnum() or char in "-_" or ord(char) > 127


def _drop_comment(out: List[str], text: str, end: int) -> None:
    """Remove a comment, keeping two tokens apart when it was their only separator."""
    left = out[-1][-1] if out and out[-1] else ""
    right = text[end] if end < len(text) else ""
    if not left or not right:
        return
    if (_ident_char(left) and _ident_char(right)) or (left.isdigit() and right in ".%"):
        out.append(" ")


def _read_until(cursor: _Cursor, stops: str) -> str:
    """Consume text up to (not including) a stop character at depth zero.

    Comments are dropped, with ``/*!`` comments remembered on the cursor.
    """
    text = cursor.text
    out: List[str] = []
    depth = 0
    while cursor.pos < len(text):
        char = text[cursor.pos]
        if char in _QUOTES:
            end = _skip_string(text, cursor.pos)
            out.append(text[cursor.pos : end])
            cursor.pos = end
            continue
        if text.startswith("/*", cursor.pos):
            end = _comment_end(text, cursor.pos)
            _drop_comment(out, text, end)
            cursor.pos = end
            continue
        if _is_url_start(text, cursor.pos):
            end = _skip_url(text, cursor.pos)
            if end > cursor.pos + 4:
                out.append(text[cursor.pos : end])
                cursor.pos = end
                continue
        if char in "([":
            depth += 1
        elif char in ")]" and depth:
            depth -= 1
        elif depth == 0 and char in stops:
            break
        out.append(char)
        cursor.pos += 1
    return "".join(out)


def _read_block(cursor: _Cursor) -> str:
    """Consume a declaration block body up to its matching ``}``."""
    text = cursor.text
    out: List[str] = []
    depth = 0
    while cursor.pos < len(text):
        char = text[cursor.pos]
        if char in _QUOTES:
            end = _skip_string(text, cursor.pos)
            out.append(text[cursor.pos : end])
            cursor.pos = end
            continue
        if text.startswith("/*", cursor.pos):
            cursor.pos = _comment_end(text, cursor.pos)
            _drop_comment(out, text, cursor.pos)
            continue
        if _is_url_start(text, cursor.pos):
            end = _skip_url(text, cursor.pos)
            if end > cursor.pos + 4:
                out.append(text[cursor.pos : end])
                cursor.pos = end
                continue
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                cursor.pos += 1
                break
            depth -= 1
        out.append(char)
        cursor.pos += 1
    return "".join(out)


def _skip_space(cursor: _Cursor, rules: List[Rule]) -> None:
    text = cursor.text
    while cursor.pos < len(text):
        if text[cursor.pos].isspace():
            cursor.pos += 1
        elif text.startswith("/*", cursor.pos):
            end = _comment_end(text, cursor.pos)
            body = text[cursor.pos : end]
            if body.startswith("/*!"):
                rules.append(Rule(prelude=body, comment=True))
            cursor.pos = end
        else:
            break


def _is_nested(prelude: str) -> bool:
    head = prelude.strip().split(None, 1)[0].lower() if prelude.strip() else ""
    return head.split("(", 1)[0] in NESTED_AT_RULES


def parse_declarations(body: str) -> List[Declaration]:
    declarations: List[Declaration] = []
    for piece in split_top_level(body, ";"):
        if not piece.strip():
            continue
        if ":" not in piece:
            declarations.append(Declaration(name=piece.strip(), value="", has_colon=False))
            continue
        name, value = piece.split(":", 1)
        declarations.append(Declaration(name=name.strip(), value=value.strip()))
    return declarations


def _parse_rules(cursor: _Cursor, nested: bool) -> List[Rule]:
    rules: List[Rule] = []
    while True:
        _skip_space(cursor, rules)
        if cursor.at_end():
            break
        if cursor.peek() == "}":
            cursor.pos += 1
            if nested:
                break
            continue
        prelude = _read_until(cursor, "{;}")
        stop = cursor.peek()
        if stop == ";":
            cursor.pos += 1
            rules.append(Rule(prelude=prelude.strip(), statement=True))
        elif stop == "{":
            cursor.pos += 1
            if _is_nested(prelude):
                children = _parse_rules(cursor, nested=True)
                rules.append(Rule(prelude=prelude.strip(), children=children))
            else:
                body = _read_block(cursor)
                if "{" in body:
                    rules.append(Rule(prelude=prelude.strip(), raw_body=body))
                else:
                    rules.append(
                        Rule(prelude=prelude.strip(), declarations=parse_declarations(body))
                    )
        elif prelude.strip():
            rules.append(Rule(prelude=prelude.strip(), statement=True))
    return rules


def parse_stylesheet(text: str) -> List[Rule]:
    """Parse stylesheet text into a rule tree."""
    return _parse_rules(_Cursor(text), nested=False)


def iter_rules(rules: List[Rule]) -> Iterator[Rule]:
    """Yield every rule set with declarations, descending into at-rule blocks."""
    for rule in rules:
        if rule.children is not None:
            yield from iter_rules(rule.children)
        elif rule.declarations is not None:
            yield rule


def find_rules(text: str, selector: str) -> List[Rule]:
    """Rule sets whose selector list contains ``selector`` exactly."""
    wanted = _minify_selector(selector)
    return [
        rule
        for rule in iter_rules(parse_stylesheet(text))
        if wanted in {_minify_selector(part) for part in rule.selectors}
    ]


def custom_properties(text: str) -> Dict[str, str]:
    """Map custom property names (without ``--``) to values from ``:root`` blocks."""
    variables: Dict[str, str] = {}
    for rule in parse_stylesheet(text):
        if rule.declarations is None or ":root" not in rule.selectors:
            continue
        for decl in rule.declarations:
            if decl.name.startswith("--"):
                variables[decl.name[2:]] = decl.value
    return variables


def count_delimiters(text: str) -> Tuple[int, int, int, int]:
    """Return counts of ``{``, ``}``, ``(`` and ``)`` in the raw text."""
    return text.count("{"), text.count("}"), text.count("("), text.count(")")


def is_balanced(text: str) -> bool:
    opens, closes, open_parens, close_parens = count_delimiters(text)
    return opens == closes and open_parens == close_parens


def _protected_segments(text: str) -> Iterator[Tuple[bool, str]]:
    """Split text into (protected, chunk) pairs; strings and url() are protected."""
    pos = 0
    start = 0
    while pos < len(text):
        char = text[pos]
        if char in _QUOTES:
            end = _skip_string(text, pos)
        elif _is_url_start(text, pos):
            end = _skip_url(text, pos)
            if end <= pos + 4:
                pos += 1
                continue
        else:
            pos += 1
            continue
        if start < pos:
            yield False, text[start:pos]
        yield True, text[pos:end]
        pos = start = end
    if start < len(text):
        yield False, text[start:]


def _collapse_space(text: str) -> str:
    return "".join(
        chunk if protected else _WS.sub(" ", chunk) for protected, chunk in _protected_segments(text)
    ).strip()


def _squeeze(text: str, around: str, after: str = "(", before: str = ")") -> str:
    pieces: List[str] = []
    for protected, chunk in _protected_segments(text):
        if protected:
            pieces.append(chunk)
            continue
        chunk = _WS.sub(" ", chunk)
        for char in around:
            chunk = chunk.replace(f" {char}", char).replace(f"{char} ", char)
        for char in after:
            chunk = chunk.replace(f"{char} ", char)
        for char in before:
            chunk = chunk.replace(f" {char}", char)
        pieces.append(chunk)
    return "".join(pieces).strip()


def _minify_selector(selector: str) -> str:
    return _squeeze(selector, around=",>+~", after="([", before=")]")


def _minify_prelude(prelude: str) -> str:
    squeezed = _squeeze(prelude, around=",")
    pieces: List[str] = []
    for protected, chunk in _protected_segments(squeezed):
        pieces.append(chunk if protected else chunk.replace(": ", ":"))
    return "".join(pieces)


def _minify_value(value: str) -> str:
    squeezed = _squeeze(value, around=",")
    pieces: List[str] = []
    for protected, chunk in _protected_segments(squeezed):
        if not protected:
            chunk = re.sub(r"\s*!\s*important", "!important", chunk, flags=re.IGNORECASE)
        pieces.append(chunk)
    return "".join(pieces)


def _minify_declarations(declarations: List[Declaration]) -> List[str]:
    output: List[str] = []
    for decl in declarations:
        if not decl.has_colon:
            output.append(_WS.sub(" ", decl.name))
        elif decl.name.startswith("--"):
            output.append(f"{decl.name}:{decl.value.strip() or ' '}")
        else:
            output.append(f"{decl.name}:{_minify_value(decl.value)}")
    return output


def _merge_adjacent(rules: List[Rule]) -> List[Rule]:
    merged: List[Rule] = []
    for rule in rules:
        previous = merged[-1] if merged else None
        if (
            previous is not None
            and rule.declarations is not None
            and previous.declarations is not None
            and _minify_selector(previous.prelude) == _minify_selector(rule.prelude)
        ):
            merged[-1] = Rule(
                prelude=previous.prelude,
                declarations=previous.declarations + rule.declarations,
            )
            continue
        merged.append(rule)
    return merged


def _serialize(rules: List[Rule]) -> str:
    output: List[str] = []
    for rule in _merge_adjacent(rules):
        if rule.comment:
            output.append(rule.prelude)
        elif rule.statement:
            output.append(_minify_prelude(rule.prelude) + ";")
        elif rule.children is not None:
            inner = _serialize(rule.children)
            if inner:
                output.append(_minify_prelude(rule.prelude) + "{" + inner + "}")
        elif rule.raw_body is not None:
            output.append(_minify_selector(rule.prelude) + "{" + _collapse_space(rule.raw_body) + "}")
        elif rule.declarations:
            body = ";".join(_minify_declarations(rule.declarations))
            output.append(_minify_selector(rule.prelude) + "{" + body + "}")
    return "".join(output)


def minify(text: str) -> str:
    """Return a minified copy of a stylesheet with identical semantics."""
    return _serialize(parse_stylesheet(text))


def semantic_rules(text: str) -> List[Tuple[Tuple[str, ...], str, Tuple[Tuple[str, str], ...]]]:
    """Flatten a stylesheet into comparable (context, selector, declarations) rows.

    Two stylesheets with equal rows apply the same declarations to the same
    selectors in the same order.
    """
    rows: List[Tuple[Tuple[str, ...], str, Tuple[Tuple[str, str], ...]]] = []

    def walk(rules: List[Rule], context: Tuple[str, ...]) -> None:
        for rule in _merge_adjacent(rules):
            if rule.comment:
                continue
            if rule.statement:
                rows.append((context, _minify_prelude(rule.prelude), ()))
            elif rule.children is not None:
                walk(rule.children, context + (_minify_prelude(rule.prelude),))
            elif rule.declarations:
                decls = tuple(
                    tuple(item.split(":", 1)) if ":" in item else (item, "")
                    for item in _minify_declarations(rule.declarations)
                )
                rows.append((context, _minify_selector(rule.prelude), decls))

    walk(parse_stylesheet(text), ())
    return rows
