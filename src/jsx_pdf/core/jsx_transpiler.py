"""
JSX to plain JavaScript transpiler.

Rewrites embedded markup into calls to an element factory without
evaluating anything:

    <div className="x">{props.title}</div>
    =>  __jsx("div", {"className": "x"}, props.title)

The scanner walks the host code token by token so that strings, template
literals, comments and regex literals are copied verbatim, and decides from
the previous significant token whether ``<`` opens an element or is a
comparison operator.
"""

import html
import json
import logging
import re
from contextlib import contextmanager
from typing import List, Optional, Set, Tuple

from ..errors import CompilationError

logger = logging.getLogger(__name__)

DEFAULT_FACTORY = "__jsx"
# Deepest element or template literal nesting accepted in source
DEFAULT_MAX_NESTING = 128

# Keywords after which an expression (and therefore JSX or a regex) may follow.
_EXPRESSION_KEYWORDS = {
    "return", "typeof", "instanceof", "in", "of", "new", "delete", "void",
    "throw", "case", "do", "else", "yield", "await",
}
_DECLARATION_KEYWORDS = {"function", "class", "const", "let", "var"}
_DECLARED_NAME = re.compile(r"\s*\*?\s*([A-Za-z_$][\w$]*)")
_COMMENTS = re.compile(r"/\*.*?\*/|//[^\n]*", re.DOTALL)
_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def _is_ident_start(char: str) -> bool:
    return bool(char) and (char.isalpha() or char in "_$")


def _is_ident_part(char: str) -> bool:
    return bool(char) and (char.isalnum() or char in "_$")


def _close_line_comment(code: str) -> str:
    """Terminate a trailing ``//`` comment so it cannot swallow what follows."""
    return code + "\n" if "//" in code else code


def clean_jsx_text(raw: str) -> str:
    """
    Collapse JSX text the way JSX compilers do.

    Lines are stripped of leading (all but first) and trailing (all but last)
    spaces, whitespace-only lines are dropped and the remaining lines are
    joined with a single space. HTML entities are decoded.
    """
    lines = _LINE_BREAK.split(raw)
    last_non_empty = -1
    for index, line in enumerate(lines):
        if re.search(r"[^ \t]", line):
            last_non_empty = index

    text = ""
    for index, line in enumerate(lines):
        trimmed = line.replace("\t", " ")
        if index != 0:
            trimmed = trimmed.lstrip(" ")
        if index != len(lines) - 1:
            trimmed = trimmed.rstrip(" ")
        if trimmed:
            if index != last_non_empty:
                trimmed += " "
            text += trimmed
    return html.unescape(text)


class JSXTranspiler:
    """
    Single-use transpiler for one source string.

    After ``transpile()`` the instance also exposes what the scanner saw:

    - ``template_declarations``: offsets of top-level declarations of
      ``Template`` (function, class, const/let/var)
    - ``free_identifiers``: identifiers used outside strings and comments,
      excluding property names after ``.``
    """

    def __init__(self, source: str, factory: str = DEFAULT_FACTORY, max_nesting: int = DEFAULT_MAX_NESTING):
        self.source = source
        self.factory = factory
        self.max_nesting = max_nesting
        self._nesting = 0
        self.pos = 0
        self.length = len(source)
        self.template_declarations: List[int] = []
        self.free_identifiers: Set[str] = set()

    # -- diagnostics -----------------------------------------------------

    def _location(self, pos: int) -> Tuple[int, int]:
        line = self.source.count("\n", 0, pos) + 1
        column = pos - (self.source.rfind("\n", 0, pos) + 1) + 1
        return line, column

    def _error(self, message: str, pos: Optional[int] = None) -> CompilationError:
        pos = self.pos if pos is None else pos
        line, column = self._location(pos)
        return CompilationError(
            "Template syntax error",
            f"{message} ({line}:{column})",
            line=line,
            column=column,
        )

    @contextmanager
    def _nested(self, pos: int):
        if self._nesting >= self.max_nesting:
            raise self._error(f"JSX nesting exceeds {self.max_nesting} levels", pos)
        self._nesting += 1
        try:
            yield
        finally:
            self._nesting -= 1

    # -- low level helpers ----------------------------------------------

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.source[index] if index < self.length else ""

    def _startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def _expect(self, text: str) -> None:
        if not self._startswith(text):
            found = self._peek() or "end of input"
            raise self._error(f"Expected '{text}' but found '{found}'")
        self.pos += len(text)

    def _skip_whitespace(self, comments: bool = True) -> None:
        while self.pos < self.length:
            if self._peek().isspace():
                self.pos += 1
            elif comments and self._startswith("//"):
                self._read_line_comment()
            elif comments and self._startswith("/*"):
                self._read_block_comment()
            else:
                break

    def _read_line_comment(self) -> str:
        end = self.source.find("\n", self.pos)
        end = self.length if end == -1 else end
        text = self.source[self.pos:end]
        self.pos = end
        return text

    def _read_block_comment(self) -> str:
        start = self.pos
        end = self.source.find("*/", self.pos + 2)
        if end == -1:
            raise self._error("Unterminated comment", start)
        self.pos = end + 2
        return self.source[start:self.pos]

    def _read_string(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        while self.pos < self.length:
            char = self.source[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            if char == quote:
                self.pos += 1
                return self.source[start:self.pos]
            if char == "\n":
                break
            self.pos += 1
        raise self._error("Unterminated string constant", start)

    def _read_template_literal(self) -> str:
        start = self.pos
        parts = ["`"]
        self.pos += 1
        while self.pos < self.length:
            char = self.source[self.pos]
            if char == "\\":
                parts.append(self.source[self.pos:self.pos + 2])
                self.pos += 2
            elif char == "`":
                self.pos += 1
                parts.append("`")
                return "".join(parts)
            elif self._startswith("${"):
                with self._nested(self.pos):
                    self.pos += 2
                    parts.append("${")
                    parts.append(self._parse_code(terminator="}"))
                self._expect("}")
                parts.append("}")
            else:
                parts.append(char)
                self.pos += 1
        raise self._error("Unterminated template literal", start)

    def _read_regex(self) -> str:
        start = self.pos
        self.pos += 1
        in_class = False
        while self.pos < self.length:
            char = self.source[self.pos]
            if char == "\\":
                self.pos += 2
                continue
            if char == "\n":
                break
            if char == "[":
                in_class = True
            elif char == "]":
                in_class = False
            elif char == "/" and not in_class:
                self.pos += 1
                while self.pos < self.length and _is_ident_part(self.source[self.pos]):
                    self.pos += 1
                return self.source[start:self.pos]
            self.pos += 1
        raise self._error("Unterminated regular expression", start)

    def _read_identifier(self) -> str:
        start = self.pos
        while self.pos < self.length and _is_ident_part(self.source[self.pos]):
            self.pos += 1
        return self.source[start:self.pos]

    def _read_number(self) -> str:
        start = self.pos
        while self.pos < self.length:
            char = self.source[self.pos]
            if _is_ident_part(char) or char == ".":
                self.pos += 1
            elif char in "+-" and self.source[self.pos - 1] in "eE" and not self.source[start:self.pos].startswith(("0x", "0X")):
                self.pos += 1
            else:
                break
        return self.source[start:self.pos]

    @staticmethod
    def _expression_expected(last: Optional[Tuple[str, str]]) -> bool:
        if last is None:
            return True
        kind, text = last
        if kind == "value":
            return False
        if kind == "ident":
            return text in _EXPRESSION_KEYWORDS
        return text not in ")]}"

    def _jsx_starts_here(self) -> bool:
        following = self._peek(1)
        return following == ">" or _is_ident_start(following)

    # -- host code -------------------------------------------------------

    def _parse_code(self, terminator: Optional[str] = None, top_level: bool = False) -> str:
        """
        Copy host code, rewriting JSX, until end of input or an unbalanced
        ``terminator`` brace (left unconsumed).
        """
        out: List[str] = []
        last: Optional[Tuple[str, str]] = None
        depth = 0
        start = self.pos

        while self.pos < self.length:
            char = self.source[self.pos]

            if char.isspace():
                out.append(char)
                self.pos += 1
            elif self._startswith("//"):
                out.append(self._read_line_comment())
            elif self._startswith("/*"):
                out.append(self._read_block_comment())
            elif char in "\"'":
                out.append(self._read_string(char))
                last = ("value", char)
            elif char == "`":
                out.append(self._read_template_literal())
                last = ("value", char)
            elif char == "/" and self._expression_expected(last):
                out.append(self._read_regex())
                last = ("value", char)
            elif char == "<" and self._expression_expected(last) and self._jsx_starts_here():
                out.append(self._parse_element())
                last = ("value", "jsx")
            elif char == "{":
                depth += 1
                out.append(char)
                self.pos += 1
                last = ("punct", char)
            elif char == "}":
                if depth == 0 and terminator == "}":
                    return "".join(out)
                if depth == 0:
                    raise self._error("Unexpected '}'")
                depth -= 1
                out.append(char)
                self.pos += 1
                last = ("punct", char)
            elif _is_ident_start(char):
                word_pos = self.pos
                word = self._read_identifier()
                if top_level and depth == 0 and word == "export":
                    # Module syntax is meaningless inside the sandbox unit.
                    self._skip_whitespace(comments=False)
                    if self._startswith("default") and not _is_ident_part(self._peek(7)):
                        self.pos += len("default")
                    continue
                if last != ("punct", ".") or self.source[max(0, word_pos - 16):word_pos].rstrip().endswith("..."):
                    self.free_identifiers.add(word)
                if top_level and depth == 0 and word in _DECLARATION_KEYWORDS:
                    match = _DECLARED_NAME.match(self.source, self.pos)
                    if match and match.group(1) == "Template":
                        self.template_declarations.append(word_pos)
                out.append(word)
                last = ("ident", word)
            elif char.isdigit():
                out.append(self._read_number())
                last = ("value", "number")
            else:
                out.append(char)
                self.pos += 1
                last = ("punct", char)

        if terminator is not None:
            raise self._error(f"Expected '{terminator}' to close expression", start)
        if depth:
            raise self._error("Unexpected end of input: unbalanced '{'")
        return "".join(out)

    def _parse_expression_container(self) -> str:
        """Parse ``{ ... }`` starting at the opening brace; returns the inner code."""
        self._expect("{")
        code = self._parse_code(terminator="}")
        self._expect("}")
        return code

    # -- JSX -------------------------------------------------------------

    def _read_jsx_name(self) -> str:
        start = self.pos
        if not _is_ident_start(self._peek()):
            raise self._error("Expected a JSX tag name")
        while self.pos < self.length and (_is_ident_part(self._peek()) or self._peek() in "-:."):
            self.pos += 1
        return self.source[start:self.pos]

    def _tag_expression(self, name: str) -> str:
        if "-" in name or ":" in name or ("." not in name and name[0].islower()):
            return json.dumps(name)
        return name

    def _parse_attribute_value(self) -> str:
        char = self._peek()
        if char in "\"'":
            start = self.pos
            end = self.source.find(char, self.pos + 1)
            if end == -1:
                raise self._error("Unterminated JSX attribute string", start)
            raw = self.source[self.pos + 1:end]
            self.pos = end + 1
            return json.dumps(html.unescape(raw))
        if char == "{":
            start = self.pos
            code = self._parse_expression_container()
            if not _COMMENTS.sub("", code).strip():
                raise self._error("JSX attributes must only be assigned a non-empty expression", start)
            return f"({_close_line_comment(code)})"
        if char == "<":
            return self._parse_element()
        raise self._error("JSX value should be either an expression or a quoted JSX text")

    def _parse_attributes(self) -> Tuple[str, bool]:
        """Parse attributes up to ``>`` or ``/>``; returns (props code, self_closing)."""
        parts: List[str] = []
        while True:
            self._skip_whitespace()
            if self.pos >= self.length:
                raise self._error("Unterminated JSX tag")
            if self._startswith("/>"):
                self.pos += 2
                self_closing = True
                break
            if self._peek() == ">":
                self.pos += 1
                self_closing = False
                break
            if self._peek() == "{":
                self.pos += 1
                self._skip_whitespace()
                self._expect("...")
                code = self._parse_code(terminator="}")
                self._expect("}")
                parts.append(f"...({_close_line_comment(code)})")
                continue
            if not _is_ident_start(self._peek()):
                raise self._error(f"Unexpected character '{self._peek()}' in JSX tag")

            start = self.pos
            while self.pos < self.length and (_is_ident_part(self._peek()) or self._peek() in "-:"):
                self.pos += 1
            name = self.source[start:self.pos]
            self._skip_whitespace()
            if self._peek() == "=":
                self.pos += 1
                self._skip_whitespace()
                value = self._parse_attribute_value()
            else:
                value = "true"
            parts.append(f"{json.dumps(name)}: {value}")

        props = "{" + ", ".join(parts) + "}" if parts else "null"
        return props, self_closing

    def _parse_children(self, name: str, open_pos: int) -> List[str]:
        children: List[str] = []
        label = f"<{name}>" if name else "<>"
        while True:
            if self.pos >= self.length:
                raise self._error(f"Expected corresponding JSX closing tag for {label}", open_pos)
            char = self._peek()

            if char == "<":
                lookahead = self.pos + 1
                while lookahead < self.length and self.source[lookahead].isspace():
                    lookahead += 1
                if lookahead < self.length and self.source[lookahead] == "/":
                    close_pos = self.pos
                    self.pos = lookahead + 1
                    self._skip_whitespace()
                    closing = self._read_jsx_name() if self._peek() != ">" else ""
                    self._skip_whitespace()
                    self._expect(">")
                    if closing != name:
                        raise self._error(
                            f"Expected corresponding JSX closing tag for {label}, found </{closing}>",
                            close_pos,
                        )
                    return children
                children.append(self._parse_element())
            elif char == "{":
                code = self._parse_expression_container()
                if _COMMENTS.sub("", code).strip():
                    children.append(_close_line_comment(code.strip()))
            elif char in "}>":
                raise self._error(f"Unexpected token '{char}' in JSX text")
            else:
                start = self.pos
                while self.pos < self.length and self.source[self.pos] not in "<{}>":
                    self.pos += 1
                text = clean_jsx_text(self.source[start:self.pos])
                if text:
                    children.append(json.dumps(text))

    def _parse_element(self) -> str:
        """Parse one element starting at ``<`` and return the factory call."""
        open_pos = self.pos
        with self._nested(open_pos):
            self._expect("<")
            self._skip_whitespace()

            if self._peek() == ">":
                self.pos += 1
                tag, props = "null", "null"
                children = self._parse_children("", open_pos)
            else:
                name = self._read_jsx_name()
                tag = self._tag_expression(name)
                props, self_closing = self._parse_attributes()
                children = [] if self_closing else self._parse_children(name, open_pos)

        args = [tag, props] + children
        call = f"{self.factory}({', '.join(args)})"

        # Keep line numbers of the following code aligned with the source.
        missing_lines = self.source.count("\n", open_pos, self.pos) - call.count("\n")
        return call + "\n" * max(missing_lines, 0)

    # -- entry point -----------------------------------------------------

    def transpile(self) -> str:
        """
        Transpile the whole source.

        Returns:
            Plain JavaScript with every element replaced by a factory call

        Raises:
            CompilationError: On malformed markup or unterminated literals
        """
        self.pos = 0
        self._nesting = 0
        self.template_declarations = []
        self.free_identifiers = set()
        code = self._parse_code(top_level=True)
        logger.debug(f"Transpiled {self.length} chars of JSX into {len(code)} chars of JavaScript")
        return code


def transpile(source: str, factory: str = DEFAULT_FACTORY, max_nesting: int = DEFAULT_MAX_NESTING) -> str:
    """Transpile JSX source into plain JavaScript factory calls."""
    return JSXTranspiler(source, factory, max_nesting).transpile()
