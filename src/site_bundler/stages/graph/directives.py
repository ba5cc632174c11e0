"""
Scanner for the module directives the bundler understands.

This is not a JavaScript parser. Directives are only recognised when the
`import`/`export` keyword starts a line (indentation allowed) outside a block
comment or template literal, and only these forms are accepted:

    import X from 'p'
    import { a, b as c } from 'p'          (list may span lines)
    import X, { a } from 'p'
    import * as ns from 'p'
    import X, * as ns from 'p'
    import 'p'
    export default <expression>
    export default function|class|async function Name ...
    export { a, b as c }
    export { a, b as c } from 'p'
    export * from 'p'
    export * as ns from 'p'
    export const|let|var name [= init] [, name [= init]]...
    export function|function*|async function|class name ...

Anything else that starts with `import`/`export` and is followed by whitespace,
`{`, `*` or a quote (destructuring exports, anonymous declaration exports,
statements split before the keyword's first token) is reported as an
UNSUPPORTED directive so callers can warn about it instead of rewriting it
wrongly. `import.meta` and dynamic `import()` are expressions, not directives,
and are ignored.
"""

from __future__ import annotations

import re

from .models import Binding, Directive, DirectiveKind

_DIRECTIVE_START = re.compile(r"^[ \t]*(import|export)(?=[\s{*'\"])", re.MULTILINE)
_IDENT = re.compile(r"[A-Za-z_$][\w$]*")

_DECLARATION_WORDS = ("const", "let", "var", "function", "class", "async")

# A line break at depth 0 inside an initializer does not end the statement
# when the last character before it, or the first one after it, is one of these.
_CONTINUES_AFTER = frozenset(",=([{+-*/%&|^?:<>!~")
_CONTINUES_BEFORE = frozenset(",.?:+-*/%&|^=<>")


class DirectiveSyntaxError(ValueError):
    def __init__(self, message: str, pos: int) -> None:
        super().__init__(f"{message} at offset {pos}")
        self.pos = pos


def _literal_end(text: str, pos: int) -> int:
    """
    Offset just past the string or template literal opening at `pos`.
    Quoted strings stop at a line break, templates run until the closing
    backtick or the end of the text.
    """
    quote = text[pos]
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i + 1
        if ch == "\n" and quote != "`":
            return i
        i += 1
    return len(text)


class _Cursor:
    def __init__(self, text: str, pos: int) -> None:
        self.text = text
        self.pos = pos

    def skip_ws(self) -> None:
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            if ch.isspace():
                self.pos += 1
            elif text.startswith("//", self.pos):
                nl = text.find("\n", self.pos)
                self.pos = len(text) if nl < 0 else nl + 1
            elif text.startswith("/*", self.pos):
                close = text.find("*/", self.pos + 2)
                if close < 0:
                    raise DirectiveSyntaxError("unterminated comment", self.pos)
                self.pos = close + 2
            else:
                return

    def at(self, ch: str) -> bool:
        self.skip_ws()
        return self.text.startswith(ch, self.pos)

    def accept(self, ch: str) -> bool:
        if self.at(ch):
            self.pos += len(ch)
            return True
        return False

    def expect(self, ch: str) -> None:
        if not self.accept(ch):
            raise DirectiveSyntaxError(f"expected {ch!r}", self.pos)

    def peek_word(self) -> str | None:
        self.skip_ws()
        m = _IDENT.match(self.text, self.pos)
        return m.group(0) if m else None

    def ident(self) -> str:
        self.skip_ws()
        m = _IDENT.match(self.text, self.pos)
        if m is None:
            raise DirectiveSyntaxError("expected identifier", self.pos)
        self.pos = m.end()
        return m.group(0)

    def expect_word(self, word: str) -> None:
        if self.ident() != word:
            raise DirectiveSyntaxError(f"expected {word!r}", self.pos)

    def at_string(self) -> bool:
        return self.at("'") or self.at('"')

    def string(self) -> str:
        self.skip_ws()
        quote = self.text[self.pos : self.pos + 1]
        if quote not in ("'", '"'):
            raise DirectiveSyntaxError("expected string literal", self.pos)
        i = self.pos + 1
        out: list[str] = []
        while i < len(self.text):
            ch = self.text[i]
            if ch == "\\" and i + 1 < len(self.text):
                out.append(self.text[i + 1])
                i += 2
                continue
            if ch == quote:
                self.pos = i + 1
                return "".join(out)
            if ch == "\n":
                break
            out.append(ch)
            i += 1
        raise DirectiveSyntaxError("unterminated string literal", self.pos)

    def statement_end(self) -> int:
        """Consume an optional `;` on the same line and return the end offset."""
        i = self.pos
        while i < len(self.text) and self.text[i] in " \t":
            i += 1
        if self.text.startswith(";", i):
            self.pos = i + 1
        return self.pos


def _bindings(cur: _Cursor) -> tuple[Binding, ...]:
    cur.expect("{")
    out: list[Binding] = []
    while not cur.accept("}"):
        name = cur.ident()
        alias = None
        if cur.peek_word() == "as":
            cur.expect_word("as")
            alias = cur.ident()
        out.append(Binding(name=name, alias=alias))
        if not cur.accept(","):
            cur.expect("}")
            break
    return tuple(out)


def _parse_import(cur: _Cursor, start: int) -> Directive:
    cur.expect_word("import")

    if cur.at_string():
        spec = cur.string()
        end = cur.statement_end()
        return Directive(
            kind=DirectiveKind.IMPORT,
            start=start,
            end=end,
            text=cur.text[start:end],
            specifier=spec,
        )

    bindings: list[Binding] = []
    namespace: str | None = None

    def _namespace_or_list() -> None:
        nonlocal namespace
        if cur.accept("*"):
            cur.expect_word("as")
            namespace = cur.ident()
        else:
            bindings.extend(_bindings(cur))

    if cur.at("*") or cur.at("{"):
        _namespace_or_list()
    else:
        default_local = cur.ident()
        if default_local in ("from", "as"):
            raise DirectiveSyntaxError("expected import clause", cur.pos)
        bindings.append(Binding(name="default", alias=default_local))
        if cur.accept(","):
            _namespace_or_list()

    cur.expect_word("from")
    spec = cur.string()
    end = cur.statement_end()
    return Directive(
        kind=DirectiveKind.IMPORT,
        start=start,
        end=end,
        text=cur.text[start:end],
        specifier=spec,
        bindings=tuple(bindings),
        namespace=namespace,
    )


def _declared_name(cur: _Cursor) -> str | None:
    """
    Consume `function [*] Name` / `class Name` / `async function Name` and
    return Name, or None for anonymous forms.
    """
    word = cur.ident()
    if word == "async":
        cur.expect_word("function")
        word = "function"
    if word == "function":
        cur.accept("*")
    if cur.at("(") or cur.at("{"):
        return None
    name = cur.peek_word()
    if name is None or (word == "class" and name == "extends"):
        return None
    return cur.ident()


def _skip_initializer(cur: _Cursor) -> bool:
    """
    Advance past the rest of one declarator. Returns True when a top-level
    `,` introduces another declarator, False at the end of the statement.
    """
    text = cur.text
    i = cur.pos
    depth = 0
    last = ""
    while i < len(text):
        ch = text[i]
        if ch in ("'", '"', "`"):
            i = _literal_end(text, i)
            last = ch
            continue
        if text.startswith("//", i):
            nl = text.find("\n", i)
            i = len(text) if nl < 0 else nl
            continue
        if text.startswith("/*", i):
            close = text.find("*/", i + 2)
            if close < 0:
                raise DirectiveSyntaxError("unterminated comment", i)
            i = close + 2
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth -= 1
            if depth < 0:
                break
        elif depth == 0 and ch in ",;":
            cur.pos = i + 1
            return ch == ","
        elif depth == 0 and ch == "\n":
            after = _Cursor(text, i)
            after.skip_ws()
            nxt = text[after.pos : after.pos + 1]
            if last not in _CONTINUES_AFTER and nxt not in _CONTINUES_BEFORE:
                break
        if not ch.isspace():
            last = ch
        i += 1
    cur.pos = i
    return False


def _declarators(cur: _Cursor) -> tuple[str, ...]:
    names: list[str] = []
    while True:
        if cur.at("{") or cur.at("["):
            raise DirectiveSyntaxError("destructuring export", cur.pos)
        names.append(cur.ident())
        if not _skip_initializer(cur):
            return tuple(names)


def _parse_export(cur: _Cursor, start: int) -> Directive:
    cur.expect_word("export")
    word = cur.peek_word()

    if word == "default":
        cur.expect_word("default")
        cur.skip_ws()
        expr_start = cur.pos
        name = None
        lead = cur.peek_word()
        if lead in ("function", "class", "async"):
            probe = _Cursor(cur.text, cur.pos)
            try:
                name = _declared_name(probe)
            except DirectiveSyntaxError:
                name = None
        return Directive(
            kind=DirectiveKind.EXPORT_DEFAULT,
            start=start,
            end=expr_start,
            text=cur.text[start:expr_start],
            name=name,
        )

    if cur.accept("*"):
        namespace = None
        if cur.peek_word() == "as":
            cur.expect_word("as")
            namespace = cur.ident()
        cur.expect_word("from")
        spec = cur.string()
        end = cur.statement_end()
        return Directive(
            kind=DirectiveKind.EXPORT_ALL,
            start=start,
            end=end,
            text=cur.text[start:end],
            specifier=spec,
            namespace=namespace,
        )

    if cur.at("{"):
        bindings = _bindings(cur)
        if cur.peek_word() == "from":
            cur.expect_word("from")
            spec = cur.string()
            end = cur.statement_end()
            return Directive(
                kind=DirectiveKind.EXPORT_FROM,
                start=start,
                end=end,
                text=cur.text[start:end],
                specifier=spec,
                bindings=bindings,
            )
        end = cur.statement_end()
        return Directive(
            kind=DirectiveKind.EXPORT_LIST,
            start=start,
            end=end,
            text=cur.text[start:end],
            bindings=bindings,
        )

    if word in _DECLARATION_WORDS:
        cur.skip_ws()
        decl_start = cur.pos
        if word in ("const", "let", "var"):
            cur.ident()
            names = _declarators(cur)
        else:
            name = _declared_name(cur)
            if name is None:
                raise DirectiveSyntaxError("anonymous declaration export", cur.pos)
            names = (name,)
        return Directive(
            kind=DirectiveKind.EXPORT_DECLARATION,
            start=start,
            end=decl_start,
            text=cur.text[start:decl_start],
            bindings=tuple(Binding(name=n) for n in names),
            name=names[0],
        )

    raise DirectiveSyntaxError("unrecognised export form", cur.pos)


def _inert_spans(source: str) -> list[tuple[int, int]]:
    """
    Offsets of block comments and template literals, where a line that
    starts with `import`/`export` is not a directive. Quoted strings and line
    comments are stepped over so a `/*` or backtick inside them opens nothing.
    """
    spans: list[tuple[int, int]] = []
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if ch in ("'", '"'):
            i = _literal_end(source, i)
        elif ch == "`":
            end = _literal_end(source, i)
            spans.append((i, end))
            i = end
        elif source.startswith("//", i):
            nl = source.find("\n", i)
            i = n if nl < 0 else nl
        elif source.startswith("/*", i):
            close = source.find("*/", i + 2)
            end = n if close < 0 else close + 2
            spans.append((i, end))
            i = end
        else:
            i += 1
    return spans


def _inside(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(a <= pos < b for a, b in spans)


def _line_end(source: str, pos: int) -> int:
    nl = source.find("\n", pos)
    return len(source) if nl < 0 else nl


def scan_directives(source: str) -> list[Directive]:
    """
    Return directives in source order. Spans never overlap.
    """
    inert = _inert_spans(source)
    out: list[Directive] = []
    consumed = 0

    for m in _DIRECTIVE_START.finditer(source):
        start = m.start(1)
        if start < consumed or _inside(start, inert):
            continue

        cur = _Cursor(source, start)
        try:
            if m.group(1) == "import":
                d = _parse_import(cur, start)
            else:
                d = _parse_export(cur, start)
        except DirectiveSyntaxError:
            end = _line_end(source, start)
            d = Directive(
                kind=DirectiveKind.UNSUPPORTED,
                start=start,
                end=end,
                text=source[start:end],
            )

        out.append(d)
        consumed = d.end

    return out
