import re
from typing import TYPE_CHECKING, List
from varlink.core.errors import FeatureExprError

if TYPE_CHECKING:
    from varlink.fexpr.fexpr import FeatureExpr, FeatureExprFactory

_TOKEN_RE = re.compile(r"\s*(?:(&&|\|\||[!()])|([A-Za-z_][A-Za-z0-9_]*)|([01]))")

_CONSTANTS = {"1": True, "0": False, "True": True, "False": False, "true": True, "false": False}

def tokenize(text: str) -> List[str]:
    """Splits a presence condition into tokens."""
    tokens = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m:
            raise FeatureExprError(f"Unexpected character {text[pos:].strip()[:1]!r} at offset {pos} in {text!r}")
        tokens.append(m.group(m.lastindex))
        pos = m.end()
    return tokens

class _Parser:
    def __init__(self, tokens: List[str], factory: "FeatureExprFactory", text: str):
        self.tokens = tokens
        self.pos = 0
        self.factory = factory
        self.text = text

    def peek(self):
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def take(self, expected: str = None) -> str:
        tok = self.peek()
        if tok is None:
            raise FeatureExprError(f"Unexpected end of input in {self.text!r}")
        if expected is not None and tok != expected:
            raise FeatureExprError(f"Expected {expected!r} but found {tok!r} in {self.text!r}")
        self.pos += 1
        return tok

    def parse_or(self) -> "FeatureExpr":
        terms = [self.parse_and()]
        while self.peek() == "||":
            self.take()
            terms.append(self.parse_and())
        return self.factory.create_or(terms)

    def parse_and(self) -> "FeatureExpr":
        terms = [self.parse_unary()]
        while self.peek() == "&&":
            self.take()
            terms.append(self.parse_unary())
        return self.factory.create_and(terms)

    def parse_unary(self) -> "FeatureExpr":
        if self.peek() == "!":
            self.take()
            return self.parse_unary().not_()
        return self.parse_primary()

    def parse_primary(self) -> "FeatureExpr":
        tok = self.take()
        if tok == "(":
            inner = self.parse_or()
            self.take(")")
            return inner
        if tok in _CONSTANTS:
            return self.factory.base if _CONSTANTS[tok] else self.factory.dead
        if tok == "defined":
            # defined(X) or defined X
            if self.peek() == "(":
                self.take()
                name = self._identifier()
                self.take(")")
                return self.factory.feature(name)
            return self.factory.feature(self._identifier())
        if _is_identifier(tok):
            return self.factory.feature(tok)
        raise FeatureExprError(f"Unexpected token {tok!r} in {self.text!r}")

    def _identifier(self) -> str:
        tok = self.take()
        if not _is_identifier(tok) or tok in _CONSTANTS:
            raise FeatureExprError(f"Expected option name but found {tok!r} in {self.text!r}")
        return tok

def _is_identifier(tok: str) -> bool:
    return re.match(r"^[A-Za-z_][A-Za-z0-9_]*$", tok) is not None

def parse_fexpr(text: str, factory: "FeatureExprFactory") -> "FeatureExpr":
    """
    Parses a presence condition as written in #if lines, e.g.
    ``defined(CONFIG_A) && !(B || defined C)``.
    """
    tokens = tokenize(text)
    if not tokens:
        raise FeatureExprError("Empty presence condition")
    parser = _Parser(tokens, factory, text)
    result = parser.parse_or()
    if parser.peek() is not None:
        raise FeatureExprError(f"Unexpected trailing token {parser.peek()!r} in {text!r}")
    return result
