"""
Presence conditions.

A FeatureExpr is an immutable boolean formula over configuration options,
bound to the FeatureExprFactory that created it. The factory owns the SAT
oracle answering satisfiability and tautology queries, so no solver state is
global.

Combining expressions goes through smart constructors that apply
syntactic simplifications (constants, complementary and duplicate terms).
They never change the meaning of a formula, they only keep formulas small
when interfaces are linked over and over.
"""
from typing import FrozenSet, Iterable, Optional, Union
from varlink.core.config import OracleConfig
from varlink.fexpr.feature_model import FeatureModel
from varlink.fexpr.fexpr_normalize import build_stable_key, collect_vars, flatten
from varlink.fexpr.fexpr_types import BoolExpr, Const, Lit, Not, And, Or, VarRef
from varlink.fexpr.fexpr_parser import parse_fexpr
from varlink.fexpr.oracle import SatOracle

class FeatureExpr:
    __slots__ = ("node", "factory", "_key")

    def __init__(self, node: BoolExpr, factory: "FeatureExprFactory"):
        self.node = node
        self.factory = factory
        self._key = build_stable_key(node)

    # --- structure ---

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_base(self) -> bool:
        """Syntactically true. A formula can be a tautology without being base."""
        return isinstance(self.node, Const) and self.node.value

    @property
    def is_dead(self) -> bool:
        """Syntactically false."""
        return isinstance(self.node, Const) and not self.node.value

    def collect_distinct_features(self) -> FrozenSet[str]:
        return frozenset(collect_vars(self.node, set()))

    # --- algebra ---

    def and_(self, other: "FeatureExpr") -> "FeatureExpr":
        return self.factory.create_and([self, other])

    def or_(self, other: "FeatureExpr") -> "FeatureExpr":
        return self.factory.create_or([self, other])

    def not_(self) -> "FeatureExpr":
        return self.factory._wrap(_negate(self.node))

    def and_not(self, other: "FeatureExpr") -> "FeatureExpr":
        return self.and_(other.not_())

    def implies(self, other: "FeatureExpr") -> "FeatureExpr":
        return self.not_().or_(other)

    def mex(self, other: "FeatureExpr") -> "FeatureExpr":
        """Mutual exclusion: true where self and other do not both hold."""
        return self.and_(other).not_()

    def equiv(self, other: "FeatureExpr") -> "FeatureExpr":
        return self.and_(other).or_(self.not_().and_(other.not_()))

    __and__ = and_
    __or__ = or_
    __invert__ = not_

    # --- decisions ---

    def is_satisfiable(self, fm: Optional[FeatureModel] = None) -> bool:
        return self.factory.oracle.is_satisfiable(self.node, fm)

    def is_tautology(self, fm: Optional[FeatureModel] = None) -> bool:
        return self.factory.oracle.is_tautology(self.node, fm)

    def is_contradiction(self, fm: Optional[FeatureModel] = None) -> bool:
        return not self.is_satisfiable(fm)

    def equivalent_to(self, other: "FeatureExpr", fm: Optional[FeatureModel] = None) -> bool:
        return self.equiv(other).is_tautology(fm)

    # --- value semantics ---

    def __eq__(self, other):
        if not isinstance(other, FeatureExpr):
            return NotImplemented
        return self._key == other._key

    def __hash__(self):
        return hash(self._key)

    def __str__(self):
        return _print(self.node, top=True)

    def __repr__(self):
        return f"FeatureExpr({self})"


class FeatureExprFactory:
    """Creates presence conditions sharing one satisfiability oracle."""

    def __init__(self, oracle: Optional[SatOracle] = None):
        self.oracle = oracle if oracle else SatOracle(OracleConfig.from_env_or_file())
        self.base = FeatureExpr(Const(value=True), self)
        self.dead = FeatureExpr(Const(value=False), self)

    def feature(self, name: str) -> FeatureExpr:
        return FeatureExpr(Lit(var=VarRef(name=name)), self)

    def parse(self, text: str) -> FeatureExpr:
        return parse_fexpr(text, self)

    def from_node(self, node: BoolExpr) -> FeatureExpr:
        """Wraps an IR node built elsewhere, simplifying it on the way."""
        if isinstance(node, Not):
            return self.from_node(node.term).not_()
        if isinstance(node, And):
            return self.create_and(self.from_node(t) for t in node.terms)
        if isinstance(node, Or):
            return self.create_or(self.from_node(t) for t in node.terms)
        return FeatureExpr(node, self)

    def create_and(self, exprs: Iterable[FeatureExpr]) -> FeatureExpr:
        return self._combine(And, exprs, unit=True)

    def create_or(self, exprs: Iterable[FeatureExpr]) -> FeatureExpr:
        return self._combine(Or, exprs, unit=False)

    def _wrap(self, node: BoolExpr) -> FeatureExpr:
        return FeatureExpr(node, self)

    def _combine(self, cls, exprs: Iterable[FeatureExpr], unit: bool) -> FeatureExpr:
        # unit: identity element of the connective (True for And, False for Or)
        terms = []
        keys = set()
        for e in exprs:
            node = e.node
            if isinstance(node, Const):
                if node.value == unit:
                    continue
                return self.base if not unit else self.dead
            for t in (node.terms if isinstance(node, cls) else [node]):
                k = build_stable_key(t)
                if k in keys:
                    continue
                if build_stable_key(_negate(t)) in keys:
                    # x and not x / x or not x
                    return self.dead if unit else self.base
                keys.add(k)
                terms.append(t)
        if not terms:
            return self.base if unit else self.dead
        if len(terms) == 1:
            return FeatureExpr(terms[0], self)
        return FeatureExpr(flatten(cls(terms=terms)), self)


def _negate(node: BoolExpr) -> BoolExpr:
    if isinstance(node, Const):
        return Const(value=not node.value)
    if isinstance(node, Lit):
        return Lit(var=node.var, neg=not node.neg)
    if isinstance(node, Not):
        return node.term
    return Not(term=node)

_PRECEDENCE = {"or": 1, "and": 2}

def _print(node: BoolExpr, top: bool = False, parent: Union[str, None] = None) -> str:
    if isinstance(node, Const):
        return "True" if node.value else "False"
    if isinstance(node, Lit):
        text = f"defined({node.var.name})"
        return f"!{text}" if node.neg else text
    if isinstance(node, Not):
        return f"!({_print(node.term)})"
    op = " && " if isinstance(node, And) else " || "
    text = op.join(_print(t, parent=node.kind) for t in node.terms)
    if not top and parent is not None and _PRECEDENCE[parent] >= _PRECEDENCE[node.kind]:
        return f"({text})"
    return text
