from typing import List, Set
from varlink.fexpr.fexpr_types import BoolExpr, Const, Lit, Not, And, Or

def build_stable_key(expr: BoolExpr) -> str:
    """Generates a stable key for structural comparison and sorting."""
    if isinstance(expr, Const):
        return "T" if expr.value else "F"
    elif isinstance(expr, Lit):
        return f"L:{'!' if expr.neg else ''}{expr.var.name}"
    elif isinstance(expr, Not):
        return f"N({build_stable_key(expr.term)})"
    elif isinstance(expr, (And, Or)):
        tag = "A" if isinstance(expr, And) else "O"
        sub_keys = sorted([build_stable_key(t) for t in expr.terms])
        return f"{tag}({','.join(sub_keys)})"
    return "???"

def collect_vars(expr: BoolExpr, into: Set[str]) -> Set[str]:
    """Adds the names of all options mentioned in expr to the given set."""
    if isinstance(expr, Lit):
        into.add(expr.var.name)
    elif isinstance(expr, Not):
        collect_vars(expr.term, into)
    elif isinstance(expr, (And, Or)):
        for t in expr.terms:
            collect_vars(t, into)
    return into

def _dedupe(terms: List[BoolExpr]) -> List[BoolExpr]:
    seen = set()
    result = []
    for t in terms:
        key = build_stable_key(t)
        if key not in seen:
            seen.add(key)
            result.append(t)
    return result

def flatten(expr: BoolExpr) -> BoolExpr:
    """Flattens nested And/Or and drops duplicate terms."""
    if isinstance(expr, (And, Or)):
        cls = type(expr)
        flattened_terms = []
        for t in expr.terms:
            t_flat = flatten(t)
            if isinstance(t_flat, cls):
                flattened_terms.extend(t_flat.terms)
            else:
                flattened_terms.append(t_flat)
        flattened_terms = _dedupe(flattened_terms)
        # Sort for determinism
        flattened_terms.sort(key=build_stable_key)
        if len(flattened_terms) == 1:
            return flattened_terms[0]
        return cls(terms=flattened_terms)

    if isinstance(expr, Not):
        return Not(term=flatten(expr.term))

    return expr

def push_not_inward(expr: BoolExpr) -> BoolExpr:
    """Pushes Not inward using DeMorgan and double negation removal."""
    if not isinstance(expr, Not):
        if isinstance(expr, And):
            return And(terms=[push_not_inward(t) for t in expr.terms])
        if isinstance(expr, Or):
            return Or(terms=[push_not_inward(t) for t in expr.terms])
        return expr

    term = expr.term

    if isinstance(term, Not):
        # !!a => a
        return push_not_inward(term.term)

    if isinstance(term, And):
        # !(a /\ b) => !a \/ !b
        return Or(terms=[push_not_inward(Not(term=t)) for t in term.terms])

    if isinstance(term, Or):
        # !(a \/ b) => !a /\ !b
        return And(terms=[push_not_inward(Not(term=t)) for t in term.terms])

    if isinstance(term, Lit):
        return Lit(var=term.var, neg=not term.neg)

    if isinstance(term, Const):
        return Const(value=not term.value)

    return expr

def normalize_fexpr(expr: BoolExpr) -> BoolExpr:
    """Full normalization pipeline: push not -> flatten."""
    expr = push_not_inward(expr)
    expr = flatten(expr)
    return expr
