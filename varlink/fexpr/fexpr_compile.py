from typing import Dict, Iterable, List, Optional, Tuple
from varlink.fexpr.fexpr_types import BoolExpr, Const, Lit, Not, And, Or
from varlink.fexpr.fexpr_normalize import collect_vars, normalize_fexpr

CNFEncoding = List[List[int]]

class CompilationContext:
    def __init__(self, base_vars: Iterable[str],
                 varmap: Optional[Dict[str, int]] = None, top_id: int = 0):
        # Extends an existing id space (e.g. a feature model's) if one is given
        self.varmap: Dict[str, int] = dict(varmap or {})
        self.next_aux = max([top_id] + list(self.varmap.values())) + 1
        for name in sorted(base_vars):
            if name not in self.varmap:
                self.varmap[name] = self.allocate_aux()
        self.clauses: CNFEncoding = []

    def allocate_aux(self) -> int:
        aux = self.next_aux
        self.next_aux += 1
        return aux

    def add_clause(self, clause: List[int]):
        self.clauses.append(clause)

def tseitin(expr: BoolExpr, ctx: CompilationContext) -> int:
    """Tseitin transformation: returns the literal representing the expression."""
    if isinstance(expr, Lit):
        var_id = ctx.varmap[expr.var.name]
        return -var_id if expr.neg else var_id

    if isinstance(expr, Const):
        out = ctx.allocate_aux()
        ctx.add_clause([out] if expr.value else [-out])
        return out

    if isinstance(expr, Not):
        target = tseitin(expr.term, ctx)
        return -target

    if isinstance(expr, And):
        out = ctx.allocate_aux()
        inputs = [tseitin(t, ctx) for t in expr.terms]
        # out <-> (i1 /\ i2 /\ ...)
        for i in inputs:
            ctx.add_clause([-out, i])
        ctx.add_clause([-i for i in inputs] + [out])
        return out

    if isinstance(expr, Or):
        out = ctx.allocate_aux()
        inputs = [tseitin(t, ctx) for t in expr.terms]
        # out <-> (i1 \/ i2 \/ ...)
        for i in inputs:
            ctx.add_clause([-i, out])
        ctx.add_clause([-out] + inputs)
        return out

    raise ValueError(f"Unsupported expression for Tseitin: {type(expr)}")

def compile_fexpr(expr: BoolExpr,
                  varmap: Optional[Dict[str, int]] = None,
                  top_id: int = 0) -> Tuple[CNFEncoding, Dict[str, int]]:
    """
    Compiles a presence condition to CNF asserting it.

    If varmap/top_id are given, options already named there keep their ids and
    fresh variables are allocated above top_id, so the result can be solved
    together with the clauses that varmap belongs to.
    """
    ctx = CompilationContext(collect_vars(expr, set()), varmap=varmap, top_id=top_id)

    norm_expr = normalize_fexpr(expr)
    root_lit = tseitin(norm_expr, ctx)
    ctx.add_clause([root_lit])

    # Deterministic clause ordering
    ctx.clauses.sort(key=lambda c: (len(c), sorted([abs(l) for l in c]), c))

    return ctx.clauses, ctx.varmap
