from typing import Dict, Optional, Tuple
from pydantic import BaseModel
from pysat.solvers import Solver
from varlink.core.config import OracleConfig
from varlink.core.errors import OracleError
from varlink.core.logging import get_logger
from varlink.fexpr.feature_model import FeatureModel
from varlink.fexpr.fexpr_compile import compile_fexpr
from varlink.fexpr.fexpr_normalize import build_stable_key
from varlink.fexpr.fexpr_types import BoolExpr, Const, Not

logger = get_logger(__name__)

class OracleStats(BaseModel):
    """Counters of an oracle's workload."""
    queries: int = 0
    cache_hits: int = 0
    solver_calls: int = 0

class SatOracle:
    """
    Decides satisfiability of presence conditions with a PySAT solver.

    Answers are memoized per (formula, feature model) pair. The memo is a
    plain performance cache: clearing it never changes any answer.
    """
    def __init__(self, config: Optional[OracleConfig] = None):
        self.config = config if config else OracleConfig()
        self.stats = OracleStats()
        self._cache: Dict[Tuple[str, Optional[str]], bool] = {}

    def is_satisfiable(self, expr: BoolExpr, fm: Optional[FeatureModel] = None) -> bool:
        self.stats.queries += 1

        if fm is None or not fm.clauses:
            # Constants need no solver
            if isinstance(expr, Const):
                return expr.value
            fm = None

        key = (build_stable_key(expr), fm.content_hash if fm else None)
        cached = self._cache.get(key)
        if cached is not None:
            self.stats.cache_hits += 1
            return cached

        result = self._solve(expr, fm)

        if self.config.cache_max_entries:
            if len(self._cache) >= self.config.cache_max_entries:
                logger.debug(f"Oracle cache full ({len(self._cache)} entries), clearing")
                self._cache.clear()
            self._cache[key] = result
        return result

    def is_tautology(self, expr: BoolExpr, fm: Optional[FeatureModel] = None) -> bool:
        """expr holds in every configuration admitted by fm."""
        return not self.is_satisfiable(_negate(expr), fm)

    def clear_cache(self) -> None:
        self._cache.clear()

    def _solve(self, expr: BoolExpr, fm: Optional[FeatureModel]) -> bool:
        if fm is not None:
            clauses, _ = compile_fexpr(expr, varmap=fm.varmap, top_id=fm.num_vars)
            clauses = fm.clauses + clauses
        else:
            clauses, _ = compile_fexpr(expr)

        self.stats.solver_calls += 1
        try:
            with Solver(name=self.config.solver_name, bootstrap_with=clauses) as solver:
                return bool(solver.solve())
        except Exception as e:
            raise OracleError(f"Solver {self.config.solver_name} failed: {e}") from e

def _negate(expr: BoolExpr) -> BoolExpr:
    if isinstance(expr, Const):
        return Const(value=not expr.value)
    return Not(term=expr)
