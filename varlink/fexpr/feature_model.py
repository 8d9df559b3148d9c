import hashlib
from functools import cached_property
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pysat.formula import CNF
from varlink.core.errors import ValidationError
from varlink.fexpr.fexpr_compile import compile_fexpr

if TYPE_CHECKING:
    from varlink.fexpr.fexpr import FeatureExpr

def canonicalize_clause(clause: List[int]) -> Tuple[int, ...]:
    """Sorts literals in a clause by absolute value, then sign."""
    return tuple(sorted(clause, key=lambda x: (abs(x), x)))

class FeatureModel(BaseModel):
    """
    Background constraint over configuration options, kept in CNF.

    varmap names the variables that stand for configuration options; any
    other variable up to num_vars is auxiliary. Presence conditions are
    checked against a feature model by compiling them into the same id space.
    """
    model_config = ConfigDict(frozen=True)

    num_vars: int = Field(ge=0)
    clauses: List[List[int]] = Field(default_factory=list)
    varmap: Dict[str, int] = Field(default_factory=dict)

    @field_validator('clauses')
    @classmethod
    def validate_clauses(cls, v: List[List[int]], info) -> List[List[int]]:
        num_vars = info.data.get('num_vars')
        for i, clause in enumerate(v):
            if not clause:
                raise ValueError(f"Clause {i} is empty")
            for lit in clause:
                if lit == 0:
                    raise ValueError(f"Literal 0 is invalid in clause {i}")
                if num_vars is not None and abs(lit) > num_vars:
                    raise ValueError(f"Literal {lit} exceeds num_vars {num_vars} in clause {i}")
        return v

    @field_validator('varmap')
    @classmethod
    def validate_varmap(cls, v: Dict[str, int], info) -> Dict[str, int]:
        num_vars = info.data.get('num_vars')
        for name, var in v.items():
            if var <= 0 or (num_vars is not None and var > num_vars):
                raise ValueError(f"Option {name} mapped to invalid variable {var}")
        return v

    @classmethod
    def empty(cls) -> "FeatureModel":
        return cls(num_vars=0)

    @classmethod
    def from_expr(cls, expr: "FeatureExpr") -> "FeatureModel":
        """Creates a feature model that admits exactly the configurations of expr."""
        clauses, varmap = compile_fexpr(expr.node)
        top = max([abs(l) for c in clauses for l in c] + list(varmap.values()), default=0)
        return cls(num_vars=top, clauses=clauses, varmap=varmap)

    @classmethod
    def from_pysat(cls, formula: CNF, varmap: Dict[str, int]) -> "FeatureModel":
        """Creates a feature model from a PySAT CNF formula and its option names."""
        try:
            return cls(num_vars=formula.nv, clauses=[list(c) for c in formula.clauses],
                       varmap=dict(varmap))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid feature model: {e}") from e

    def to_pysat(self) -> CNF:
        """Converts to a PySAT CNF formula."""
        formula = CNF()
        formula.nv = self.num_vars
        formula.clauses = [list(c) for c in self.clauses]
        return formula

    @property
    def features(self) -> FrozenSet[str]:
        return frozenset(self.varmap)

    @cached_property
    def content_hash(self) -> str:
        """Stable SHA256 hash of the canonicalized clauses and option names."""
        canonical = sorted(canonicalize_clause(c) for c in self.clauses)
        content = f"p cnf {self.num_vars} {len(canonical)}\n"
        content += "\n".join(" ".join(map(str, c)) + " 0" for c in canonical)
        content += "\n" + "\n".join(f"c {v} {n}" for n, v in sorted(self.varmap.items()))
        return hashlib.sha256(content.encode('utf-8')).hexdigest()
