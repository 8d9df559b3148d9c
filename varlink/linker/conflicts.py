"""
Pairwise conflict detection between two interfaces.

Conflicts are:
(a) both modules export the same name in the same configuration
(b) both modules import the same name with different types in the same configuration
(c) one module imports a name the other module exports in the same
    configuration but with a different type

Detection is purely syntactic: every structurally possible conflict is
returned, even if its conditions are mutually exclusive, and no SAT query is
made. The condition of a conflict describes the configurations WITHOUT the
conflict.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Sequence, Tuple
from varlink.fexpr.fexpr import FeatureExpr
from varlink.linker.signature import CSignature

if TYPE_CHECKING:
    from varlink.linker.interface import CInterface

SignatureGroups = Dict[str, Sequence[CSignature]]

@dataclass(frozen=True)
class Conflict:
    name: str
    fexpr: FeatureExpr  # conflict-free condition
    signatures: Tuple[CSignature, ...]

    def __str__(self):
        sigs = "\n".join("\t" + str(s) for s in self.signatures)
        return f"{self.name} (conflict-free under {self.fexpr}):\n{sigs}"

def presence_conflicts(a: SignatureGroups, b: SignatureGroups) -> List[Conflict]:
    """Signatures from a and b must not share a presence condition."""
    result = []
    for signame, aa in a.items():
        if signame in b:
            bb = b[signame]
            conflict_expr = _disjoint_fexpr(aa).mex(_disjoint_fexpr(bb))
            result.append(Conflict(signame, conflict_expr, tuple(aa) + tuple(bb)))
    return result

def type_conflicts(a: SignatureGroups, b: SignatureGroups) -> List[Conflict]:
    """Signatures from a and b must not differ in type for the same configuration."""
    result = []
    for signame, aa in a.items():
        if signame in b:
            for asig in aa:
                for bsig in b[signame]:
                    if asig.ctype != bsig.ctype:
                        result.append(Conflict(signame, asig.fexpr.mex(bsig.fexpr), (asig, bsig)))
    return result

def get_conflicts(this: "CInterface", that: "CInterface") -> List[Conflict]:
    return (presence_conflicts(this.exports_by_name, that.exports_by_name) +
            type_conflicts(this.imports_by_name, that.imports_by_name) +
            type_conflicts(this.imports_by_name, that.exports_by_name) +
            type_conflicts(this.exports_by_name, that.imports_by_name))

def _disjoint_fexpr(sigs: Sequence[CSignature]) -> FeatureExpr:
    return sigs[0].fexpr.factory.create_or(s.fexpr for s in sigs)
