from dataclasses import dataclass, field, replace
from typing import Any, Dict, Hashable, Iterable, List, Tuple
from pydantic import BaseModel, ConfigDict
from varlink.core.errors import ValidationError
from varlink.fexpr.fexpr import FeatureExpr

class Position(BaseModel):
    """Source location of a declaration, used for diagnostics only."""
    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    col: int = 0

    def __str__(self):
        return f"{self.file}:{self.line}:{self.col}"

@dataclass(frozen=True)
class CSignature:
    """
    A named declaration of one type, active under a presence condition.

    Two signatures are duplicates if name and ctype match; their conditions
    and positions are merged when an interface is packed.
    """
    name: str
    ctype: Hashable
    fexpr: FeatureExpr
    pos: Tuple[Any, ...] = field(default=())

    def __post_init__(self):
        if not self.name:
            raise ValidationError("Signature name cannot be empty")
        if not isinstance(self.pos, tuple):
            object.__setattr__(self, "pos", tuple(self.pos))

    @property
    def key(self) -> Tuple[str, Hashable]:
        return (self.name, self.ctype)

    def and_(self, f: FeatureExpr) -> "CSignature":
        return replace(self, fexpr=self.fexpr.and_(f))

    def __str__(self):
        text = f"{self.name}: {self.ctype} {self.fexpr}"
        if self.pos:
            text += "\t" + ", ".join(str(p) for p in self.pos)
        return text

def group_by_name(sigs: Iterable[CSignature]) -> Dict[str, List[CSignature]]:
    """Groups signatures by name, keeping their original order within a group."""
    result: Dict[str, List[CSignature]] = {}
    for sig in sigs:
        result.setdefault(sig.name, []).append(sig)
    return result
