import re
from typing import Annotated, Any, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- VarRef ---

class VarRef(BaseModel):
    """Reference to a named configuration option with strict validation."""
    model_config = ConfigDict(frozen=True)

    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Option name cannot be empty")
        if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", v):
            raise ValueError("Option name must be a C identifier")
        return v

    def __hash__(self):
        return hash(self.name)

    def __eq__(self, other):
        if not isinstance(other, VarRef):
            return False
        return self.name == other.name

# --- BoolExpr ---

class BoolExprBase(BaseModel):
    model_config = ConfigDict(frozen=True)

class Const(BoolExprBase):
    """True (base) or False (dead)."""
    kind: Literal["const"] = "const"
    value: bool

class Lit(BoolExprBase):
    kind: Literal["lit"] = "lit"
    var: VarRef
    neg: bool = False

class Not(BoolExprBase):
    kind: Literal["not"] = "not"
    term: "BoolExpr"

class And(BoolExprBase):
    kind: Literal["and"] = "and"
    terms: List["BoolExpr"]

    @field_validator('terms')
    @classmethod
    def validate_len(cls, v: List[Any]) -> List[Any]:
        if len(v) < 2:
            raise ValueError("And requires at least 2 terms")
        return v

class Or(BoolExprBase):
    kind: Literal["or"] = "or"
    terms: List["BoolExpr"]

    @field_validator('terms')
    @classmethod
    def validate_len(cls, v: List[Any]) -> List[Any]:
        if len(v) < 2:
            raise ValueError("Or requires at least 2 terms")
        return v

BoolExpr = Annotated[
    Union[Const, Lit, Not, And, Or],
    Field(discriminator="kind")
]

# Required for recursive models in Pydantic v2
Not.model_rebuild()
And.model_rebuild()
Or.model_rebuild()
