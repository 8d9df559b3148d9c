"""
C types carried by linker signatures.

The linker only ever compares types for equality; these models exist so that
callers have a structural, hashable representation to put into signatures.
Any other hashable value works just as well.
"""
from typing import Annotated, Literal, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field

class CTypeBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def __str__(self):
        return self.kind

class CVoid(CTypeBase):
    kind: Literal["void"] = "void"

class CChar(CTypeBase):
    kind: Literal["char"] = "char"

class CInt(CTypeBase):
    kind: Literal["int"] = "int"

class CLong(CTypeBase):
    kind: Literal["long"] = "long"

class CFloat(CTypeBase):
    kind: Literal["float"] = "float"

class CDouble(CTypeBase):
    kind: Literal["double"] = "double"

class CLongDouble(CTypeBase):
    kind: Literal["long double"] = "long double"

class CSigned(CTypeBase):
    kind: Literal["signed"] = "signed"
    base: "CType"

    def __str__(self):
        return f"signed {self.base}"

class CUnsigned(CTypeBase):
    kind: Literal["unsigned"] = "unsigned"
    base: "CType"

    def __str__(self):
        return f"unsigned {self.base}"

class CPointer(CTypeBase):
    kind: Literal["pointer"] = "pointer"
    target: "CType"

    def __str__(self):
        return f"{self.target}*"

class CArray(CTypeBase):
    kind: Literal["array"] = "array"
    element: "CType"

    def __str__(self):
        return f"{self.element}[]"

class CFunction(CTypeBase):
    kind: Literal["function"] = "function"
    params: Tuple["CType", ...] = ()
    ret: "CType"

    def __str__(self):
        return f"{self.ret}({', '.join(str(p) for p in self.params)})"

class CStruct(CTypeBase):
    kind: Literal["struct"] = "struct"
    name: str

    def __str__(self):
        return f"struct {self.name}"

class CUnknown(CTypeBase):
    """A declaration whose type could not be determined."""
    kind: Literal["unknown"] = "unknown"
    msg: str = ""

    def __str__(self):
        return f"?{self.msg}"

CType = Annotated[
    Union[CVoid, CChar, CInt, CLong, CFloat, CDouble, CLongDouble,
          CSigned, CUnsigned, CPointer, CArray, CFunction, CStruct, CUnknown],
    Field(discriminator="kind")
]

CSigned.model_rebuild()
CUnsigned.model_rebuild()
CPointer.model_rebuild()
CArray.model_rebuild()
CFunction.model_rebuild()
