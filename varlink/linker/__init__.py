from varlink.linker.ctype import (
    CType, CVoid, CChar, CInt, CLong, CFloat, CDouble, CLongDouble,
    CSigned, CUnsigned, CPointer, CArray, CFunction, CStruct, CUnknown
)
from varlink.linker.signature import CSignature, Position, group_by_name
from varlink.linker.conflicts import Conflict, presence_conflicts, type_conflicts, get_conflicts
from varlink.linker.interface import CInterface, link_all

__all__ = [
    "CType", "CVoid", "CChar", "CInt", "CLong", "CFloat", "CDouble", "CLongDouble",
    "CSigned", "CUnsigned", "CPointer", "CArray", "CFunction", "CStruct", "CUnknown",
    "CSignature", "Position", "group_by_name",
    "Conflict", "presence_conflicts", "type_conflicts", "get_conflicts",
    "CInterface", "link_all",
]
