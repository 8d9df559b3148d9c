"""
varlink: variability-aware linker interfaces for C product lines.

Every module interface carries a family of signatures, each guarded by the
presence condition under which it exists. Linking two interfaces infers the
configurations in which they do not conflict and restricts the feature model
accordingly.
"""
from varlink.fexpr import FeatureExpr, FeatureExprFactory, FeatureModel, SatOracle
from varlink.linker import CInterface, CSignature, Conflict, Position, link_all

__version__ = "0.1.0"

__all__ = [
    "FeatureExpr", "FeatureExprFactory", "FeatureModel", "SatOracle",
    "CInterface", "CSignature", "Conflict", "Position", "link_all",
]
