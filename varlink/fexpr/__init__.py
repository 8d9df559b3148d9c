from varlink.fexpr.fexpr_types import VarRef, Const, Lit, Not, And, Or, BoolExpr
from varlink.fexpr.fexpr_normalize import build_stable_key, normalize_fexpr
from varlink.fexpr.fexpr_compile import compile_fexpr
from varlink.fexpr.feature_model import FeatureModel
from varlink.fexpr.oracle import SatOracle, OracleStats
from varlink.fexpr.fexpr import FeatureExpr, FeatureExprFactory
from varlink.fexpr.fexpr_parser import parse_fexpr

__all__ = [
    "VarRef", "Const", "Lit", "Not", "And", "Or", "BoolExpr",
    "build_stable_key", "normalize_fexpr", "compile_fexpr",
    "FeatureModel", "SatOracle", "OracleStats",
    "FeatureExpr", "FeatureExprFactory", "parse_fexpr",
]
