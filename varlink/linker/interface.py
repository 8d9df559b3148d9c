"""
Variability-aware linker interfaces.

A CInterface describes what a compilation unit imports (uses but does not
define) and exports (defines), where every signature carries the presence
condition under which it exists, and a feature model restricting the valid
configurations of the unit.
"""
from dataclasses import dataclass, field
from functools import cached_property
from typing import (Callable, Dict, FrozenSet, Hashable, Iterable, List, Sequence,
                    Tuple, Union)
from varlink.core.logging import get_logger
from varlink.fexpr.feature_model import FeatureModel
from varlink.fexpr.fexpr import FeatureExpr, FeatureExprFactory
from varlink.linker.conflicts import Conflict, get_conflicts
from varlink.linker.signature import CSignature, group_by_name

logger = get_logger(__name__)

@dataclass(frozen=True)
class CInterface:
    feature_model: FeatureExpr
    imported_features: FrozenSet[str]
    declared_features: FrozenSet[str]  # not inferred
    imports: Tuple[CSignature, ...]
    exports: Tuple[CSignature, ...]
    # set only on results of pack(); pack(pack(x)) returns its argument
    _packed: bool = field(default=False, compare=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "imported_features", frozenset(self.imported_features))
        object.__setattr__(self, "declared_features", frozenset(self.declared_features))
        object.__setattr__(self, "imports", tuple(self.imports))
        object.__setattr__(self, "exports", tuple(self.exports))

    @classmethod
    def from_signatures(cls,
                        imports: Iterable[CSignature],
                        exports: Iterable[CSignature],
                        feature_model: FeatureExpr,
                        declared_features: Iterable[str] = ()) -> "CInterface":
        """
        Creates the (unpacked) interface of a single module. Imported features
        are all options mentioned by the module's conditions that it does not
        declare itself.
        """
        imports = tuple(imports)
        exports = tuple(exports)
        declared = frozenset(declared_features)
        features = set(feature_model.collect_distinct_features())
        for sig in imports + exports:
            features.update(sig.fexpr.collect_distinct_features())
        return cls(feature_model, frozenset(features) - declared, declared, imports, exports)

    @classmethod
    def empty(cls, factory: FeatureExprFactory) -> "CInterface":
        return cls(factory.base, frozenset(), frozenset(), (), ())

    @property
    def factory(self) -> FeatureExprFactory:
        return self.feature_model.factory

    @cached_property
    def imports_by_name(self) -> Dict[str, List[CSignature]]:
        return group_by_name(self.imports)

    @cached_property
    def exports_by_name(self) -> Dict[str, List[CSignature]]:
        return group_by_name(self.exports)

    @cached_property
    def interface_features(self) -> FrozenSet[str]:
        """All options mentioned by the feature model or any signature."""
        result = set(self.feature_model.collect_distinct_features())
        for sig in self.imports + self.exports:
            result.update(sig.fexpr.collect_distinct_features())
        return frozenset(result)

    # --- packing ---

    def pack(self) -> "CInterface":
        """
        removes duplicates by joining the corresponding conditions
        removes imports that are available as exports in the same file
        removes dead imports

        two elements are duplicate if they have the same name and type

        exports are not packed beyond removing dead exports.
        duplicate exports are used for error detection
        """
        if self._packed:
            return self
        packed = CInterface(self.feature_model,
                            self.imported_features - self.declared_features,
                            self.declared_features,
                            self._pack_imports(),
                            self._pack_exports(),
                            _packed=True)
        logger.debug(f"Packed interface: imports {len(self.imports)} -> {len(packed.imports)}, "
                     f"exports {len(self.exports)} -> {len(packed.exports)}")
        return packed

    def _pack_imports(self) -> Tuple[CSignature, ...]:
        fm = self.feature_model
        import_map: Dict[Tuple[str, Hashable], Tuple[FeatureExpr, Tuple]] = {}

        # eliminate duplicates with a map
        for imp in self.imports:
            if (fm & imp.fexpr).is_satisfiable():
                old_fexpr, old_pos = import_map.get(imp.key, (self.factory.dead, ()))
                import_map[imp.key] = (old_fexpr | imp.fexpr, old_pos + imp.pos)

        # eliminate imports that have corresponding exports
        for exp in self.exports:
            if exp.key in import_map:
                old_fexpr, old_pos = import_map[exp.key]
                new_fexpr = old_fexpr.and_not(exp.fexpr)
                if (fm & new_fexpr).is_satisfiable():
                    import_map[exp.key] = (new_fexpr, old_pos)
                else:
                    del import_map[exp.key]

        return tuple(CSignature(name, ctype, fexpr, pos)
                     for (name, ctype), (fexpr, pos) in import_map.items())

    def _pack_exports(self) -> Tuple[CSignature, ...]:
        return tuple(e for e in self.exports if (e.fexpr & self.feature_model).is_satisfiable())

    # --- well-formedness ---

    def wellformedness_violations(self) -> List[Conflict]:
        """
        A module is ill-formed if, in the same configuration, it
        (a) exports the same name twice,
        (b) imports the same name twice, or
        (c) imports and exports the same name.

        Each violation is reported with the condition under which the
        signatures of that name would be exclusive.
        """
        names = list(self.exports_by_name)
        names += [n for n in self.imports_by_name if n not in self.exports_by_name]

        violations = []
        for name in names:
            sigs = tuple(self.exports_by_name.get(name, ())) + tuple(self.imports_by_name.get(name, ()))
            if len(sigs) <= 1:
                continue
            exclusive = self.factory.create_and(
                a.fexpr.mex(b.fexpr) for i, a in enumerate(sigs) for b in sigs[i + 1:])
            if not self.feature_model.implies(exclusive).is_tautology():
                violations.append(Conflict(name, exclusive, sigs))
        return violations

    def is_wellformed(self) -> bool:
        """by construction, inferred and linked interfaces should be well-formed"""
        violations = self.wellformedness_violations()
        for v in violations:
            sigs = "\n".join("\t" + str(s) for s in v.signatures)
            logger.warning(f"{v.name} imported/exported multiple times in the same configuration:\n{sigs}")
        return not violations

    # --- composition ---

    def get_conflicts(self, that: "CInterface") -> List[Conflict]:
        return get_conflicts(self, that)

    def _infer_constraints_with(self, that: "CInterface") -> FeatureExpr:
        """configurations in which no conflict with that occurs"""
        conflicts = self.get_conflicts(that)
        if conflicts:
            logger.debug(f"Linking found {len(conflicts)} potential conflicts: "
                         f"{sorted({c.name for c in conflicts})}")
        return self.factory.create_and(c.fexpr for c in conflicts)

    def link(self, that: "CInterface") -> "CInterface":
        return CInterface(
            self.feature_model & that.feature_model & self._infer_constraints_with(that),
            self.imported_features | that.imported_features,
            self.declared_features | that.declared_features,
            self.imports + that.imports,
            self.exports + that.exports,
        ).pack()

    def debug_join(self, that: "CInterface") -> "CInterface":
        """links without conflict checks and packing. only for debugging purposes"""
        return CInterface(
            self.feature_model & that.feature_model,
            self.imported_features | that.imported_features,
            self.declared_features | that.declared_features,
            self.imports + that.imports,
            self.exports + that.exports,
        )

    def and_(self, f: FeatureExpr) -> "CInterface":
        return CInterface(
            self.feature_model,
            self.imported_features,
            self.declared_features,
            tuple(s.and_(f) for s in self.imports),
            tuple(s.and_(f) for s in self.exports),
        )

    def and_fm(self, feature: FeatureExpr) -> "CInterface":
        return self.map_fm(lambda fm: fm & feature)

    def map_fm(self, f: Callable[[FeatureExpr], FeatureExpr]) -> "CInterface":
        return CInterface(f(self.feature_model), self.imported_features, self.declared_features,
                          self.imports, self.exports)

    def conditional(self, condition: FeatureExpr) -> "CInterface":
        """
        Turns the interface into a conditional interface, to emulate
        conditional linking of modules:

            a.conditional(f).link(b.conditional(g))

        is conceptually equivalent to

            if f and g:         a.link(b)
            elif f and not g:   a
            elif not f and g:   b
            else:               empty
        """
        return self.and_(condition).map_fm(lambda fm: condition.implies(fm))

    # --- predicates ---

    def is_compatible_to(self, that: Union["CInterface", Sequence["CInterface"]]) -> bool:
        """
        Linking two well-formed modules always yields a well-formed module,
        but it only makes sense if the resulting feature model is not void.
        A sequence is linked left to right, stopping at the first
        incompatible module.
        """
        if not isinstance(that, CInterface):
            m = self
            for other in that:
                if not m.is_compatible_to(other):
                    return False
                m = m.link(other)
            return True

        return (self.link(that).feature_model.is_satisfiable() and
                not (self.declared_features & that.declared_features))

    def is_complete(self) -> bool:
        """
        A module is complete if its feature model is satisfiable and it has no
        remaining imports with satisfiable conditions. A complete and fully
        configured module is the desired end result when configuring a
        product line for a specific use case.
        """
        return self.feature_model.is_satisfiable() and not self.pack().imports

    def is_fully_configured(self) -> bool:
        packed = self.pack()
        return all(self.feature_model.implies(s.fexpr).is_tautology()
                   for s in packed.imports + packed.exports)

    def compatible_with_global_feature_model(self, global_fm: Union[FeatureExpr, FeatureModel]) -> bool:
        """
        Checks that linking did not restrict the product line more than the
        global feature model designed by the domain expert already does.
        """
        if isinstance(global_fm, FeatureModel):
            return self.feature_model.is_tautology(global_fm)
        return global_fm.implies(self.feature_model).is_tautology()

    def __str__(self):
        text = f"fm {self.feature_model}\n"
        text += f"features ({len(self.imported_features)})\n\t" + ", ".join(sorted(self.imported_features))
        if self.declared_features:
            text += (f"\ndeclared features ({len(self.declared_features)})\n\t" +
                     ", ".join(sorted(self.declared_features)))
        text += f"\nimports ({len(self.imports)})\n" + "\n".join(sorted("\t" + str(s) for s in self.imports))
        text += f"\nexports ({len(self.exports)})\n" + "\n".join(sorted("\t" + str(s) for s in self.exports))
        return text + "\n"

def link_all(interfaces: Iterable[CInterface], factory: FeatureExprFactory) -> CInterface:
    """Links interfaces left to right; this order makes results reproducible."""
    result = CInterface.empty(factory)
    for count, interface in enumerate(interfaces, start=1):
        result = result.link(interface)
        logger.debug(f"Linked {count} interfaces, {len(result.imports)} open imports")
    return result
