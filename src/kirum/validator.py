"""Validation engine for kirum projects.

Rules run over an assembled graph before any render. Each finding is a
``ValidationResult``; ``raise_for_errors`` turns the first ERROR into the
matching exception so a project with dangling references, cycles or unknown
phonetic keys never starts rendering.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from kirum.exceptions import (
    CycleDetected,
    KirumError,
    UnknownGroupOrKey,
    UnknownReference,
)
from kirum.global_transforms import GlobalRule
from kirum.models import ValidationResult, ValidationSeverity
from kirum.phonetics import GroupRef, Phonology
from kirum.primitives import ScriptTransform
from kirum.store import LexisGraph
from kirum.transforms import Transform

_ERROR = ValidationSeverity.ERROR.value
_WARNING = ValidationSeverity.WARNING.value


def validate_all(
    graph: LexisGraph,
    transforms: Mapping[str, Transform],
    *,
    global_rules: Sequence[GlobalRule] = (),
    phonology: Phonology | None = None,
    scripts: object | None = None,
) -> list[ValidationResult]:
    """Run all validation rules."""
    results: list[ValidationResult] = []
    results.extend(_val_ref_001(graph))
    results.extend(_val_ref_002(graph, transforms))
    results.extend(_val_gra_001(graph))
    results.extend(_val_lex_001(graph))
    results.extend(_val_lex_002(graph))
    results.extend(_val_lex_003(graph))
    results.extend(_val_pho_001(graph, phonology))
    results.extend(_val_pho_002(phonology))
    results.extend(_val_scr_001(transforms, global_rules, scripts))
    return results


def raise_for_errors(results: Sequence[ValidationResult]) -> None:
    """Raise the exception matching the first ERROR finding, if any."""
    for result in results:
        if result.severity != _ERROR:
            continue
        details = result.details or {}
        if result.rule_id in ("VAL-REF-001", "VAL-REF-002"):
            raise UnknownReference(
                details["reference"],
                kind=details["kind"],
                referrer=result.entity_id,
            )
        if result.rule_id == "VAL-GRA-001":
            raise CycleDetected(details["path"])
        if result.rule_id in ("VAL-PHO-001", "VAL-PHO-002"):
            raise UnknownGroupOrKey(details["symbol"], kind=details["kind"])
        raise KirumError(result.message)


# ------------------------------------------------------------------
# Individual rule implementations
# ------------------------------------------------------------------

def _val_ref_001(graph: LexisGraph) -> list[ValidationResult]:
    """Etymon links must point at existing nodes."""
    results = []
    for lexis in graph:
        for ety in lexis.etymons:
            if ety.etymon not in graph:
                results.append(ValidationResult(
                    rule_id="VAL-REF-001",
                    severity=_ERROR,
                    entity_type="lexis",
                    entity_id=lexis.id,
                    message=f"Etymon '{ety.etymon}' does not exist",
                    details={"reference": ety.etymon, "kind": "lexis"},
                ))
    return results


def _val_ref_002(
    graph: LexisGraph, transforms: Mapping[str, Transform]
) -> list[ValidationResult]:
    """Etymon links must name defined transforms."""
    results = []
    for lexis in graph:
        for ety in lexis.etymons:
            for name in ety.transforms:
                if name not in transforms:
                    results.append(ValidationResult(
                        rule_id="VAL-REF-002",
                        severity=_ERROR,
                        entity_type="lexis",
                        entity_id=lexis.id,
                        message=f"Transform '{name}' does not exist",
                        details={"reference": name, "kind": "transform"},
                    ))
    return results


def _val_gra_001(graph: LexisGraph) -> list[ValidationResult]:
    """The etymology graph must be acyclic."""
    cycle = graph.find_cycle()
    if cycle is None:
        return []
    return [ValidationResult(
        rule_id="VAL-GRA-001",
        severity=_ERROR,
        entity_type="lexis",
        entity_id=cycle[0],
        message=f"Etymology cycle: {' -> '.join(cycle)}",
        details={"path": cycle},
    )]


def _val_lex_001(graph: LexisGraph) -> list[ValidationResult]:
    """Every lexis needs a word, a generate key or an etymon."""
    return [
        ValidationResult(
            rule_id="VAL-LEX-001",
            severity=_WARNING,
            entity_type="lexis",
            entity_id=lexis.id,
            message="Lexis has no word, no generate key and no etymons",
            details=None,
        )
        for lexis in graph
        if not lexis.word and not lexis.generate and not lexis.etymons
    ]


def _val_lex_002(graph: LexisGraph) -> list[ValidationResult]:
    """Agglutination orders should be distinct among a lexis's etymons."""
    results = []
    for lexis in graph:
        orders = [e.agglutination_order for e in lexis.etymons]
        if len(set(orders)) != len(orders):
            results.append(ValidationResult(
                rule_id="VAL-LEX-002",
                severity=_WARNING,
                entity_type="lexis",
                entity_id=lexis.id,
                message="Etymons share an agglutination order",
                details={"orders": orders},
            ))
    return results


def _val_lex_003(graph: LexisGraph) -> list[ValidationResult]:
    """A generate key is ignored when the lexis has a word or etymons."""
    return [
        ValidationResult(
            rule_id="VAL-LEX-003",
            severity=_WARNING,
            entity_type="lexis",
            entity_id=lexis.id,
            message=f"Generate key '{lexis.generate}' is ignored",
            details=None,
        )
        for lexis in graph
        if lexis.generate and (lexis.word or lexis.etymons)
    ]


def _val_pho_001(
    graph: LexisGraph, phonology: Phonology | None
) -> list[ValidationResult]:
    """Generate keys must exist in the phonetic ruleset."""
    known = phonology.lexis_types if phonology is not None else {}
    return [
        ValidationResult(
            rule_id="VAL-PHO-001",
            severity=_ERROR,
            entity_type="lexis",
            entity_id=lexis.id,
            message=f"Generate key '{lexis.generate}' is not declared",
            details={"symbol": lexis.generate, "kind": "key"},
        )
        for lexis in graph
        if lexis.generate and not lexis.word and not lexis.etymons
        and lexis.generate not in known
    ]


def _val_pho_002(phonology: Phonology | None) -> list[ValidationResult]:
    """Phonetic patterns must reference declared groups."""
    if phonology is None:
        return []
    results = []
    for table_name, table in (
        ("groups", phonology.groups),
        ("lexis_types", phonology.lexis_types),
    ):
        for key, patterns in table.items():
            for pattern in patterns:
                for item in pattern:
                    if isinstance(item, GroupRef) and item.symbol not in phonology.groups:
                        results.append(ValidationResult(
                            rule_id="VAL-PHO-002",
                            severity=_ERROR,
                            entity_type=table_name,
                            entity_id=key,
                            message=f"Pattern references undeclared group '{item.symbol}'",
                            details={"symbol": item.symbol, "kind": "group"},
                        ))
    return results


def _val_scr_001(
    transforms: Mapping[str, Transform],
    global_rules: Sequence[GlobalRule],
    scripts: object | None,
) -> list[ValidationResult]:
    """Script transforms should name scripts the runner knows."""
    owners = [(t.name, t.primitives) for t in transforms.values()]
    owners.extend((rule.name, rule.primitives) for rule in global_rules)
    results = []
    for owner, primitives in owners:
        for primitive in primitives:
            if not isinstance(primitive, ScriptTransform):
                continue
            if scripts is None:
                message = f"Script '{primitive.file}' used but no script runner is configured"
            elif hasattr(scripts, "__contains__") and primitive.file not in scripts:
                message = f"Script '{primitive.file}' is not registered"
            else:
                continue
            results.append(ValidationResult(
                rule_id="VAL-SCR-001",
                severity=_WARNING,
                entity_type="transform",
                entity_id=owner,
                message=message,
                details={"file": primitive.file},
            ))
    return results
