__version__ = "0.1.0"

from .exceptions import (
    KirumError as KirumError,
    UnknownReference as UnknownReference,
    UnknownField as UnknownField,
    UnknownGroupOrKey as UnknownGroupOrKey,
    MalformedArguments as MalformedArguments,
    CycleDetected as CycleDetected,
    UnderspecifiedLexis as UnderspecifiedLexis,
    PhoneticRecursionLimitExceeded as PhoneticRecursionLimitExceeded,
    ScriptTransformFailure as ScriptTransformFailure,
    DuplicateEntityError as DuplicateEntityError,
    ParseError as ParseError,
)

from .models import (
    PartOfSpeech as PartOfSpeech,
    LetterPlace as LetterPlace,
    Lexis as Lexis,
    Etymon as Etymon,
    ResolvedRecord as ResolvedRecord,
    ValidationResult as ValidationResult,
    LexiconStats as LexiconStats,
)

from .lemma import Lemma as Lemma
from .store import LexisGraph as LexisGraph
from .matching import (
    matches as matches,
    parse_predicate as parse_predicate,
)
from .primitives import (
    apply_primitive as apply_primitive,
    parse_primitive as parse_primitive,
)
from .scripting import (
    ScriptContext as ScriptContext,
    ScriptRegistry as ScriptRegistry,
    ScriptRunner as ScriptRunner,
)
from .transforms import (
    Step as Step,
    Transform as Transform,
    parse_transform as parse_transform,
    run_pipeline as run_pipeline,
)
from .global_transforms import (
    GlobalRule as GlobalRule,
    parse_global_rule as parse_global_rule,
)
from .evaluator import Evaluator as Evaluator
from .daughter import generate_daughter as generate_daughter
from .phonetics import (
    Phonology as Phonology,
    PhoneticGenerator as PhoneticGenerator,
)
from .project import Project as Project
from .ingest import (
    load_document as load_document,
    load_project as load_project,
    load_projects as load_projects,
)

__all__ = [
    # Exceptions
    "KirumError",
    "UnknownReference",
    "UnknownField",
    "UnknownGroupOrKey",
    "MalformedArguments",
    "CycleDetected",
    "UnderspecifiedLexis",
    "PhoneticRecursionLimitExceeded",
    "ScriptTransformFailure",
    "DuplicateEntityError",
    "ParseError",
    # Models
    "PartOfSpeech",
    "LetterPlace",
    "Lexis",
    "Etymon",
    "ResolvedRecord",
    "ValidationResult",
    "LexiconStats",
    "Lemma",
    # Graph and evaluation
    "LexisGraph",
    "Transform",
    "Step",
    "GlobalRule",
    "Evaluator",
    "Project",
    "Phonology",
    "PhoneticGenerator",
    # Scripting
    "ScriptContext",
    "ScriptRegistry",
    "ScriptRunner",
    # Functions
    "matches",
    "parse_predicate",
    "apply_primitive",
    "parse_primitive",
    "parse_transform",
    "parse_global_rule",
    "run_pipeline",
    "generate_daughter",
    "load_document",
    "load_project",
    "load_projects",
]
