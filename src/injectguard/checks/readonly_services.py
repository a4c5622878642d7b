"""RO-001: injected service fields that are never reassigned should be readonly.

The analysis runs in three phases per class declaration:

1. collect private, non-readonly constructor parameter properties;
2. drop every candidate whose name matches the service marker and which is
   assigned through ``this.<name> = ...`` as a top-level statement of any
   method;
3. report what is left, each with a fix inserting ``readonly``.

Statements nested in blocks, conditionals or loops are not scanned, so a
field reassigned only inside an ``if`` is still reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from injectguard.checks.base import BaseCheck
from injectguard.core._types import Accessibility, CandidateKind, MethodKind
from injectguard.core.diagnostic import Fix
from injectguard.rules.classes import RO_001
from injectguard.tree.nodes import (
    AssignmentExpression,
    AssignmentPattern,
    ClassDeclaration,
    ExpressionStatement,
    Identifier,
    MemberExpression,
    MethodDefinition,
    PropertyDefinition,
    ThisExpression,
    TSParameterProperty,
)

if TYPE_CHECKING:
    from injectguard.core.context import RuleContext
    from injectguard.core.trace import Tracer
    from injectguard.tree.nodes import Node
    from injectguard.tree.scope import ScopeManager

READONLY_TEXT = "readonly "

MESSAGE_ID = "addReadonly"
PROPERTY_MESSAGE = "Property can be made readonly"
PARAMETER_MESSAGE = "Parameter property can be made readonly"


@dataclass(frozen=True, slots=True)
class Candidate:
    """A field believed to be assigned only at construction."""

    name: str
    site: TSParameterProperty | PropertyDefinition
    kind: CandidateKind


CandidateSet: TypeAlias = dict[str, Candidate]


@dataclass(frozen=True, slots=True)
class ServiceMatcher:
    """Case-insensitive substring match on member names."""

    marker: str = "service"

    def matches(self, name: str) -> bool:
        return self.marker.lower() in name.lower()


def _bound_identifier(parameter: Node) -> Identifier | None:
    match parameter:
        case Identifier():
            return parameter
        case AssignmentPattern(left=Identifier() as left):
            return left
        case _:
            return None


def collect_candidates(node: ClassDeclaration, tracer: Tracer) -> CandidateSet:
    """Private, non-readonly parameter properties of the class constructor."""
    candidates: CandidateSet = {}
    for member in node.body.body:
        if not isinstance(member, MethodDefinition) or member.kind != MethodKind.CONSTRUCTOR:
            continue
        for param in member.value.params:
            match param:
                case TSParameterProperty(accessibility=Accessibility.PRIVATE, readonly=False):
                    ident = _bound_identifier(param.parameter)
                    if ident is None:
                        continue
                    tracer.event("Found non-readonly private parameter %r", ident.name)
                    candidates[ident.name] = Candidate(
                        ident.name, param, CandidateKind.PARAMETER_PROPERTY
                    )
    tracer.event("Candidates in class %s: %s", node.name, list(candidates))
    return candidates


def _reassigned_member(statement: Node) -> str | None:
    match statement:
        case ExpressionStatement(
            expression=AssignmentExpression(
                left=MemberExpression(
                    object=ThisExpression(),
                    property=Identifier(name=name),
                    computed=False,
                )
            )
        ):
            return name
        case _:
            return None


def scan_mutations(
    node: ClassDeclaration,
    candidates: CandidateSet,
    *,
    scope_manager: ScopeManager,
    matcher: ServiceMatcher,
    tracer: Tracer,
) -> None:
    """Remove candidates reassigned by a top-level statement of any method."""
    for member in node.body.body:
        if not isinstance(member, MethodDefinition):
            continue
        tracer.event("Examining method %s", member.name)
        scope = scope_manager.acquire(member.value)
        if scope is None or member.value.body is None:
            tracer.error("Failed to acquire scope for method %s", member.name)
            continue
        for statement in member.value.body.body:
            name = _reassigned_member(statement)
            if name is None or not matcher.matches(name):
                continue
            tracer.event("Assignment to %r found in method %s", name, member.name)
            if candidates.pop(name, None) is not None:
                tracer.event("Service %r is reassigned, no longer tracked", name)


def report_candidates(ctx: RuleContext, candidates: CandidateSet) -> None:
    """Report every remaining candidate with a fix inserting ``readonly``."""
    for name, candidate in candidates.items():
        ctx.tracer.event("Reporting %r as readonly-eligible", name)
        match candidate.site:
            case PropertyDefinition(key=key) as site:
                ctx.report(
                    RO_001,
                    site,
                    PROPERTY_MESSAGE,
                    message_id=MESSAGE_ID,
                    fix=Fix(key.span[0], READONLY_TEXT),
                )
            case TSParameterProperty(parameter=parameter) as site:
                ctx.report(
                    RO_001,
                    site,
                    PARAMETER_MESSAGE,
                    message_id=MESSAGE_ID,
                    fix=Fix(parameter.span[0], READONLY_TEXT),
                )


class ReadonlyServicesCheck(BaseCheck):
    """Flags injected private services that could be declared readonly."""

    rules = (RO_001,)

    def check_class(self, ctx: RuleContext, node: ClassDeclaration) -> None:
        candidates = collect_candidates(node, ctx.tracer)
        scan_mutations(
            node,
            candidates,
            scope_manager=ctx.scope_manager,
            matcher=ServiceMatcher(ctx.config.service_marker),
            tracer=ctx.tracer,
        )
        report_candidates(ctx, candidates)
