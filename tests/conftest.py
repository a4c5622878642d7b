"""ESTree builders for tests.

Each builder emits typescript-estree shaped JSON whose ``range`` offsets are
looked up in the test's source text, so fixes land where a real parser would
put them.  Lookups take the first occurrence at or after ``start``.
"""

import re
from typing import Any, TypeAlias

from injectguard.core.diagnostic import Diagnostic
from injectguard.core.linter import lint
from injectguard.core.trace import NULL_TRACER

Raw: TypeAlias = dict[str, Any]

_NAME = re.compile(r"[\w$]+")


def span(source: str, text: str, start: int = 0) -> list[int]:
    begin = source.index(text, start)
    return [begin, begin + len(text)]


def ident(source: str, name: str, *, text: str | None = None, start: int = 0) -> Raw:
    return {"type": "Identifier", "name": name, "range": span(source, text or name, start)}


def param(source: str, name: str, *, annotation: str = "Api", start: int = 0) -> Raw:
    """Plain constructor parameter ``name: Annotation``."""
    return ident(source, name, text=f"{name}: {annotation}", start=start)


def param_property(
    source: str,
    name: str,
    *,
    accessibility: str | None = "private",
    readonly: bool = False,
    annotation: str = "Api",
    default: str | None = None,
    start: int = 0,
) -> Raw:
    """``private [readonly] name: Annotation [= default]`` parameter property."""
    modifiers = " ".join(m for m in (accessibility, "readonly" if readonly else None) if m)
    declared = f"{name}: {annotation}"
    if default is not None:
        declared += f" = {default}"
    whole = span(source, f"{modifiers} {declared}" if modifiers else declared, start)
    parameter = ident(source, name, text=f"{name}: {annotation}", start=whole[0])
    if default is not None:
        parameter = {
            "type": "AssignmentPattern",
            "left": parameter,
            "right": ident(source, default, start=parameter["range"][1]),
            "range": span(source, declared, whole[0]),
        }
    raw: Raw = {
        "type": "TSParameterProperty",
        "parameter": parameter,
        "readonly": readonly,
        "static": False,
        "override": False,
        "range": whole,
    }
    if accessibility is not None:
        raw["accessibility"] = accessibility
    return raw


def this_assign(
    source: str, name: str, value: str = "other", *, operator: str = "=", start: int = 0
) -> Raw:
    """``this.name = value;`` expression statement."""
    text = f"this.{name} {operator} {value};"
    whole = span(source, text, start)
    begin = whole[0]
    member_end = begin + len(f"this.{name}")
    return {
        "type": "ExpressionStatement",
        "expression": {
            "type": "AssignmentExpression",
            "operator": operator,
            "left": {
                "type": "MemberExpression",
                "object": {"type": "ThisExpression", "range": [begin, begin + 4]},
                "property": ident(source, name, start=begin),
                "computed": False,
                "optional": False,
                "range": [begin, member_end],
            },
            "right": ident(source, value, start=member_end),
            "range": [begin, whole[1] - 1],
        },
        "range": whole,
    }


def if_stmt(source: str, test: str, body: list[Raw], *, start: int = 0) -> Raw:
    """``if (test) { ...body }``."""
    head = span(source, f"if ({test})", start)
    block_start = source.index("{", head[1])
    block_end = source.index("}", block_start) + 1
    return {
        "type": "IfStatement",
        "test": ident(source, test, start=head[0]),
        "consequent": {"type": "BlockStatement", "body": body, "range": [block_start, block_end]},
        "alternate": None,
        "range": [head[0], block_end],
    }


def method(
    source: str,
    name: str,
    body: list[Raw] | None,
    *,
    params: list[Raw] | None = None,
    kind: str = "method",
    start: int = 0,
) -> Raw:
    """Method definition; ``body=None`` gives a bodiless (abstract) signature."""
    head = span(source, f"{name}(", start)
    end = source.index("}", head[1]) + 1 if body is not None else source.index(";", head[1]) + 1
    value: Raw = {
        "type": "FunctionExpression" if body is not None else "TSEmptyBodyFunctionExpression",
        "params": params or [],
        "body": (
            {"type": "BlockStatement", "body": body, "range": [source.index("{", head[1]), end]}
            if body is not None
            else None
        ),
        "range": [head[1] - 1, end],
    }
    return {
        "type": "MethodDefinition" if body is not None else "TSAbstractMethodDefinition",
        "kind": kind,
        "static": False,
        "computed": False,
        "key": ident(source, name, start=head[0]),
        "value": value,
        "range": [head[0], end],
    }


def constructor(source: str, params: list[Raw], body: list[Raw] | None = None) -> Raw:
    return method(source, "constructor", body or [], params=params, kind="constructor")


def field(
    source: str,
    name: str,
    *,
    accessibility: str | None = "private",
    readonly: bool = False,
    annotation: str = "Api",
) -> Raw:
    """``private name: Annotation;`` class field."""
    modifiers = " ".join(m for m in (accessibility, "readonly" if readonly else None) if m)
    declared = f"{name}: {annotation};"
    whole = span(source, f"{modifiers} {declared}" if modifiers else declared)
    raw: Raw = {
        "type": "PropertyDefinition",
        "key": ident(source, name, start=whole[0]),
        "value": None,
        "readonly": readonly,
        "static": False,
        "computed": False,
        "range": whole,
    }
    if accessibility is not None:
        raw["accessibility"] = accessibility
    return raw


def class_decl(source: str, name: str, members: list[Raw], *, start: int = 0) -> Raw:
    head = span(source, f"class {name}", start)
    body_start = source.index("{", head[1])
    return {
        "type": "ClassDeclaration",
        "id": ident(source, name, start=head[0]),
        "body": {"type": "ClassBody", "body": members, "range": [body_start, len(source)]},
        "superClass": None,
        "decorators": [],
        "range": [head[0], len(source)],
    }


def program(source: str, body: list[Raw]) -> Raw:
    return {"type": "Program", "sourceType": "module", "body": body, "range": [0, len(source)]}


def utf16_ranges(raw: Raw, source: str) -> Raw:
    """Copy of *raw* with ``range`` offsets counted in UTF-16 code units, as JS parsers do."""
    units = [0]
    for char in source:
        units.append(units[-1] + (2 if char > "\uffff" else 1))

    def convert(value: Any) -> Any:
        if isinstance(value, dict):
            return {
                k: [units[i] for i in v] if k == "range" else convert(v) for k, v in value.items()
            }
        if isinstance(value, list):
            return [convert(v) for v in value]
        return value

    return convert(raw)


def deep_expression(depth: int) -> Raw:
    """Left-nested ``a + a + ... + a`` chain, *depth* BinaryExpressions deep."""
    node: Raw = {"type": "Identifier", "name": "a", "range": [0, 1]}
    for _ in range(depth):
        node = {
            "type": "BinaryExpression",
            "operator": "+",
            "left": node,
            "right": {"type": "Identifier", "name": "a", "range": [0, 1]},
            "range": [0, 1],
        }
    return node


def run_lint(source: str, tree: Raw, **kwargs: Any) -> list[Diagnostic]:
    kwargs.setdefault("tracer", NULL_TRACER)
    return lint(tree, source, filename="test.ts", **kwargs)


def assert_diagnostics_for(diagnostics: list[Diagnostic], *names: str, source: str) -> None:
    """Assert one diagnostic per name, anchored at that parameter or field."""
    reported = [_anchored_name(d, source) for d in diagnostics]
    assert reported == list(names), f"Expected diagnostics for {list(names)}, got: {reported}"


def _anchored_name(d: Diagnostic, source: str) -> str:
    assert d.fix is not None
    match = _NAME.match(source, d.fix.offset)
    assert match is not None, f"Fix at {d.fix.offset} is not before an identifier"
    return match.group()


def assert_no_diagnostics(diagnostics: list[Diagnostic]) -> None:
    assert diagnostics == [], (
        f"Expected no diagnostics, got: {[(d.rule_id, d.message) for d in diagnostics]}"
    )
