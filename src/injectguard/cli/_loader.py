import json
from dataclasses import dataclass
from pathlib import Path

from injectguard.tree.estree import TreeError, decode
from injectguard.tree.nodes import Node

TREE_SUFFIX = ".json"


class LoadError(Exception):
    """Raised when an input tree or its source cannot be loaded."""


@dataclass(frozen=True)
class LoadedFile:
    source_path: Path
    tree_path: Path
    source: str
    tree: Node


def resolve_paths(path: str | Path) -> tuple[Path, Path]:
    """Return ``(source_path, tree_path)`` for a CLI argument.

    ``foo.ts.json`` is the ESTree dump of ``foo.ts``; either name may be
    given.
    """
    p = Path(path)
    if p.suffix == TREE_SUFFIX:
        return p.with_suffix(""), p
    return p, p.with_name(p.name + TREE_SUFFIX)


def load_file(path: str | Path) -> LoadedFile:
    """Load a source file together with its ESTree JSON dump."""
    source_path, tree_path = resolve_paths(path)

    try:
        raw = json.loads(tree_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        msg = f"Syntax tree {str(tree_path)!r} not found"
        raise LoadError(msg) from None
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {str(tree_path)!r}: {exc}"
        raise LoadError(msg) from exc
    except RecursionError:
        msg = f"Syntax tree {str(tree_path)!r} is nested too deeply to parse"
        raise LoadError(msg) from None

    try:
        tree = decode(raw)
    except TreeError as exc:
        msg = f"{str(tree_path)!r} is not an ESTree document: {exc}"
        raise LoadError(msg) from exc

    try:
        # Keep line endings as-is: tree offsets count every character.
        with source_path.open(encoding="utf-8", newline="") as f:
            source = f.read()
    except FileNotFoundError:
        msg = f"Source file {str(source_path)!r} not found"
        raise LoadError(msg) from None

    return LoadedFile(source_path=source_path, tree_path=tree_path, source=source, tree=tree)
