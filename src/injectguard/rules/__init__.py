from injectguard.core.rule import Rule
from injectguard.rules import classes


def _collect_rules(*modules: object) -> dict[str, Rule]:
    """Collect all Rule instances from the given modules."""
    rules: dict[str, Rule] = {}
    for module in modules:
        for name in dir(module):
            obj = getattr(module, name)
            if isinstance(obj, Rule):
                if obj.id in rules:
                    msg = f"Duplicate rule ID: {obj.id}"
                    raise ValueError(msg)
                rules[obj.id] = obj
    return rules


RULES: dict[str, Rule] = _collect_rules(classes)
ALL_RULES: list[Rule] = sorted(RULES.values(), key=lambda r: r.id)

__all__ = ["ALL_RULES", "RULES"]
