from injectguard.checks.base import BaseCheck, CheckRegistry, create_default_registry
from injectguard.checks.readonly_services import ReadonlyServicesCheck

__all__ = ["BaseCheck", "CheckRegistry", "ReadonlyServicesCheck", "create_default_registry"]
