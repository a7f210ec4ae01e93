from aria_audit.rules.icon_name import check_icon_names
from aria_audit.rules.nested_interactive import check_nested_interactive
from aria_audit.rules.prohibited_naming import check_prohibited_naming

__all__ = ["check_icon_names", "check_nested_interactive", "check_prohibited_naming"]
