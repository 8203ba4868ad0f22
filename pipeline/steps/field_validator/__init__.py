"""
Field Validator Step

Validates names, emails, subject and the selectable options of a compose
form and builds the typed ComposeRequest.
"""

from .main import FieldValidatorStep
from .models import FieldOptions
from .utils import validate_fields

__all__ = ["FieldValidatorStep", "FieldOptions", "validate_fields"]
