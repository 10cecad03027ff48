"""
Payload validation

Each entity has a table of rules. A rule names a (possibly dotted) field, a
predicate the value must satisfy, the message reported when it does not, and
whether the field is required. ``validate_*`` functions return a list of
``FieldError``; an empty list means the payload is acceptable.

A value counts as missing only when the key is absent or null, so ``0`` and
``False`` satisfy a required field. Dotted fields are only checked when their
parent is an object.
"""

from typing import Any, Callable, Dict, List, NamedTuple

from email_validator import EmailNotValidError, validate_email
from pydantic import HttpUrl, TypeAdapter, ValidationError

from database import is_valid_id
from schemas import FieldError

SUPPLIER_TYPES = ("manufacturer", "wholesaler", "distributor", "retailer")

_MISSING = object()
_url_adapter = TypeAdapter(HttpUrl)


class Rule(NamedTuple):
    field: str
    predicate: Callable[[Any], bool]
    message: str
    required: bool = False


# Predicates

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def min_length(n: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, str) and len(value) >= n


def non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def non_negative_number(value: Any) -> bool:
    return is_number(value) and value >= 0


def non_negative_integer(value: Any) -> bool:
    if not is_number(value):
        return False
    if isinstance(value, float) and not value.is_integer():
        return False
    return value >= 0


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_object(value: Any) -> bool:
    return isinstance(value, dict)


def string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, str) for v in value)


def is_email(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        _url_adapter.validate_python(value)
    except ValidationError:
        return False
    return True


def one_of(*choices: str) -> Callable[[Any], bool]:
    return lambda value: value in choices


def object_id(value: Any) -> bool:
    return is_valid_id(value)


# Rule tables

PRODUCT_RULES: List[Rule] = [
    Rule("name", min_length(2), "Name must be a string with at least 2 characters", required=True),
    Rule("description", min_length(10), "Description must be a string with at least 10 characters", required=True),
    Rule("price", non_negative_number, "Price must be a non-negative number", required=True),
    Rule("discountPercentage", non_negative_number, "Discount percentage must be a non-negative number"),
    Rule("stock", non_negative_integer, "Stock must be a non-negative integer", required=True),
    Rule("category", non_empty_string, "Category must be a non-empty string", required=True),
    Rule("tags", string_list, "Tags must be an array of strings"),
    Rule("dimensions", is_object, "Dimensions must be an object"),
    Rule("dimensions.height", is_number, "dimensions.height must be a number"),
    Rule("dimensions.width", is_number, "dimensions.width must be a number"),
    Rule("dimensions.depth", is_number, "dimensions.depth must be a number"),
    Rule("dimensions.unit", is_string, "dimensions.unit must be a string"),
    Rule("weight", is_number, "Weight must be a number"),
    Rule("supplierId", object_id, "Invalid supplier ID format"),
    Rule("isAvailable", is_boolean, "isAvailable must be a boolean", required=True),
    Rule("imageUrl", is_url, "Image URL must be a valid URL"),
]

SUPPLIER_RULES: List[Rule] = [
    Rule("name", min_length(2), "Name must be a string with at least 2 characters", required=True),
    Rule("contactName", non_empty_string, "Contact name must be a non-empty string", required=True),
    Rule("email", is_email, "Email must be a valid email address", required=True),
    Rule("phone", non_empty_string, "Phone must be a non-empty string", required=True),
    Rule("address", is_object, "Address must be an object", required=True),
    Rule("address.street", non_empty_string, "address.street must be a non-empty string", required=True),
    Rule("address.city", non_empty_string, "address.city must be a non-empty string", required=True),
    Rule("address.state", non_empty_string, "address.state must be a non-empty string", required=True),
    Rule("address.zipCode", non_empty_string, "address.zipCode must be a non-empty string", required=True),
    Rule("country", non_empty_string, "Country must be a non-empty string", required=True),
    Rule(
        "supplierType",
        one_of(*SUPPLIER_TYPES),
        "Supplier type must be one of: " + ", ".join(SUPPLIER_TYPES),
        required=True,
    ),
    Rule("paymentTerms", non_empty_string, "Payment terms must be a non-empty string", required=True),
    Rule("isActive", is_boolean, "isActive must be a boolean", required=True),
]

USER_RULES: List[Rule] = [
    Rule("name", min_length(2), "Name must be a string with at least 2 characters", required=True),
    Rule("email", is_email, "Email must be a valid email address", required=True),
    Rule("password", min_length(8), "Password must be at least 8 characters"),
    Rule("avatar", is_url, "Avatar must be a valid URL"),
]


def _lookup(payload: Dict[str, Any], field: str):
    """Resolve a dotted field. Returns (parent_ok, value)."""
    *parents, leaf = field.split(".")
    node: Any = payload
    for part in parents:
        node = node.get(part) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            return False, _MISSING
    value = node.get(leaf, _MISSING)
    if value is None:
        value = _MISSING
    return True, value


def check(payload: Any, rules: List[Rule], partial: bool = False) -> List[FieldError]:
    if not isinstance(payload, dict):
        return [FieldError(field="body", message="Request body must be a JSON object")]

    errors: List[FieldError] = []
    for rule in rules:
        parent_ok, value = _lookup(payload, rule.field)
        if not parent_ok:
            continue
        if value is _MISSING:
            if rule.required and not partial:
                errors.append(FieldError(field=rule.field, message=f"{rule.field} is required"))
            continue
        if not rule.predicate(value):
            errors.append(FieldError(field=rule.field, message=rule.message))
    return errors


def validate_product(payload: Any, partial: bool = False) -> List[FieldError]:
    return check(payload, PRODUCT_RULES, partial)


def validate_supplier(payload: Any, partial: bool = False) -> List[FieldError]:
    return check(payload, SUPPLIER_RULES, partial)


def validate_user(payload: Any, partial: bool = False) -> List[FieldError]:
    errors = check(payload, USER_RULES, partial)
    if partial or not isinstance(payload, dict):
        return errors
    # OAuth-sourced accounts carry a githubId and never get a password
    if not payload.get("githubId") and payload.get("password") is None:
        errors.append(FieldError(field="password", message="password is required"))
    return errors
