"""Assessment output validation.

The gateway only guarantees that the model returned *a* JSON object. This
module checks that object against the result models (JSON Schema generated
from the pydantic classes) and against the rubric: exact area names in rubric
order, exact cardinality per category, and rating values from the scales.

Graceful degradation: returns a ValidationResult with an errors list; the
engines decide whether a violation is fatal (see Settings.strict_output_validation).

Hedging language in comments is reported as a warning, never an error.

Usage:
from esg_ddq.services.validator import validate_ddq_output
result = validate_ddq_output(data_dict)
if not result.valid: ...
"""
from __future__ import annotations
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List

from jsonschema import Draft202012Validator

from esg_ddq.models import DDQResult, IMResult
from esg_ddq.rubric import (
    CATEGORY_AREAS,
    FORBIDDEN_PHRASES,
    LEVEL_VALUES,
    MATERIALITY_VALUES,
    RISK_CATEGORY_VALUES,
)


@dataclass
class ValidationError:
    code: str
    message: str
    path: List[Any] = field(default_factory=list)

    def __str__(self) -> str:
        location = "/".join(str(p) for p in self.path)
        return f"{location}: {self.message}" if location else self.message


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    schema_applied: bool = False

    def error_messages(self) -> List[str]:
        return [str(e) for e in self.errors]


@lru_cache(maxsize=None)
def _validator_for(model_name: str) -> Draft202012Validator:
    model = {"DDQResult": DDQResult, "IMResult": IMResult}[model_name]
    schema = model.model_json_schema(by_alias=True)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def _schema_errors(model_name: str, data: Any) -> List[ValidationError]:
    validator = _validator_for(model_name)
    return [
        ValidationError(code="json_schema_violation", message=err.message, path=list(err.absolute_path))
        for err in sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    ]


def find_hedging_phrases(text: str) -> List[str]:
    return [
        phrase for phrase in FORBIDDEN_PHRASES
        if re.search(rf"\b{re.escape(phrase)}\b", text or "", flags=re.IGNORECASE)
    ]


def _check_category(category: str, items: Any, errors: List[ValidationError], warnings: List[str]) -> None:
    expected = CATEGORY_AREAS[category]
    if not isinstance(items, list):
        # Already reported by the schema pass
        return

    if len(items) != len(expected):
        errors.append(ValidationError(
            code="area_count_mismatch",
            message=f"expected {len(expected)} areas, got {len(items)}",
            path=[category],
        ))

    actual = [item.get("area") if isinstance(item, dict) else None for item in items]
    if actual != expected:
        missing = [a for a in expected if a not in actual]
        unexpected = [a for a in actual if a not in expected]
        if missing or unexpected:
            errors.append(ValidationError(
                code="area_set_mismatch",
                message=f"missing areas {missing}, unexpected areas {unexpected}",
                path=[category],
            ))
        else:
            errors.append(ValidationError(
                code="area_order_mismatch",
                message=f"areas out of rubric order: {actual}",
                path=[category],
            ))

    for index, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        if item.get("materiality") not in MATERIALITY_VALUES:
            errors.append(ValidationError(
                code="invalid_materiality",
                message=f"{item.get('materiality')!r} is not one of {MATERIALITY_VALUES}",
                path=[category, index, "materiality"],
            ))
        if item.get("level") not in LEVEL_VALUES:
            errors.append(ValidationError(
                code="invalid_level",
                message=f"{item.get('level')!r} is not one of {LEVEL_VALUES}",
                path=[category, index, "level"],
            ))
        hedges = find_hedging_phrases(item.get("comments") or "")
        if hedges:
            warnings.append(f"{category}/{index} ({item.get('area')}): comments use hedging language {hedges}")


def validate_ddq_output(data: Dict[str, Any]) -> ValidationResult:
    """Schema plus rubric checks for a raw DDQ payload."""
    if not isinstance(data, dict):
        return ValidationResult(
            valid=False,
            errors=[ValidationError(code="not_an_object", message="DDQ output must be a JSON object")],
        )

    errors = _schema_errors("DDQResult", data)
    warnings: List[str] = []
    for category in CATEGORY_AREAS:
        _check_category(category, data.get(category), errors, warnings)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings, schema_applied=True)


def validate_im_output(data: Dict[str, Any]) -> ValidationResult:
    """Schema plus risk-category check for a raw Investment Memo payload."""
    if not isinstance(data, dict):
        return ValidationResult(
            valid=False,
            errors=[ValidationError(code="not_an_object", message="IM output must be a JSON object")],
        )

    errors = _schema_errors("IMResult", data)
    warnings: List[str] = []
    if "riskCategory" in data and data["riskCategory"] not in RISK_CATEGORY_VALUES:
        errors.append(ValidationError(
            code="invalid_risk_category",
            message=f"{data['riskCategory']!r} is not one of {RISK_CATEGORY_VALUES}",
            path=["riskCategory"],
        ))

    for key in ("currentRisks", "longTermRisks", "gaps", "actionPlan"):
        for index, entry in enumerate(data.get(key) or []):
            hedges = find_hedging_phrases(entry) if isinstance(entry, str) else []
            if hedges:
                warnings.append(f"{key}/{index}: uses hedging language {hedges}")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings, schema_applied=True)


__all__ = ["validate_ddq_output", "validate_im_output", "find_hedging_phrases", "ValidationResult", "ValidationError"]
