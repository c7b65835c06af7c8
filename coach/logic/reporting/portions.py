"""Portion scaling for foods and recipes.

Food values are stored per 100 g (``calories_per_100g``...) and recipes per
serving. Both the manual quantity field and the preset quantity buttons go
through the same pure function.
"""
from typing import Any, Dict, Mapping

from coach.domain.errors import ValidationError
from coach.utilities.constants import BASE_QUANTITY_GRAMS, MACRO_FIELDS, MACRO_PRECISION

_SUFFIXES = ('_per_100g', '_per_serving')


def _base_value(base_values: Mapping[str, Any], field: str) -> float:
    candidates = [field] + [field + s for s in _SUFFIXES]
    if field == 'fats':
        candidates += ['fat'] + ['fat' + s for s in _SUFFIXES]
    for key in candidates:
        value = base_values.get(key)
        if value is not None:
            try:
                return float(value)
            except (TypeError, ValueError):
                return 0.0
    return 0.0


def scale_portion(base_values: Mapping[str, Any], selected_quantity: float,
                  base_quantity: float = BASE_QUANTITY_GRAMS) -> Dict[str, Any]:
    """Scale base nutrition values to the selected quantity.

    value = base * selected_quantity / base_quantity; calories are rounded to
    an integer and macros to one decimal.
    """
    if selected_quantity is None or selected_quantity < 0:
        raise ValidationError("Quantity cannot be negative")
    if not base_quantity or base_quantity <= 0:
        raise ValidationError("Base quantity must be positive")
    factor = selected_quantity / base_quantity
    scaled = {'calories': int(round(_base_value(base_values, 'calories') * factor))}
    for field in MACRO_FIELDS:
        scaled[field] = round(_base_value(base_values, field) * factor, MACRO_PRECISION)
    scaled['quantity'] = selected_quantity
    return scaled


def scale_servings(per_serving: Mapping[str, Any], servings: float) -> Dict[str, Any]:
    """Recipe variant: values are given per serving."""
    scaled = scale_portion(per_serving, servings, base_quantity=1)
    scaled['servings'] = scaled.pop('quantity')
    return scaled


__all__ = ['scale_portion', 'scale_servings']
