# wheelstore/authoring/content_generator.py
"""Listing title and description generation for the product authoring form.

Both generators are pure functions of the draft's attributes. Each optional
clause carries its own leading/trailing separators so that omitted values never
leave double spaces or dangling punctuation behind.
"""

from __future__ import annotations

import re

from .draft import (
    DEFAULT_QUANTITY,
    ProductDraft,
    RimAttributes,
    TyreAttributes,
    given,
)

CLOSING_SENTENCE = (
    "Please contact us for more details or to check fitment for your vehicle."
)
NO_TYRES_SENTENCE = (
    "These rims do not include tyres. "
    "Fitting of used or new tyres available for extra, please contact us."
)

_SENTENCE_START = re.compile(r"^\s*\w|[.!?]\s+\w")


def capitalize_sentences(text: str) -> str:
    """Upper-case the first letter of the text and of every sentence.

    A sentence starts after `.`, `!` or `?` followed by whitespace. Nothing
    else is re-cased.
    """
    return _SENTENCE_START.sub(lambda match: match.group(0).upper(), text)


def _quantity(value) -> str:
    return value if given(value) else DEFAULT_QUANTITY


def generate_title(draft: ProductDraft) -> str:
    attrs = draft.attributes
    if isinstance(attrs, TyreAttributes):
        return _tyre_title(attrs)
    return _rim_title(attrs)


def generate_description(draft: ProductDraft) -> str:
    attrs = draft.attributes
    if isinstance(attrs, TyreAttributes):
        return capitalize_sentences(_tyre_description(attrs))
    return capitalize_sentences(_rim_description(attrs))


def _tyre_title(attrs: TyreAttributes) -> str:
    title = f"{_quantity(attrs.tyre_quantity)}x"
    if given(attrs.tyre_size):
        title += f" {attrs.tyre_size}"
    title += " Tyres"
    if given(attrs.tyre_condition):
        title += f" - {attrs.tyre_condition} Condition"
    return title


def _tyre_description(attrs: TyreAttributes) -> str:
    condition = attrs.tyre_condition if given(attrs.tyre_condition) else "good"
    text = f"{_quantity(attrs.tyre_quantity)}x"
    if given(attrs.tyre_size):
        text += f" {attrs.tyre_size}"
    text += f" Tyres in {condition} condition. "
    return text + CLOSING_SENTENCE


def _rim_title(attrs: RimAttributes) -> str:
    # Rim size is mandatory upstream; without it there is nothing to say.
    if not given(attrs.rim_size):
        return ""

    parts = [f'{_quantity(attrs.rim_quantity)}x {attrs.rim_size}"']
    if given(attrs.stud_pattern):
        parts.append(attrs.stud_pattern)
    if attrs.brand:
        parts.append(attrs.brand)
        if given(attrs.vehicle_model):
            parts.append(attrs.vehicle_model)
    parts.append("Staggered Rims" if attrs.is_staggered else "Rims")

    title = " ".join(parts)
    if attrs.has_tyres:
        title += " and Tyres"
    return title


def _fitment_clause(attrs: RimAttributes) -> str:
    brand = attrs.brand
    if brand and given(attrs.vehicle_model):
        year = f" {attrs.vehicle_year}" if given(attrs.vehicle_year) else ""
        return f" for{year} {brand} {attrs.vehicle_model}. "
    if brand:
        return f" for {brand}. "
    return ". "


def _offset(value) -> str:
    return f" (offset: {value}mm)" if given(value) else ""


def _staggered_clause(attrs: RimAttributes) -> str:
    rear_width = attrs.rim_width if given(attrs.rim_width) else ""
    front_width = attrs.front_rim_width if given(attrs.front_rim_width) else ""
    if not (rear_width and front_width):
        return ""

    with_tyres = attrs.has_tyres and attrs.has_staggered_tyres
    rear_tyre = attrs.rear_tyre_size or attrs.tyre_size
    front_tyre = attrs.front_tyre_size or attrs.tyre_size

    text = f"This is a staggered set with {rear_width} width rear rims"
    text += _offset(attrs.rear_offset)
    if with_tyres and given(rear_tyre):
        text += f" with {rear_tyre} tyres"
    text += f" and {front_width} width front rims"
    text += _offset(attrs.front_offset)
    if with_tyres and given(front_tyre):
        text += f" with {front_tyre} tyres"
    return text + ". "


def _square_clause(attrs: RimAttributes) -> str:
    text = ""
    if given(attrs.rim_width):
        text += f"Rim width: {attrs.rim_width}. "
    if given(attrs.front_offset):
        text += f"Front offset: {attrs.front_offset}mm. "
    if given(attrs.rear_offset):
        text += f"Rear offset: {attrs.rear_offset}mm. "
    return text


def _tyre_clause(attrs: RimAttributes) -> str:
    if not attrs.has_tyres:
        return NO_TYRES_SENTENCE + " "
    condition = attrs.tyre_condition
    if attrs.has_staggered_tyres:
        if given(attrs.front_tyre_size) and given(attrs.rear_tyre_size):
            return (
                f"Includes staggered tyres with {attrs.front_tyre_size} (front) "
                f"and {attrs.rear_tyre_size} (rear) in {condition} condition. "
            )
        return (
            "Includes staggered tyres setup with different sizes for front "
            f"and rear in {condition} condition. "
        )
    if given(attrs.tyre_size) and not attrs.is_staggered:
        return f"Includes {attrs.tyre_size} tyres in {condition} condition. "
    return ""


def _rim_description(attrs: RimAttributes) -> str:
    text = f"{_quantity(attrs.rim_quantity)}x"
    if given(attrs.rim_size):
        text += f' {attrs.rim_size}"'
    if given(attrs.stud_pattern):
        text += f" {attrs.stud_pattern}"
    if attrs.is_staggered:
        text += " staggered"
    text += " rims"
    text += _fitment_clause(attrs)

    if attrs.is_staggered:
        text += _staggered_clause(attrs)
    else:
        text += _square_clause(attrs)

    center_bore = attrs.effective_center_bore
    if center_bore:
        text += f"Center bore: {center_bore}mm. "
    if given(attrs.paint_condition):
        text += f"Paint condition: {attrs.paint_condition}. "

    text += _tyre_clause(attrs)
    return text + CLOSING_SENTENCE
