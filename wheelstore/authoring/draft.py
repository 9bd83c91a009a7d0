# wheelstore/authoring/draft.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict

NOT_SPECIFIED = "not_specified"
OTHER = "Other"
NO_TYRES = "No tyres"
NO_CENTER_BORE = "None"
DEFAULT_QUANTITY = "4"


class Category(str, Enum):
    RIM = "rim"
    TYRE = "tyre"


def given(value: Optional[str]) -> bool:
    """True when a select/text value carries real input."""
    return bool(value) and value != NOT_SPECIFIED


class RimAttributes(BaseModel):
    """Fields of a rim listing. Tyre fields describe tyres sold with the rims."""

    model_config = ConfigDict(extra="forbid")

    category: Literal["rim"] = "rim"
    vehicle_year: Optional[str] = None
    vehicle_brand: Optional[str] = None
    custom_brand: Optional[str] = None
    vehicle_model: Optional[str] = None
    rim_size: Optional[str] = None
    rim_quantity: Optional[str] = DEFAULT_QUANTITY
    stud_pattern: Optional[str] = None
    center_bore: Optional[str] = None
    custom_center_bore: Optional[str] = None
    # Rear width when the set is staggered
    rim_width: Optional[str] = None
    front_rim_width: Optional[str] = None
    is_staggered: bool = False
    front_offset: Optional[str] = None
    rear_offset: Optional[str] = None
    paint_condition: Optional[str] = None
    tyre_condition: Optional[str] = NO_TYRES
    tyre_size: Optional[str] = None
    front_tyre_size: Optional[str] = None
    rear_tyre_size: Optional[str] = None
    has_staggered_tyres: bool = False

    @property
    def brand(self) -> str:
        brand = self.vehicle_brand
        if brand == OTHER and self.custom_brand:
            brand = self.custom_brand
        return brand if given(brand) else ""

    @property
    def has_tyres(self) -> bool:
        return given(self.tyre_condition) and self.tyre_condition != NO_TYRES

    @property
    def effective_center_bore(self) -> str:
        if self.center_bore == OTHER:
            return self.custom_center_bore or ""
        if given(self.center_bore) and self.center_bore != NO_CENTER_BORE:
            return self.center_bore
        return ""


class TyreAttributes(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: Literal["tyre"] = "tyre"
    tyre_quantity: Optional[str] = DEFAULT_QUANTITY
    tyre_size: Optional[str] = None
    is_staggered_tyres: bool = False
    front_tyre_size: Optional[str] = None
    rear_tyre_size: Optional[str] = None
    tyre_condition: Optional[str] = "New"


Attributes = Union[RimAttributes, TyreAttributes]

_ATTRIBUTE_TYPES = {Category.RIM: RimAttributes, Category.TYRE: TyreAttributes}
_TYRE_FIELDS = ("tyre_size", "front_tyre_size", "rear_tyre_size")
_BOOL_FIELDS = {"is_staggered", "has_staggered_tyres", "is_staggered_tyres"}


def attribute_fields(category: Category) -> List[str]:
    cls = _ATTRIBUTE_TYPES[Category(category)]
    return [name for name in cls.model_fields if name != "category"]


def _clean(name: str, value: Any) -> Any:
    if name in _BOOL_FIELDS:
        return bool(value)
    if value is None or value == "":
        return None
    return str(value)


def attributes_from_wire(data: Mapping[str, Any]) -> Attributes:
    """Build typed attributes from a flat product record.

    Keys that do not belong to the record's category are ignored.
    """
    category = Category(data.get("category") or Category.RIM.value)
    cls = _ATTRIBUTE_TYPES[category]
    values = {
        name: _clean(name, data[name])
        for name in attribute_fields(category)
        if name in data
    }
    return cls(**values)


def attributes_to_wire(attributes: Attributes) -> Dict[str, Any]:
    return attributes.model_dump()


def with_field(attributes: Attributes, name: str, value: Any) -> Attributes:
    """Return a copy with one field changed, applying dependent resets.

    - changing the vehicle brand clears the model
    - changing the rim size clears every tyre size
    """
    if name == "category" or name not in type(attributes).model_fields:
        raise ValueError(
            f"Field '{name}' does not apply to {attributes.category} products"
        )
    cleaned = _clean(name, value)
    update: Dict[str, Any] = {name: cleaned}
    previous = getattr(attributes, name)
    if name == "vehicle_brand" and cleaned != previous:
        update["vehicle_model"] = None
    if name == "rim_size" and cleaned != previous:
        update.update({tyre_field: None for tyre_field in _TYRE_FIELDS})
    return attributes.model_copy(update=update)


def switch_category(attributes: Attributes, category: Category) -> Attributes:
    """Rebuild attributes for another category, keeping the shared tyre fields."""
    category = Category(category)
    if attributes.category == category.value:
        return attributes
    shared = {name: getattr(attributes, name) for name in _TYRE_FIELDS}
    if category is Category.TYRE:
        condition = attributes.tyre_condition
        if not given(condition) or condition == NO_TYRES:
            condition = "New"
        return TyreAttributes(
            is_staggered_tyres=attributes.has_staggered_tyres,
            tyre_condition=condition,
            **shared,
        )
    return RimAttributes(
        has_staggered_tyres=attributes.is_staggered_tyres,
        tyre_condition=attributes.tyre_condition,
        **shared,
    )


def visible_fields(attributes: Attributes) -> List[str]:
    """Fields the authoring form shows for the current attribute values."""
    fields = ["category", "price", "in_stock", "featured"]
    if isinstance(attributes, TyreAttributes):
        if attributes.is_staggered_tyres:
            fields += ["is_staggered_tyres", "front_tyre_size", "rear_tyre_size"]
        else:
            fields += ["is_staggered_tyres", "tyre_size"]
        return fields + ["tyre_condition", "tyre_quantity"]

    fields += ["vehicle_year", "vehicle_brand"]
    if attributes.vehicle_brand == OTHER:
        fields.append("custom_brand")
    if given(attributes.vehicle_brand):
        fields.append("vehicle_model")
    fields += ["rim_size", "tyre_condition", "is_staggered", "has_staggered_tyres"]
    fields += ["rim_quantity", "front_offset", "rear_offset"]
    if attributes.is_staggered:
        fields += ["front_rim_width", "rim_width"]
    else:
        fields.append("rim_width")
    fields += ["stud_pattern", "center_bore"]
    if attributes.center_bore == OTHER:
        fields.append("custom_center_bore")
    fields.append("paint_condition")
    if attributes.has_tyres:
        if attributes.has_staggered_tyres:
            fields += ["front_tyre_size", "rear_tyre_size"]
        else:
            fields.append("tyre_size")
    return fields


@dataclass
class ProductDraft:
    """In-progress, unsaved state of a product being authored or edited.

    `title_override`/`description_override` are None while the generated text
    is in use; setting one opts that field into manual editing.
    """

    attributes: Attributes = field(default_factory=RimAttributes)
    price: Optional[float] = None
    in_stock: bool = True
    featured: bool = False
    title_override: Optional[str] = None
    description_override: Optional[str] = None
    product_id: Optional[int] = None

    @property
    def category(self) -> Category:
        return Category(self.attributes.category)

    @property
    def is_new(self) -> bool:
        return self.product_id is None

    @classmethod
    def from_product(cls, product: Mapping[str, Any]) -> "ProductDraft":
        """Hydrate a draft from a persisted product record (edit mode).

        Existing title and description start out as manual overrides so that
        saving without changes keeps them.
        """
        return cls(
            attributes=attributes_from_wire(product),
            price=product.get("price"),
            in_stock=bool(product.get("in_stock", True)),
            featured=bool(product.get("featured", False)),
            title_override=product.get("title") or None,
            description_override=product.get("description") or None,
            product_id=product.get("id"),
        )
