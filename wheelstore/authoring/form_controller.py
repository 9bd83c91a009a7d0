# wheelstore/authoring/form_controller.py
"""Product authoring form: draft editing, validation and submit orchestration.

The controller is an explicit state machine::

    EDITING -> SUBMITTING -> SUCCEEDED -> POST_CREATE_CHOICE -> EDITING | CLOSED
    SUBMITTING -> FAILED -> EDITING
    SUCCEEDED -> CLOSED  (edit mode)

Blocking collaborators (product gateway, image storage) are called through
`asyncio.to_thread` so one authoring session never blocks its event loop.
"""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from wheelstore.services.storage_service import DeletionResult

from .content_generator import generate_description, generate_title
from .draft import (
    OTHER,
    Category,
    ProductDraft,
    RimAttributes,
    attributes_to_wire,
    given,
    switch_category,
    visible_fields,
    with_field,
)
from .errors import (
    AuthoringError,
    DeletionPartialFailure,
    InvalidTransition,
    ProductSaveError,
)
from .events import ProductEvent, ProductEvents
from .gateway import HttpImageStorage, HttpProductGateway, client_from_settings
from .image_compressor import LocalImageFile
from .staged_images import (
    MAX_IMAGES,
    ImageRef,
    InMemoryPreviewAllocator,
    MoveDirection,
    PreviewAllocator,
    StagedImageStore,
)
from .upload_pipeline import ImageUploadPipeline

logger = logging.getLogger(__name__)


class FormState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    POST_CREATE_CHOICE = "post_create_choice"
    CLOSED = "closed"


_TRANSITIONS = {
    FormState.EDITING: {FormState.SUBMITTING, FormState.CLOSED},
    FormState.SUBMITTING: {FormState.SUCCEEDED, FormState.FAILED},
    FormState.FAILED: {FormState.EDITING},
    FormState.SUCCEEDED: {FormState.POST_CREATE_CHOICE, FormState.CLOSED},
    FormState.POST_CREATE_CHOICE: {FormState.EDITING, FormState.CLOSED},
    FormState.CLOSED: set(),
}

_FORM_FIELDS = {"price", "in_stock", "featured"}


@dataclass
class SubmitOutcome:
    state: FormState
    product: Optional[Dict[str, Any]] = None
    errors: List[str] = field(default_factory=list)
    error: Optional[AuthoringError] = None
    warning: Optional[DeletionPartialFailure] = None

    @property
    def ok(self) -> bool:
        return self.state is FormState.SUCCEEDED


class ProductFormController:
    def __init__(
        self,
        gateway,
        pipeline: ImageUploadPipeline,
        previews: PreviewAllocator,
        *,
        storage=None,
        events: Optional[ProductEvents] = None,
        product: Optional[Mapping[str, Any]] = None,
        max_images: int = MAX_IMAGES,
    ):
        self._gateway = gateway
        self._pipeline = pipeline
        self._previews = previews
        self._storage = storage
        self.events = events or ProductEvents()
        self.max_images = max_images
        self._state_listeners: List[Callable[[FormState], None]] = []
        self._state = FormState.EDITING
        self.errors: List[str] = []
        self.progress = 0.0
        self._load(product)

    @classmethod
    def from_settings(
        cls,
        settings,
        *,
        product: Optional[Mapping[str, Any]] = None,
        events: Optional[ProductEvents] = None,
        client=None,
    ) -> "ProductFormController":
        """Wire the controller against the backend HTTP API described by settings."""
        client = client or client_from_settings(settings)
        storage = HttpImageStorage(client)
        pipeline = ImageUploadPipeline(
            storage,
            staging_prefix=settings.STAGING_PREFIX,
            max_width=settings.IMAGE_MAX_WIDTH,
            quality=settings.IMAGE_QUALITY,
        )
        return cls(
            HttpProductGateway(client),
            pipeline,
            InMemoryPreviewAllocator(),
            storage=storage,
            events=events,
            product=product,
            max_images=settings.MAX_IMAGES_PER_PRODUCT,
        )

    def _load(self, product: Optional[Mapping[str, Any]]) -> None:
        if product is None:
            self.draft = ProductDraft()
            images: List[ImageRef] = []
        else:
            self.draft = ProductDraft.from_product(product)
            images = [ImageRef.from_wire(item) for item in product.get("images") or []]
        self.images = StagedImageStore(
            self._previews,
            storage=self._storage,
            editing=not self.draft.is_new,
            max_images=self.max_images,
            images=images,
        )
        self._submitted = False
        # Paths this session pushed to storage for a draft that has no product yet
        self._uploaded_paths: List[str] = []

    # -- state -------------------------------------------------------------

    @property
    def state(self) -> FormState:
        return self._state

    def on_state_change(self, listener: Callable[[FormState], None]) -> Callable[[], None]:
        self._state_listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._state_listeners:
                self._state_listeners.remove(listener)

        return unsubscribe

    def _transition(self, target: FormState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise InvalidTransition(self._state, target)
        self._state = target
        for listener in list(self._state_listeners):
            listener(target)

    def _require_editing(self) -> None:
        if self._state is not FormState.EDITING:
            raise InvalidTransition(self._state, FormState.EDITING)

    # -- fields ------------------------------------------------------------

    def set_category(self, category: Category) -> None:
        self._require_editing()
        self.draft.attributes = switch_category(self.draft.attributes, category)

    def set_field(self, name: str, value: Any) -> None:
        self._require_editing()
        if name == "category":
            self.set_category(value)
        elif name == "price":
            self.set_price(value)
        elif name in _FORM_FIELDS:
            setattr(self.draft, name, bool(value))
        else:
            self.draft.attributes = with_field(self.draft.attributes, name, value)

    def set_price(self, value: Any) -> None:
        self._require_editing()
        if value is None or value == "":
            self.draft.price = None
            return
        price = float(value)
        self.draft.price = price if math.isfinite(price) else None

    def set_in_stock(self, value: bool) -> None:
        self.set_field("in_stock", value)

    def set_featured(self, value: bool) -> None:
        self.set_field("featured", value)

    def visible_fields(self) -> List[str]:
        return visible_fields(self.draft.attributes)

    # -- generated content -------------------------------------------------

    @property
    def generated_title(self) -> str:
        return generate_title(self.draft)

    @property
    def generated_description(self) -> str:
        return generate_description(self.draft)

    @property
    def effective_title(self) -> str:
        if self.draft.title_override is not None:
            return self.draft.title_override
        return self.generated_title

    @property
    def effective_description(self) -> str:
        if self.draft.description_override is not None:
            return self.draft.description_override
        return self.generated_description

    def override_title(self, text: Optional[str] = None) -> None:
        """Opt into manual title editing, seeded from the generated title."""
        self.draft.title_override = self.generated_title if text is None else text

    def use_generated_title(self) -> None:
        self.draft.title_override = None

    def override_description(self, text: Optional[str] = None) -> None:
        self.draft.description_override = (
            self.generated_description if text is None else text
        )

    def use_generated_description(self) -> None:
        self.draft.description_override = None

    # -- images ------------------------------------------------------------

    def add_images(self, files: Sequence[LocalImageFile]) -> List[ImageRef]:
        self._require_editing()
        return self.images.add(files)

    async def remove_image(self, index: int) -> ImageRef:
        self._require_editing()
        ref = await self.images.remove(index)
        if ref.url in self._uploaded_paths and not ref.marked_for_deletion:
            self._uploaded_paths.remove(ref.url)
        return ref

    def move_image(self, index: int, direction: MoveDirection) -> None:
        self._require_editing()
        self.images.move(index, direction)

    # -- submit ------------------------------------------------------------

    def validate(self) -> List[str]:
        draft = self.draft
        attrs = draft.attributes
        messages = []
        is_rim = isinstance(attrs, RimAttributes)
        if is_rim and not given(attrs.vehicle_brand):
            messages.append("Vehicle brand is required for rim products")
        if is_rim and attrs.vehicle_brand == OTHER and not (attrs.custom_brand or "").strip():
            messages.append("Custom brand name is required when 'Other' is selected")
        if draft.price is None or not math.isfinite(draft.price) or draft.price <= 0:
            messages.append("Price must be greater than $0")
        if is_rim and not given(attrs.rim_size):
            messages.append("Rim size is required for rim products")
        return messages

    def build_payload(self) -> Dict[str, Any]:
        draft = self.draft
        payload = attributes_to_wire(draft.attributes)
        payload.update(
            {
                "title": self.effective_title,
                "description": self.effective_description,
                "price": draft.price,
                "category": draft.category.value,
                "in_stock": draft.in_stock,
                "featured": draft.featured,
                "images": [ref.to_wire() for ref in self.images.images],
                "images_to_delete": self.images.deletion_queue,
            }
        )
        return payload

    def _set_progress(self, value: float) -> None:
        self.progress = value

    async def submit(self) -> SubmitOutcome:
        self._require_editing()
        messages = self.validate()
        if messages:
            self.errors = messages
            return SubmitOutcome(FormState.EDITING, errors=messages)

        self.errors = []
        self.progress = 0.0
        is_new = self.draft.is_new
        self._transition(FormState.SUBMITTING)
        try:
            uploaded = await self._pipeline.upload_pending(
                self.images.pending_files, on_progress=self._set_progress
            )
            self.images.commit_uploads(uploaded)
            if is_new:
                self._uploaded_paths.extend(ref.url for ref in uploaded)

            payload = self.build_payload()
            if is_new:
                product = await asyncio.to_thread(self._gateway.create, payload)
            else:
                product = await asyncio.to_thread(
                    self._gateway.update, self.draft.product_id, payload
                )
        except AuthoringError as exc:
            return self._fail(exc)
        except Exception as exc:
            logger.exception("Unexpected error while saving product")
            error = ProductSaveError(f"Unexpected error while saving: {exc}")
            error.__cause__ = exc
            return self._fail(error)

        self.images.clear_deletion_queue()
        self._submitted = True
        warning = self._deletion_warning(product)
        self._transition(FormState.SUCCEEDED)
        self.events.publish(
            ProductEvent("created" if is_new else "updated", product.get("id"))
        )
        self._transition(
            FormState.POST_CREATE_CHOICE if is_new else FormState.CLOSED
        )
        return SubmitOutcome(FormState.SUCCEEDED, product=product, warning=warning)

    def _fail(self, exc: AuthoringError) -> SubmitOutcome:
        logger.error("Product save failed: %s", exc)
        self.errors = [str(exc)]
        self._transition(FormState.FAILED)
        self._transition(FormState.EDITING)
        return SubmitOutcome(FormState.FAILED, errors=list(self.errors), error=exc)

    def _deletion_warning(self, product: Mapping[str, Any]) -> Optional[DeletionPartialFailure]:
        failures = [
            DeletionResult(**item)
            for item in product.get("image_deletions") or []
            if not item.get("success")
        ]
        if not failures:
            return None
        warning = DeletionPartialFailure(failures)
        logger.warning("%s", warning)
        return warning

    # -- after submit ------------------------------------------------------

    def create_another(self) -> None:
        self.images.release_previews()
        self._load(None)
        self.errors = []
        self.progress = 0.0
        self._transition(FormState.EDITING)

    def go_to_list(self) -> None:
        self.images.release_previews()
        self._transition(FormState.CLOSED)

    async def discard(self) -> None:
        """Close without saving, cleaning up what a never-saved draft uploaded."""
        if self._state is FormState.CLOSED:
            return
        self.images.release_previews()
        if self.draft.is_new and not self._submitted and self._uploaded_paths:
            try:
                await self._pipeline.delete_marked(self._uploaded_paths)
            except AuthoringError as exc:
                logger.warning("Could not clean up staged images: %s", exc)
            self._uploaded_paths = []
        self._transition(FormState.CLOSED)
