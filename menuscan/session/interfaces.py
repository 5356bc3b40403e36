from __future__ import annotations

from typing import Any, Protocol

from ..catalog.data_store import CatalogProvider
from ..personalization.models import UserPreferenceVector


class Camera(Protocol):
    async def capture(self) -> Any: ...


class TextRecognizer(Protocol):
    async def recognize(self, image_ref: Any) -> list[str]: ...


class PreferenceProvider(Protocol):
    def get_preference_vector(self, user_id: str) -> UserPreferenceVector | None: ...


__all__ = ["Camera", "CatalogProvider", "PreferenceProvider", "TextRecognizer"]
