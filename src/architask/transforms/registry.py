"""Lookup from intent key to the transform that handles it."""

from __future__ import annotations

from types import MappingProxyType

from architask.core.intents import Intent
from architask.transforms.base import Transform
from architask.transforms.dead_code import RemoveDeadCodeTransform
from architask.transforms.extract import ExtractFunctionTransform
from architask.transforms.guard_clause import GuardClauseTransform
from architask.transforms.imports import ImportTransform, RemoveUnusedImportTransform
from architask.transforms.wrappers import BindingTransform, StateWrapperTransform


def builtin_transforms() -> list[Transform]:
    return [
        StateWrapperTransform(),
        BindingTransform(),
        ImportTransform(),
        GuardClauseTransform(),
        ExtractFunctionTransform(),
        RemoveUnusedImportTransform(),
        RemoveDeadCodeTransform(),
    ]


class TransformRegistry:
    """Fixed at construction; safe to share between threads.

    When two transforms claim the same intent key, the one listed first
    keeps it.
    """

    def __init__(self, transforms: list[Transform]):
        self._transforms = tuple(transforms)
        by_key: dict[str, Transform] = {}
        for transform in self._transforms:
            for key in transform.supported_intents:
                by_key.setdefault(key, transform)
        self._by_key = MappingProxyType(by_key)

    @classmethod
    def default(cls) -> TransformRegistry:
        return cls(builtin_transforms())

    def transform_for(self, intent: Intent) -> Transform | None:
        return self._by_key.get(intent.key)

    @property
    def transforms(self) -> tuple[Transform, ...]:
        return self._transforms

    @property
    def available_intents(self) -> list[str]:
        return sorted(self._by_key)
