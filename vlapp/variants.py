"""Build variants and the output file names of release variants.

A release variant's artifacts are named
``{flavor}_{versionNameNoDots}_{versionCode}.apk``, e.g. ``free_231_42.apk``
for flavor ``free``, version ``2.3.1`` and version code ``42``. Other build
types keep the host's default name.

The host adds its variants to a ``VariantCollection``; ``all`` hands every
variant, present and future, to a listener exactly once.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TypeAlias

__all__ = [
    "RELEASE_BUILD_TYPE",
    "BuildVariant",
    "VariantCollection",
    "VariantListener",
    "VariantOutput",
    "apply_output_names",
    "name_outputs",
    "normalize_version_name",
    "output_file_name",
]

RELEASE_BUILD_TYPE = "release"


@dataclass(slots=True)
class VariantOutput:
    """One artifact of a variant; ``output_file_name`` is assigned by naming."""

    output_file_name: str | None = None


def _single_output() -> list[VariantOutput]:
    return [VariantOutput()]


@dataclass(slots=True)
class BuildVariant:
    flavor_name: str
    version_name: str
    version_code: int
    build_type: str
    outputs: list[VariantOutput] = field(default_factory=_single_output)

    @property
    def is_release(self) -> bool:
        return self.build_type == RELEASE_BUILD_TYPE


VariantListener: TypeAlias = Callable[[BuildVariant], None]


class VariantCollection:
    """The host's build variants, in the order they were added."""

    def __init__(self, variants: Iterable[BuildVariant] = ()) -> None:
        self._variants: list[BuildVariant] = list(variants)
        self._listeners: list[VariantListener] = []

    def add(self, variant: BuildVariant) -> BuildVariant:
        self._variants.append(variant)
        for listener in list(self._listeners):
            listener(variant)
        return variant

    def all(self, listener: VariantListener) -> None:
        """Call ``listener`` for every variant added so far, then for each new one."""
        self._listeners.append(listener)
        # a variant added from inside the listener is delivered by ``add``
        for variant in list(self._variants):
            listener(variant)

    def __iter__(self) -> Iterator[BuildVariant]:
        return iter(list(self._variants))

    def __len__(self) -> int:
        return len(self._variants)


def normalize_version_name(version_name: str) -> str:
    """``"1.2.3"`` -> ``"123"``."""
    return version_name.replace(".", "")


def output_file_name(variant: BuildVariant) -> str:
    return f"{variant.flavor_name}_{normalize_version_name(variant.version_name)}_{variant.version_code}.apk"


def name_outputs(variant: BuildVariant) -> None:
    """Assign the release file name to every output of a release variant.

    Other build types are left untouched. The ``apkPath`` flag is reserved
    for a release directory outside the build tree and changes nothing here.
    """
    if not variant.is_release:
        return
    name = output_file_name(variant)
    for output in variant.outputs:
        output.output_file_name = name


def apply_output_names(variants: Iterable[BuildVariant]) -> list[BuildVariant]:
    """Run ``name_outputs`` over ``variants``; return the release ones."""
    renamed: list[BuildVariant] = []
    for variant in variants:
        name_outputs(variant)
        if variant.is_release:
            renamed.append(variant)
    return renamed
