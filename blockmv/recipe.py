"""Crafting recipes and the registry of known recipes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple


class Shape(NamedTuple):
    """The width and height of a shaped recipe."""

    width: int
    height: int


@dataclass(frozen=True)
class Recipe:
    """Input and output items of a recipe, the block it is crafted on and its priority.

    Recipes with a lower priority are preferred over those with a higher one.
    """

    input: list[Any]
    output: list[Any]
    block: str = ""
    priority: int = 0


@dataclass(frozen=True)
class Shapeless(Recipe):
    """A recipe whose inputs may be placed in any arrangement."""


@dataclass(frozen=True)
class Shaped(Recipe):
    """A recipe whose inputs must match a shape of width times height items."""

    shape: Shape = field(kw_only=True)


_recipes: list[Recipe] = []


def register(recipe: Recipe) -> None:
    """Add ``recipe`` to the registry."""
    _recipes.append(recipe)


def recipes() -> list[Recipe]:
    """Return a copy of all registered recipes in registration order."""
    return list(_recipes)