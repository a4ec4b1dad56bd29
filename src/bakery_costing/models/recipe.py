"""
Recipe models.

This module contains:
- Recipe: Recipe metadata, yield and selling price
- RecipeSection: Display grouping of recipe items (e.g., "Dough", "Filling")
- RecipeItem: One ingredient usage (quantity + unit) within a recipe
- RecipeComponent: A recipe used inside another recipe (sub-recipe)
"""

from typing import List

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .base import BaseModel


class Recipe(BaseModel):
    """
    Recipe model.

    Attributes:
        name: Recipe name (unique)
        category: Recipe category (e.g., "Breads")
        yield_quantity: Amount of output in yield_unit
        yield_unit: Base unit of the output ("g", "ml", "each", "slices")
        selling_price: Price of one output unit, if set
        notes: Additional notes
    """

    __tablename__ = "recipes"

    name = Column(String(200), nullable=False, unique=True, index=True)
    category = Column(String(100), nullable=True, index=True)

    yield_quantity = Column(Float, nullable=False)
    yield_unit = Column(String(20), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=True)

    notes = Column(Text, nullable=True)

    # Relationships
    recipe_items = relationship(
        "RecipeItem",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeItem.sort_order",
        lazy="selectin",
    )
    sections = relationship(
        "RecipeSection",
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="RecipeSection.sort_order",
        lazy="selectin",
    )
    sub_recipes = relationship(
        "RecipeComponent",
        foreign_keys="RecipeComponent.recipe_id",
        back_populates="parent_recipe",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    used_in_recipes = relationship(
        "RecipeComponent",
        foreign_keys="RecipeComponent.component_recipe_id",
        back_populates="sub_recipe",
        lazy="select",
    )

    __table_args__ = (
        CheckConstraint("yield_quantity > 0", name="ck_recipe_yield_positive"),
    )

    @property
    def items(self) -> List["RecipeItem"]:
        """Items that are not grouped under a section."""
        return [item for item in self.recipe_items if item.section_id is None]

    def __repr__(self) -> str:
        """String representation of recipe."""
        return f"Recipe(id={self.id}, name='{self.name}')"


class RecipeSection(BaseModel):
    """
    Named group of items within a recipe.

    Sections exist for display only; cost aggregation flattens them.
    """

    __tablename__ = "recipe_sections"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)

    recipe = relationship("Recipe", back_populates="sections")
    items = relationship(
        "RecipeItem",
        back_populates="section",
        order_by="RecipeItem.sort_order",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("recipe_id", "name", name="uq_recipe_section_name"),
        Index("idx_recipe_section_recipe", "recipe_id"),
    )


class RecipeItem(BaseModel):
    """
    One ingredient usage within a recipe.

    Attributes:
        recipe_id: Foreign key to Recipe
        ingredient_id: Foreign key to Ingredient
        section_id: Optional foreign key to RecipeSection
        quantity: Amount used, in unit
        unit: Any supported unit (not necessarily a base unit)
        notes: Optional notes (e.g., "sifted")
        sort_order: Display order
    """

    __tablename__ = "recipe_items"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    ingredient_id = Column(
        Integer, ForeignKey("ingredients.id", ondelete="RESTRICT"), nullable=False
    )
    section_id = Column(
        Integer, ForeignKey("recipe_sections.id", ondelete="CASCADE"), nullable=True
    )

    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    notes = Column(String(500), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    recipe = relationship("Recipe", back_populates="recipe_items")
    section = relationship("RecipeSection", back_populates="items")
    ingredient = relationship("Ingredient", back_populates="recipe_items", lazy="joined")

    __table_args__ = (
        Index("idx_recipe_item_recipe", "recipe_id"),
        Index("idx_recipe_item_ingredient", "ingredient_id"),
    )

    def __repr__(self) -> str:
        """String representation of recipe item."""
        return (
            f"RecipeItem(recipe_id={self.recipe_id}, "
            f"ingredient_id={self.ingredient_id}, "
            f"quantity={self.quantity}, unit='{self.unit}')"
        )


class RecipeComponent(BaseModel):
    """
    A recipe used as part of another recipe.

    The quantity is expressed in a unit sharing a base with the sub-recipe's
    yield unit (e.g., 300 g of a filling that yields 1200 g).

    Attributes:
        recipe_id: Parent recipe
        component_recipe_id: Recipe being included
        quantity: Amount of the sub-recipe used
        unit: Unit of quantity
        notes: Optional notes
    """

    __tablename__ = "recipe_components"

    recipe_id = Column(Integer, ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False)
    component_recipe_id = Column(
        Integer, ForeignKey("recipes.id", ondelete="RESTRICT"), nullable=False
    )

    quantity = Column(Float, nullable=False)
    unit = Column(String(20), nullable=False)
    notes = Column(String(500), nullable=True)

    parent_recipe = relationship(
        "Recipe",
        foreign_keys=[recipe_id],
        back_populates="sub_recipes",
    )
    sub_recipe = relationship(
        "Recipe",
        foreign_keys=[component_recipe_id],
        back_populates="used_in_recipes",
        lazy="joined",
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_recipe_component_quantity_positive"),
        CheckConstraint(
            "recipe_id != component_recipe_id",
            name="ck_recipe_component_no_self_reference",
        ),
        UniqueConstraint(
            "recipe_id",
            "component_recipe_id",
            name="uq_recipe_component_recipe_component",
        ),
    )

    def __repr__(self) -> str:
        """String representation of recipe component."""
        return (
            f"RecipeComponent(recipe_id={self.recipe_id}, "
            f"component_recipe_id={self.component_recipe_id}, "
            f"quantity={self.quantity}, unit='{self.unit}')"
        )
