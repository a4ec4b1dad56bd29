"""
Ingredient model with pack pricing.

An ingredient is bought in packs (e.g., "Plain flour, 1.5 kg bag, £1.20").
The pack quantity is stored normalised to a base unit (g, ml, each or
slices); the unit the user typed is kept in original_unit so the edit form
can show it back.
"""

from sqlalchemy import CheckConstraint, Column, Float, Index, JSON, Numeric, String, Text
from sqlalchemy.orm import relationship

from .base import BaseModel


class Ingredient(BaseModel):
    """
    Ingredient model representing a purchasable ingredient.

    Attributes:
        name: Ingredient name (unique)
        category: Category (e.g., "Flour", "Dairy")
        pack_quantity: Amount in one pack, in pack_unit
        pack_unit: Base unit of pack_quantity ("g", "ml", "each", "slices")
        original_unit: Unit the pack size was entered in (e.g., "kg")
        pack_price: Cost of one pack in currency
        currency: ISO currency code (e.g., "GBP")
        density_g_per_ml: Grams per millilitre, needed only to bridge mass and volume
        batch_pricing: Optional volume-discount tiers, a list of
            {"pack_quantity", "pack_price"} or
            {"pack_quantity", "pack_price", "purchase_unit", "unit_size"}
        allergens: Comma-separated allergen list
        notes: Additional notes
    """

    __tablename__ = "ingredients"

    name = Column(String(200), nullable=False, unique=True, index=True)
    category = Column(String(100), nullable=True, index=True)

    # Pack pricing
    pack_quantity = Column(Float, nullable=False)
    pack_unit = Column(String(20), nullable=False)
    original_unit = Column(String(20), nullable=True)
    pack_price = Column(Numeric(10, 4), nullable=False)
    currency = Column(String(3), nullable=False, default="GBP")

    density_g_per_ml = Column(Float, nullable=True)
    batch_pricing = Column(JSON, nullable=True)

    allergens = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)

    recipe_items = relationship("RecipeItem", back_populates="ingredient")

    __table_args__ = (
        CheckConstraint("pack_quantity > 0", name="ck_ingredient_pack_quantity_positive"),
        CheckConstraint("pack_price >= 0", name="ck_ingredient_pack_price_non_negative"),
        CheckConstraint(
            "density_g_per_ml IS NULL OR density_g_per_ml > 0",
            name="ck_ingredient_density_positive",
        ),
        Index("idx_ingredient_category", "category"),
    )

    def __repr__(self) -> str:
        """String representation of ingredient."""
        return (
            f"Ingredient(id={self.id}, name='{self.name}', "
            f"pack={self.pack_quantity} {self.pack_unit} @ {self.pack_price})"
        )
