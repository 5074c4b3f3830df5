"""Category domain service."""

import re
from typing import Optional

from finledger.database.base import Database
from finledger.domain.entities import Category
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError, category_not_found

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

# (name, icon, color, is_income)
DEFAULT_CATEGORIES = [
    ("Income", "💰", "#10B981", True),
    ("Salary", "💵", "#10B981", True),
    ("Freelance", "💻", "#10B981", True),
    ("Investments", "📈", "#10B981", True),
    ("Housing", "🏠", "#6366F1", False),
    ("Rent/Mortgage", "🔑", "#6366F1", False),
    ("Utilities", "💡", "#6366F1", False),
    ("Transportation", "🚗", "#F59E0B", False),
    ("Food & Dining", "🍽️", "#EF4444", False),
    ("Groceries", "🛒", "#EF4444", False),
    ("Restaurants", "🍜", "#EF4444", False),
    ("Shopping", "🛍️", "#EC4899", False),
    ("Entertainment", "🎬", "#8B5CF6", False),
    ("Subscriptions", "📱", "#8B5CF6", False),
    ("Health", "🏥", "#14B8A6", False),
    ("Education", "📚", "#0EA5E9", False),
    ("Travel", "✈️", "#F97316", False),
    ("Personal Care", "💅", "#D946EF", False),
    ("Gifts", "🎁", "#F43F5E", False),
    ("Other", "📋", "#6B7280", False),
]


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        is_income: bool = False,
        icon: Optional[str] = None,
        color: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name, unique
            is_income: Whether the category collects income
            icon: Optional display icon
            color: Optional ``#RRGGBB`` display color
            parent_id: Optional parent category ID

        Returns:
            The created category

        Raises:
            ValidationError: If name or color is invalid
            ConflictError: If a category with this name exists
            NotFoundError: If the parent doesn't exist
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name cannot be empty")
        if color is not None and not _HEX_COLOR.match(color):
            raise ValidationError(f"Invalid color '{color}': expected #RRGGBB")
        if self.db.get_category_by_name(name) is not None:
            raise ConflictError(f"Category '{name}' already exists")
        if parent_id is not None and self.db.get_category(parent_id) is None:
            raise NotFoundError(category_not_found(parent_id))

        category_id = self.db.create_category(
            name=name, is_income=is_income, icon=icon, color=color, parent_id=parent_id
        )
        return self.db.get_category(category_id)

    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_name(self, name: str) -> Optional[Category]:
        """Get category by exact name."""
        return self.db.get_category_by_name(name)

    def resolve_category(self, category: str | int) -> Category:
        """Look a category up by ID or name.

        Raises:
            NotFoundError: If no category matches
        """
        if isinstance(category, int) or str(category).strip().isdigit():
            found = self.db.get_category(int(category))
            if found is None:
                raise NotFoundError(category_not_found(int(category)))
            return found
        found = self.db.get_category_by_name(category)
        if found is None:
            raise NotFoundError(f"Category '{category}' not found")
        return found

    def list_categories(self) -> list[Category]:
        """List all categories ordered by name."""
        return self.db.list_categories()

    def init_default_categories(self) -> int:
        """Create the default category set, skipping names that exist.

        Returns:
            Number of categories created
        """
        created = 0
        with self.db.transaction():
            for name, icon, color, is_income in DEFAULT_CATEGORIES:
                if self.db.get_category_by_name(name) is not None:
                    continue
                self.db.create_category(name=name, is_income=is_income, icon=icon, color=color)
                created += 1
        return created
