"""Sample inventory and menu for a fresh burger restaurant."""

from datetime import datetime
from decimal import Decimal

from src.models.inventory import InventoryItem
from src.models.menu import MenuCategory, MenuItem, RecipeIngredient


def _stock(
    item_id: str,
    sku: str,
    name: str,
    quantity: float,
    unit: str,
    threshold: float,
    price_per_unit: str,
    category: str,
    last_restocked: str,
) -> InventoryItem:
    return InventoryItem(
        id=item_id,
        sku=sku,
        name=name,
        quantity=quantity,
        unit=unit,
        threshold=threshold,
        price_per_unit=Decimal(price_per_unit),
        category=category,
        last_restocked=datetime.fromisoformat(last_restocked),
    )


def _recipe(*pairs: tuple[str, float]) -> list[RecipeIngredient]:
    return [RecipeIngredient(inventory_id=item_id, quantity=qty) for item_id, qty in pairs]


def sample_inventory() -> list[InventoryItem]:
    """Fresh copies of the 23 starting ingredients."""
    return [
        _stock("inv-1", "BEEF-001", "Premium Ground Beef", 50, "kg", 10, "12.50", "meat", "2025-01-01"),
        _stock("inv-2", "BUN-002", "Brioche Buns", 100, "pcs", 20, "0.50", "pantry", "2025-01-02"),
        _stock("inv-3", "CHS-003", "Cheddar Cheese", 40, "slices", 15, "0.30", "dairy", "2025-01-01"),
        _stock("inv-4", "TOM-004", "Fresh Tomatoes", 20, "kg", 5, "2.00", "produce", "2025-01-02"),
        _stock("inv-5", "LET-005", "Iceberg Lettuce", 15, "heads", 5, "1.50", "produce", "2025-01-01"),
        _stock("inv-6", "POT-006", "Russet Potatoes", 80, "kg", 25, "0.80", "produce", "2024-12-30"),
        # Fries, onion rings and the chicken sandwich are fried in this
        _stock("inv-7", "OIL-007", "Canola Frying Oil", 20, "L", 5, "2.20", "pantry", "2025-01-01"),
        _stock("inv-8", "MUSH-008", "Wild Mushrooms", 15, "kg", 5, "8.00", "produce", "2025-01-02"),
        _stock("inv-9", "TRUF-009", "Truffle Oil", 5, "L", 1, "25.00", "pantry", "2024-12-25"),
        _stock("inv-10", "CHK-010", "Chicken Breast", 30, "kg", 10, "7.50", "meat", "2025-01-02"),
        _stock("inv-11", "PICK-011", "Pickles", 20, "jars", 5, "3.50", "pantry", "2025-01-01"),
        _stock("inv-12", "SLAW-012", "Coleslaw Mix", 10, "kg", 3, "2.00", "produce", "2025-01-02"),
        _stock("inv-13", "ONION-013", "Onions", 40, "kg", 10, "0.60", "produce", "2024-12-30"),
        _stock("inv-14", "RANCH-014", "Ranch Sauce", 10, "L", 2, "4.00", "pantry", "2025-01-01"),
        _stock("inv-15", "MILK-015", "Whole Milk", 30, "L", 10, "1.20", "dairy", "2025-01-02"),
        _stock("inv-16", "VAN-016", "Vanilla Bean Ice Cream", 20, "tubs", 5, "6.00", "dairy", "2025-01-01"),
        _stock("inv-17", "CHOC-017", "Dark Chocolate", 15, "kg", 5, "9.00", "pantry", "2024-12-20"),
        _stock("inv-18", "FLOUR-018", "Cake Flour", 50, "kg", 10, "1.00", "pantry", "2024-12-15"),
        _stock("inv-19", "PARM-019", "Parmesan Cheese", 10, "kg", 2, "14.00", "dairy", "2025-01-01"),
        _stock("inv-20", "CROUT-020", "Croutons", 15, "bags", 5, "2.50", "pantry", "2025-01-01"),
        _stock("inv-21", "DRESS-021", "Caesar Dressing", 10, "L", 2, "5.00", "pantry", "2025-01-01"),
        _stock("inv-22", "BBQ-022", "BBQ Sauce", 15, "L", 5, "3.50", "pantry", "2025-01-01"),
        _stock("inv-23", "BAC-023", "Smoked Bacon", 25, "kg", 5, "9.50", "meat", "2025-01-02"),
    ]


def sample_menu() -> list[MenuItem]:
    """Fresh copies of the 10 starting dishes."""
    return [
        MenuItem(
            id="menu-1",
            name="Classic Cheeseburger",
            description="Juicy 200g beef patty with melted cheddar, fresh lettuce, and tomatoes "
            "on a toasted brioche bun.",
            price=Decimal("14.99"),
            prep_time="12 min",
            category=MenuCategory.MAIN,
            ingredients=_recipe(
                ("inv-1", 0.2), ("inv-2", 1), ("inv-3", 2), ("inv-4", 0.1), ("inv-5", 0.1)
            ),
            rating=4.5,
            rating_count=120,
            chef="Chef Marco",
        ),
        MenuItem(
            id="menu-2",
            name="Double Smash Burger",
            description="Two smashed patties for maximum crust, triple cheese, and secret sauce.",
            price=Decimal("18.99"),
            prep_time="15 min",
            category=MenuCategory.MAIN,
            ingredients=_recipe(("inv-1", 0.3), ("inv-2", 1), ("inv-3", 3)),
            rating=4.8,
            rating_count=85,
            chef="Chef Sarah",
        ),
        MenuItem(
            id="menu-3",
            name="Crispy Fries",
            description="Hand-cut russet potatoes, double fried for ultimate crunch.",
            price=Decimal("5.99"),
            prep_time="8 min",
            category=MenuCategory.APPETIZER,
            ingredients=_recipe(("inv-6", 0.3), ("inv-7", 0.1)),
            rating=4.2,
            rating_count=200,
            chef="Chef Leo",
        ),
        MenuItem(
            id="menu-4",
            name="Truffle Mushroom Swiss",
            description="Sautéed wild mushrooms, truffle aioli, and melted Swiss cheese on a "
            "brioche bun.",
            price=Decimal("16.50"),
            prep_time="14 min",
            category=MenuCategory.MAIN,
            ingredients=_recipe(("inv-8", 0.1), ("inv-9", 0.01), ("inv-3", 1), ("inv-2", 1)),
            rating=4.7,
            rating_count=45,
            chef="Chef Marco",
        ),
        MenuItem(
            id="menu-5",
            name="Spicy Chicken Sandwich",
            description="Crispy fried chicken breast dipped in Nashville hot oil, with pickles "
            "and slaw.",
            price=Decimal("13.99"),
            prep_time="10 min",
            category=MenuCategory.MAIN,
            ingredients=_recipe(
                ("inv-10", 0.2), ("inv-2", 1), ("inv-11", 0.1), ("inv-12", 0.1), ("inv-7", 0.2)
            ),
            rating=4.4,
            rating_count=92,
            chef="Chef Sarah",
        ),
        MenuItem(
            id="menu-6",
            name="Onion Rings",
            description="Beer-battered onion rings served with zesty ranch dipping sauce.",
            price=Decimal("6.99"),
            prep_time="7 min",
            category=MenuCategory.APPETIZER,
            ingredients=_recipe(("inv-13", 0.2), ("inv-7", 0.1), ("inv-14", 0.05)),
            rating=4.1,
            rating_count=65,
            chef="Chef Leo",
        ),
        MenuItem(
            id="menu-7",
            name="Vanilla Bean Shake",
            description="Hand-spun milkshake made with real vanilla bean ice cream.",
            price=Decimal("5.50"),
            prep_time="4 min",
            category=MenuCategory.DRINK,
            ingredients=_recipe(("inv-15", 0.2), ("inv-16", 0.3)),
            rating=4.6,
            rating_count=150,
            chef="Barista Mike",
        ),
        MenuItem(
            id="menu-8",
            name="Chocolate Fudge Cake",
            description="Decadent three-layer chocolate cake with fudge frosting.",
            price=Decimal("8.99"),
            prep_time="2 min",
            category=MenuCategory.DESSERT,
            ingredients=_recipe(("inv-17", 0.1), ("inv-18", 0.1), ("inv-15", 0.05)),
            rating=4.9,
            rating_count=210,
            chef="Baker Anna",
        ),
        MenuItem(
            id="menu-9",
            name="Caesar Salad",
            description="Crisp romaine lettuce, parmesan cheese, croutons, and house-made "
            "Caesar dressing.",
            price=Decimal("10.99"),
            prep_time="6 min",
            category=MenuCategory.APPETIZER,
            ingredients=_recipe(("inv-5", 1), ("inv-19", 0.05), ("inv-20", 0.1), ("inv-21", 0.05)),
            rating=4.3,
            rating_count=55,
            chef="Chef Marco",
        ),
        MenuItem(
            id="menu-10",
            name="BBQ Bacon Burger",
            description="Smoky BBQ sauce, crispy onion straws, cheddar cheese, and bacon.",
            price=Decimal("15.99"),
            prep_time="13 min",
            category=MenuCategory.MAIN,
            ingredients=_recipe(
                ("inv-1", 0.2),
                ("inv-2", 1),
                ("inv-3", 1),
                ("inv-23", 0.1),
                ("inv-22", 0.05),
                ("inv-13", 0.05),
            ),
            rating=4.7,
            rating_count=78,
            chef="Chef Sarah",
        ),
    ]
