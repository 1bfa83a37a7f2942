"""Seed data shared by the migration and the in-memory store."""

DEFAULT_CATEGORIES: list[dict[str, str]] = [
    {"name": "Groceries", "icon": "🛒", "color": "#3b82f6"},
    {"name": "Entertainment", "icon": "🎬", "color": "#10b981"},
    {"name": "Transportation", "icon": "🚗", "color": "#8b5cf6"},
    {"name": "Utilities", "icon": "💡", "color": "#f59e0b"},
    {"name": "Shopping", "icon": "🛍️", "color": "#ef4444"},
    {"name": "Dining", "icon": "🍽️", "color": "#06b6d4"},
    {"name": "Healthcare", "icon": "⚕️", "color": "#ec4899"},
    {"name": "Income", "icon": "💰", "color": "#22c55e"},
]
