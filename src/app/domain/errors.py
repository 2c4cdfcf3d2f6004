from __future__ import annotations


class PackError(Exception):
    pass


class RecipeNotFoundError(PackError):
    def __init__(self, recipe_id: str):
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class InvalidPackSizeError(PackError, ValueError):
    def __init__(self, size: int):
        super().__init__(f"Pack size must be at least 1, got {size}")
        self.size = size


class UnknownThemeError(PackError, ValueError):
    def __init__(self, theme: str):
        super().__init__(f"Unknown pack theme: {theme}")
        self.theme = theme


class RepositoryError(PackError):
    def __init__(self, operation: str, reason: str):
        super().__init__(f"Repository error during {operation}: {reason}")
        self.operation = operation
        self.reason = reason


class ExplanationDecodeError(PackError):
    def __init__(self, raw: str, reason: str = "Invalid explanation payload"):
        super().__init__(f"{reason}: {raw[:80]}")
        self.raw = raw
        self.reason = reason
