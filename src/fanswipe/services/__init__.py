"""Service layer: API wrappers, local state managers and the swipe stack."""
