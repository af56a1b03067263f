"""Board domain: models, reorder rules, optimistic state and engines."""
