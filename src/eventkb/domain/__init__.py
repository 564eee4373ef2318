"""Domain layer: model, ports and the resolution/reconciliation services."""
