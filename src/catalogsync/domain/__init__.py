"""Domain layer: catalog model, reconciliation core and ports."""
