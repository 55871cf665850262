"""Rule catalogs and the rule data model."""
