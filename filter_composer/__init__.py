"""
Composable field-level filters for collections of structured records.
Contains three main sub-packages:
- filters - catalog of filter definitions, active filter set, in-memory evaluator and query builder
- types - enums and aliases shared across the package (field kinds, operators, sort directions)
- config - package settings loaded from settings.yaml
"""
