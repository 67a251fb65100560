"""Analysis services: header location, extraction, role resolution,
classification, aggregation and batch orchestration."""
