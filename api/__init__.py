"""REST API over the DesertWatch dashboard session."""
