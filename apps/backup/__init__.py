"""JSON export/import of the whole booking database."""
