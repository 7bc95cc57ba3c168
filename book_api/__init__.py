"""Book catalog REST API with token authentication and role-based access."""
