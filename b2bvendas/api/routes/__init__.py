"""HTTP routes, one router per area, mounted under ``/api`` by ``create_app``."""
