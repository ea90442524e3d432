"""Service layer: the binder, the page runner and the render result contract."""
