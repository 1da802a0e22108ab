"""Browser-facing API routers."""
