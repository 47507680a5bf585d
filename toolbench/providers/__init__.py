"""Concrete adapters for storage backends and vendor APIs."""
