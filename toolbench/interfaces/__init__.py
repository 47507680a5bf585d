"""Abstract interfaces for every swappable backend and vendor adapter."""
