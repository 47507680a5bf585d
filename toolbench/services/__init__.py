"""Application services that sit between the API routes and vendor adapters."""
