"""Models — enums and pydantic records shared by engines, services and the API."""
