"""Service layer: headline business logic and visitor geolocation."""
