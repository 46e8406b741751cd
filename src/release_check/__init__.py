"""release-check: verify that service instances report an expected release."""

__version__ = "0.1.0"
