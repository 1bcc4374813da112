"""Identity resolution, credentials and HTTP auth dependencies."""
