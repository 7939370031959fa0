"""Infrastructure layer: filesystem workspace and the exiftool worker."""
