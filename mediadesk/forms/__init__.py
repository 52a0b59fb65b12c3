"""Form controllers and their validation schemas."""
