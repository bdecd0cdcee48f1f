"""Infrastructure helpers: errors, logging, locking and process cleanup."""
