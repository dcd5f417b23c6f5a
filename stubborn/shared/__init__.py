"""Types, errors and response helpers shared across stubborn."""
