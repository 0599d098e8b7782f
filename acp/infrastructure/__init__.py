"""Infrastructure: external cache stores."""
