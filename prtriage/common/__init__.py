"""Small helpers shared across prtriage packages."""
