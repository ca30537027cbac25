"""Helpers shared by the domain layer: retrying GETs, lookups, parsers and name folding."""
