"""Core types and the output contract shared by every pipeline stage."""
