"""Decoy web server request analysis."""
