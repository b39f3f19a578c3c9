"""Resolve Maven coordinates and download checksum-verified artifacts."""
