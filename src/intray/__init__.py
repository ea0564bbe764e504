"""intray - chunked, concurrent file uploads to an intray server."""
