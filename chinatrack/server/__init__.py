"""ChinaTrack REST API server."""
