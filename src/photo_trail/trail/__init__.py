"""Route reconstruction and playback over geotagged photos."""
