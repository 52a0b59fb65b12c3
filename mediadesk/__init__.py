"""Registration, profile and media-upload front-end for the media backend."""
