"""Components shared by the local-whisper command line."""
