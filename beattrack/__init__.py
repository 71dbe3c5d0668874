"""Real-time beat tracking, onset detection functions and their building blocks."""

__version__ = "0.1.0"

__all__ = ["btrack", "circular_buffer", "onset_detection", "tempo", "windows"]