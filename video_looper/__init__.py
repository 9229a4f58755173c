"""
Video Looper

Loops a video N times with ffmpeg and muxes the result with a separate audio track.
"""

__version__ = "1.0.0"
