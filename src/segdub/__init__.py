"""
Segmented Dubbing Pipeline - re-voice a video in another language.

The audio track is:
- Extracted as 16 kHz mono PCM with ffmpeg
- Split into fixed 60s chunks (capped by a minutes budget)
- Transcribed, translated and synthesized chunk by chunk with OpenAI
- Concatenated in chunk order and muxed back onto the original video
"""

__version__ = "0.1.0"
