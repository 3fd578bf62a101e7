"""
Meeting Recorder Package.
Records a meeting tab and streams its audio to a transcription service, one job at a time.
"""

__version__ = "1.0.0"
