"""
Entry point for the Meeting Recorder API.
"""

import sys
import uvicorn

from meeting_recorder.config import settings, setup_logging
from meeting_recorder.api import create_app


def run():
    """Run the Meeting Recorder API server."""
    setup_logging()

    print("\n" + "=" * 60)
    print("MEETING RECORDER API")
    print("=" * 60)
    print(f"📍 Host: {settings.server.host}:{settings.server.port}")
    print(f"🎵 Audio streaming: {'enabled' if settings.audio_streaming.enabled else 'disabled'}")
    print("=" * 60 + "\n")

    uvicorn.run(
        create_app(),
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    try:
        run()
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        sys.exit(1)
