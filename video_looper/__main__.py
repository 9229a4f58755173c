import sys

from video_looper.cli import main

sys.exit(main())
