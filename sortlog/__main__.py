"""Allow running as `python -m sortlog`."""

from sortlog.merge.sort_logcat import main

main()
