from __future__ import annotations

import os

# telemetry configures itself on import; keep test output quiet.
os.environ.setdefault("TYPEWRITER_DISABLE_CONSOLE", "1")
