from __future__ import annotations

# GH / API operations
GH_TIMEOUT_SECONDS = 60.0

# Releaser: version bump + asset upload for every target
RELEASER_TIMEOUT_SECONDS = 30 * 60.0

# Idempotent GH read retry policy
GH_READ_RETRY_ATTEMPTS = 3
GH_READ_RETRY_DELAY_SECONDS = 1.0
