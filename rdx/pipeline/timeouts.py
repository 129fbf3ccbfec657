from __future__ import annotations

# go build inside the builder container, image pull included
GO_BUILD_TIMEOUT_SECONDS = 30 * 60.0

# Image build (local load or multi-platform push)
IMAGE_BUILD_TIMEOUT_SECONDS = 30 * 60.0

# Registry login and engine probes
ENGINE_TIMEOUT_SECONDS = 60.0

# gh release create / upload
GH_TIMEOUT_SECONDS = 60.0
GH_UPLOAD_TIMEOUT_SECONDS = 15 * 60.0

# Transient gh failure retry policy (idempotent calls only)
GH_RETRY_ATTEMPTS = 3
GH_RETRY_DELAY_SECONDS = 1.0
