# Marks `assetdesk.deps` as a real Python package so imports like
# `from assetdesk.deps.auth import require_session` work reliably.
