"""HTTP surface for the forum hooks (``POST /hooks/{hook_name}``)."""
