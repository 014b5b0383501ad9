"""Shared constants for GreenGate.

Vendor protocol values for the Aliyun Green text-scan API and the forum-side
constants (hook names, profile fields, error codes) used across modules.
No magic strings in other modules — import from here.
"""

# ─── Aliyun Green endpoint ───────────────────────────────────────────────────

# Text-scan endpoint. ``{region}`` is the bare region name, e.g. "shanghai".
GREEN_ENDPOINT_TEMPLATE: str = "http://green.cn-{region}.aliyuncs.com/green/text/scan"

# ─── Request signing (ACS signature v1.0) ────────────────────────────────────

ACS_HEADER_PREFIX: str = "x-acs-"
ACS_API_VERSION: str = "2018-05-09"
ACS_SIGNATURE_VERSION: str = "1.0"
ACS_SIGNATURE_METHOD: str = "HMAC-SHA1"

# Literal used twice in the canonical string (Accept + Content-Type slots).
JSON_CONTENT_TYPE: str = "application/json"

# Fixed headers carried by every request from the signing client.
ACS_FIXED_HEADERS: dict[str, str] = {
    "x-acs-version": ACS_API_VERSION,
    "x-acs-signature-version": ACS_SIGNATURE_VERSION,
    "x-acs-signature-method": ACS_SIGNATURE_METHOD,
    "accept": JSON_CONTENT_TYPE,
}

# ─── Scan request body ───────────────────────────────────────────────────────

BIZ_TYPE: str = "bbs"
SCENES: tuple[str, ...] = ("antispam",)

# The only suggestion that lets content through.
SUGGESTION_PASS: str = "pass"

# Envelope and per-task success code returned by the service.
GREEN_OK_CODE: int = 200

# ─── Forum hooks ─────────────────────────────────────────────────────────────

HOOK_POST_CREATE: str = "filter:post.create"
HOOK_TOPIC_POST: str = "filter:topic.post"
HOOK_USER_UPDATE_PROFILE: str = "filter:user.updateProfile"

# Profile fields checked on update, in check order.
PROFILE_FIELDS: tuple[str, ...] = ("username", "signature", "aboutme", "location", "fullname")

# ─── Error codes (translation keys rendered by the forum) ────────────────────

ERROR_SCAN_FAIL: str = "[[green:scan_fail]]"
ERROR_ILLEGAL_CONTENT: str = "[[green:illegal_content]]"

# ─── Forum-side configuration keys ───────────────────────────────────────────

CONFIG_KEY_ACCESS_KEY_ID: str = "aliGreenConfig:ACCESS_KEY_ID"
CONFIG_KEY_SECRET_ACCESS_KEY: str = "aliGreenConfig:SECRET_ACCESS_KEY"
CONFIG_KEY_REGION: str = "aliGreenConfig:REGION"
