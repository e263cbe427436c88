"""Names of the values release tasks store in the workflow context."""

CURRENT_VERSION = "current_version"
NEXT_VERSION = "next_version"
BUMP_LEVEL = "bump_level"
CHANGELOG_SECTION = "changelog_content"
COMMIT_SHA = "commit_sha"
TAG_NAME = "tag_name"
RELEASE_URL = "release_url"
CHANGED_FILES = "changed_files"

# Reasons recorded for skipped tasks.
SKIP_BUMP_REASON = "skipBump enabled"
SKIP_CHANGELOG_REASON = "skipChangelog enabled"
SKIP_GIT_REASON = "skipGit enabled"
SKIP_PUSH_REASON = "skipPush enabled"
SKIP_GITHUB_RELEASE_REASON = "skipGitHubRelease enabled"
SKIP_PREFLIGHT_REASON = "skipPreflightCheck enabled"
NO_CHANGES_REASON = "no version or changelog changes to commit"
