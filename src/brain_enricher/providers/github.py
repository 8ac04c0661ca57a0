"""GitHub URL classification.

Content ids by resource:

- repository:         ``owner/repo`` (blob/tree/wiki paths collapse to the repo)
- issue / PR / discussion: ``owner/repo/issues/42``, ``owner/repo/pull/7``,
  ``owner/repo/discussions/3``
- gist:               ``gist/user/gist_id``
"""

from urllib.parse import SplitResult

from brain_enricher.models.provider import ProviderType
from brain_enricher.providers.base import ContentProvider, descriptor, path_segments

GIST_HOST = "gist.github.com"

# Top-level pages that look like owner names but are not repositories
NON_REPO_PAGES = frozenset(
    {
        "settings",
        "marketplace",
        "explore",
        "topics",
        "trending",
        "collections",
        "events",
        "sponsors",
        "login",
        "signup",
        "features",
        "pricing",
        "enterprise",
    }
)

THREAD_KINDS = ("issues", "pull", "discussions")


class GitHubProvider(ContentProvider):
    descriptor = descriptor(
        ProviderType.GITHUB,
        "GitHub",
        ("github.com", "www.github.com", GIST_HOST),
    )

    def extract_id(self, url: SplitResult) -> str | None:
        segments = path_segments(url)

        if (url.hostname or "").lower() == GIST_HOST:
            if len(segments) >= 2:
                return f"gist/{segments[0]}/{segments[1]}"
            return None

        if len(segments) < 2 or segments[0].lower() in NON_REPO_PAGES:
            return None

        owner, repo = segments[0], segments[1]
        if len(segments) >= 4 and segments[2] in THREAD_KINDS and segments[3].isdigit():
            return f"{owner}/{repo}/{segments[2]}/{segments[3]}"
        return f"{owner}/{repo}"

    def canonical_url(self, content_id: str, url: SplitResult) -> str:
        if content_id.startswith("gist/"):
            return f"https://{GIST_HOST}/{content_id.removeprefix('gist/')}"
        return f"https://github.com/{content_id}"
