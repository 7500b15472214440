from urllib.parse import quote

from contributions.models import UserSettings


TWEET_INTENT_URL = "https://twitter.com/intent/tweet"


def build_tweet_intent_url(
    text: str, url: str | None = None, hashtags: str | None = None
) -> str:
    """Build a tweet composer link, omitting empty parameters."""

    parameters: list[str] = []
    for name, value in (("text", text), ("url", url), ("hashtags", hashtags)):
        if value and value.strip():
            parameters.append(f"{name}={quote(value, safe='')}")

    if not parameters:
        return TWEET_INTENT_URL
    return f"{TWEET_INTENT_URL}?{'&'.join(parameters)}"


def share_hashtags(settings: UserSettings) -> str:
    tags = [
        tag.strip().lstrip("#")
        for tag in (settings.share_hashtag1, settings.share_hashtag2, settings.share_hashtag3)
    ]
    return ",".join(tag for tag in tags if tag)


def share_target_url(
    settings: UserSettings, username: str, github_base_url: str = "https://github.com"
) -> str | None:
    if settings.share_url_option == "custom":
        return settings.share_url.strip() or None
    if settings.share_url_option == "none":
        return None
    if not username:
        return None
    return f"{github_base_url.rstrip('/')}/{username}"


def share_link(
    settings: UserSettings, username: str, github_base_url: str = "https://github.com"
) -> str:
    return build_tweet_intent_url(
        text=settings.share_text,
        url=share_target_url(settings, username, github_base_url),
        hashtags=share_hashtags(settings),
    )
