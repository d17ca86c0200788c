"""Public short URL helpers."""


def normalize_path_prefix(path_prefix: str) -> str:
    """Turn a configured prefix into ``/a/b`` form, or "" when there is none.

    Redirect routes are mounted under the same value, so ``"s"``, ``"/s/"``
    and ``"//s"`` all serve and build ``/s/<code>``.
    """
    segments = [segment for segment in (path_prefix or "").split("/") if segment]
    if not segments:
        return ""
    return "/" + "/".join(segments)


def build_short_url(
    short_code: str,
    base_url: str,
    path_prefix: str = "",
) -> str:
    """Build the public URL a short code redirects from.

    Args:
        short_code: The short code
        base_url: Public base URL (e.g., https://sho.rt)
        path_prefix: Prefix the redirect route is mounted under (e.g., /s)

    Returns:
        Complete short URL
    """
    return f"{base_url.rstrip('/')}{normalize_path_prefix(path_prefix)}/{short_code}"
