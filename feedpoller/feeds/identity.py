"""
Stable identity for posts discovered in feeds.
"""


def generate_post_uid(feed_id: int, native_id: str) -> str:
    """
    Build the dedup key for an item.

    The key combines the owning feed's identifier with the identifier the feed
    itself gives the item (Atom ``id`` or RSS ``guid``), so it stays the same
    across repeated parses even if the item's title or link is edited upstream.
    The feed id is an integer, so the first comma always ends it and keys from
    different feeds can never collide.

    Args:
        feed_id: Store identifier of the owning feed
        native_id: Feed-native item identifier

    Returns:
        str: Dedup key
    """
    return f"{feed_id},{native_id}"
