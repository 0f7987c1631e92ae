"""
Selection policies decide which parsed posts a successful poll persists.

The default, FirstOfSequencePolicy, stores only the first post of the
document. Feeds conventionally list their newest item first, so this keeps
the newest item, but any other items published between two polls are never
stored. AllUnseenPolicy stores every post whose dedup key is not yet in the
store.
"""
import abc
from typing import List

from feedpoller.config import SelectionPolicyType
from feedpoller.models.post import NewPost
from feedpoller.storage import BaseFeedStore


class SelectionPolicy(abc.ABC):
    """Abstract base class for selection policies."""

    name: str

    @abc.abstractmethod
    async def select(self, posts: List[NewPost], store: BaseFeedStore) -> List[NewPost]:
        """
        Pick the posts to persist.

        Args:
            posts: Parsed posts in document order, never empty
            store: Store the posts will be written to

        Returns:
            List[NewPost]: Posts to persist, in the order to write them
        """


class FirstOfSequencePolicy(SelectionPolicy):
    """Persist only the first post of the parsed sequence."""

    name = SelectionPolicyType.FIRST.value

    async def select(self, posts: List[NewPost], store: BaseFeedStore) -> List[NewPost]:
        return posts[:1]


class AllUnseenPolicy(SelectionPolicy):
    """Persist every parsed post whose dedup key is not stored yet."""

    name = SelectionPolicyType.ALL_UNSEEN.value

    async def select(self, posts: List[NewPost], store: BaseFeedStore) -> List[NewPost]:
        selected = []
        seen = set()
        for post in posts:
            # A document can repeat an id; keep its first occurrence
            if post.uid in seen:
                continue
            seen.add(post.uid)
            if not await store.has_post(post.uid):
                selected.append(post)
        return selected


def get_selection_policy(policy_type: SelectionPolicyType) -> SelectionPolicy:
    """Return the policy instance for a configured policy type."""
    if policy_type == SelectionPolicyType.ALL_UNSEEN:
        return AllUnseenPolicy()
    return FirstOfSequencePolicy()
