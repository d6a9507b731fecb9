"""
Subscription Service
Symmetric subscriber / subscription edges stored on two user documents
"""

from typing import Any, List, Optional, Tuple

from sqlalchemy.orm.attributes import flag_modified

from src.app.models import User
from src.domain.engagement import set_membership
from src.domain.exceptions import InvalidOperationError, ResourceNotFoundError
from src.domain.interfaces import IUserRepository
from src.domain.models import Page, ReconciliationReport, SubscriptionResult
from src.domain.schemas import UserSummary
from src.services.base_service import BaseService


class SubscriptionService(BaseService):
    """
    Subscription graph service

    An edge A -> B exists only when B is in A.subscriptions AND A is in
    B.subscribers. A toggle rewrites both documents in one version-checked
    commit, so concurrent toggles on either side are serialized. Edges left
    one-sided by older writes or external edits are repaired by
    reconcile_user(), which also re-derives subscriber_count.
    """

    def __init__(self, user_repo: IUserRepository, config=None):
        super().__init__(config=config)
        self.user_repo = user_repo

    def get_service_name(self) -> str:
        return "subscription"

    async def _require_user(self, user_id: str) -> User:
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        return user

    # ========================================================================
    # Toggle
    # ========================================================================

    async def subscribe(self, subscriber_id: str, channel_id: str) -> SubscriptionResult:
        """
        Subscribe to a channel, or unsubscribe when already subscribed

        Membership is decided from fresh copies of both documents inside the
        retry loop. A half-written edge counts as "not subscribed"; the
        toggle then writes both halves so they agree afterwards.

        Args:
            subscriber_id: Acting user
            channel_id: Channel owner

        Returns:
            SubscriptionResult with the channel's subscriber count

        Raises:
            InvalidOperationError: Self-subscription
            ResourceNotFoundError: Unknown channel or subscriber
        """
        if subscriber_id == channel_id:
            raise InvalidOperationError(
                "Cannot subscribe to your own channel", user_id=subscriber_id
            )

        await self._require_user(channel_id)

        async def toggle_edge(subscriber: Any) -> Tuple[bool, int]:
            channel = await self.user_repo.get_by_id(channel_id)
            if channel is None:
                raise ResourceNotFoundError("User", channel_id)

            edge_exists = channel_id in (
                subscriber.subscriptions or []
            ) and subscriber_id in (channel.subscribers or [])
            subscribed = not edge_exists

            subscriber.subscriptions = set_membership(
                subscriber.subscriptions, channel_id, subscribed
            )
            channel.subscribers = set_membership(
                channel.subscribers, subscriber_id, subscribed
            )
            channel.subscriber_count = len(channel.subscribers)
            # Both versions move even when one half was already in place
            flag_modified(subscriber, "subscriptions")
            flag_modified(channel, "subscribers")
            return subscribed, channel.subscriber_count

        outcome = await self.user_repo.mutate(subscriber_id, toggle_edge)
        if outcome is None:
            raise ResourceNotFoundError("User", subscriber_id)

        subscribed, subscriber_count = outcome[1]
        self.log_info(
            f"{subscriber_id} {'subscribed to' if subscribed else 'unsubscribed from'} "
            f"{channel_id} ({subscriber_count} subscribers)"
        )
        return SubscriptionResult(subscribed=subscribed, subscriber_count=subscriber_count)

    # ========================================================================
    # Reconciliation
    # ========================================================================

    async def reconcile_user(self, user_id: str) -> ReconciliationReport:
        """
        Drop halves of edges stored on `user_id` that the other side does
        not confirm, and re-derive subscriber_count

        The other sides are read inside the retry loop. A subscribe touching
        this user commits to this document too, so a repair based on a stale
        read fails the version check and is recomputed.
        """

        async def repair(doc: Any) -> Tuple[int, int]:
            channels = await self.user_repo.get_many(doc.subscriptions or [])
            confirmed_channels = {
                channel.id for channel in channels if user_id in (channel.subscribers or [])
            }
            followers = await self.user_repo.get_many(doc.subscribers or [])
            confirmed_followers = {
                follower.id
                for follower in followers
                if user_id in (follower.subscriptions or [])
            }

            subscriptions = [c for c in (doc.subscriptions or []) if c in confirmed_channels]
            subscribers = [s for s in (doc.subscribers or []) if s in confirmed_followers]
            edges = (len(doc.subscriptions or []) - len(subscriptions)) + (
                len(doc.subscribers or []) - len(subscribers)
            )
            count_fixed = int(doc.subscriber_count != len(subscribers))

            if edges or count_fixed:
                doc.subscriptions = subscriptions
                doc.subscribers = subscribers
                doc.subscriber_count = len(subscribers)
            return edges, count_fixed

        outcome = await self.user_repo.mutate(user_id, repair)
        if outcome is None:
            raise ResourceNotFoundError("User", user_id)

        edges, count_fixed = outcome[1]
        if edges or count_fixed:
            self.log_warning(
                f"Repaired user {user_id}: {edges} one-sided edge(s), "
                f"subscriber_count {'fixed' if count_fixed else 'ok'}"
            )
        return ReconciliationReport(
            users_scanned=1, edges_repaired=edges, counts_repaired=count_fixed
        )

    async def reconcile_all(self, batch_size: Optional[int] = None) -> ReconciliationReport:
        """
        Reconcile every user, scanning ids in batches

        Args:
            batch_size: Users per batch (default from config)

        Returns:
            Totals over all users
        """
        batch_size = batch_size or self.config.celery.reconcile_batch_size
        report = ReconciliationReport()
        after: Optional[str] = None

        while True:
            ids = await self.user_repo.list_ids_after(after, batch_size)
            if not ids:
                break
            for user_id in ids:
                try:
                    report.merge(await self.reconcile_user(user_id))
                except ResourceNotFoundError:
                    self.log_debug(f"User {user_id} deleted during reconciliation")
            after = ids[-1]

        self.log_info(
            f"Reconciled {report.users_scanned} users: "
            f"{report.edges_repaired} edges, {report.counts_repaired} counts repaired"
        )
        return report

    # ========================================================================
    # Listings
    # ========================================================================

    async def _page_of_users(
        self, ids: List[str], page: int, page_size: Optional[int]
    ) -> Page[UserSummary]:
        page_size = page_size or self.config.content.default_page_size
        skip, limit = self.calculate_pagination(page, page_size)
        users = await self.user_repo.get_many(ids[skip : skip + limit])
        items = [UserSummary.model_validate(user) for user in users]
        return Page.build(items, len(ids), page, page_size)

    async def list_subscribers(
        self, channel_id: str, page: int = 1, page_size: Optional[int] = None
    ) -> Page[UserSummary]:
        """Users following `channel_id`, in subscription order"""
        await self.reconcile_user(channel_id)
        channel = await self._require_user(channel_id)
        return await self._page_of_users(list(channel.subscribers or []), page, page_size)

    async def list_subscriptions(
        self, user_id: str, page: int = 1, page_size: Optional[int] = None
    ) -> Page[UserSummary]:
        """Channels `user_id` follows, in subscription order"""
        await self.reconcile_user(user_id)
        user = await self._require_user(user_id)
        return await self._page_of_users(list(user.subscriptions or []), page, page_size)
